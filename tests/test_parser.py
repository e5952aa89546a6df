import pytest
from pathlib import Path

from vaultcards.exceptions import DocumentReadError
from vaultcards.hashing import generate_card_id
from vaultcards.parser import (
    find_cards_in_content,
    find_markdown_files,
    load_cards_from_vault,
    read_document,
)


def block(body: str) -> str:
    return f"```anki\n{body}\n```"


# --- Tests for find_cards_in_content ---


class TestFindCardsInContent:
    def test_single_card(self):
        content = "```anki\nWhat is the capital of France?\n?\nParis\n```"
        cards = find_cards_in_content(content, "Geo")

        assert len(cards) == 1
        card = cards[0]
        assert card.front == "What is the capital of France?"
        assert card.back == "Paris"
        assert card.source_file == "Geo"
        assert card.position == 0
        assert card.id == "card_a2rh4w"

    def test_candidate_cards_have_no_scheduling_state(self):
        card = find_cards_in_content(block("Q\n?\nA"), "Notes")[0]
        assert card.last_reviewed is None
        assert card.next_review is None
        assert card.ease_factor is None
        assert card.interval is None
        assert card.review_count is None

    def test_two_cards_in_one_block(self):
        content = block("Q1\n?\nA1\n\nQ2\n?\nA2")
        cards = find_cards_in_content(content, "Notes")

        assert len(cards) == 2
        assert [(c.front, c.back) for c in cards] == [
            ("Q1", "A1"),
            ("Q2", "A2"),
        ]
        # Cards from the same block share the block's offset.
        assert cards[0].position == cards[1].position == 0

    def test_blank_lines_inside_answer_do_not_split_card(self):
        content = block("Q\n?\nfirst paragraph\n\nsecond paragraph")
        cards = find_cards_in_content(content, "Notes")

        assert len(cards) == 1
        assert cards[0].back == "first paragraph\n\nsecond paragraph"

    def test_multiline_answer_followed_by_another_card(self):
        content = block("Q1\n?\nline one\nline two\n\nQ2\n?\nA2")
        cards = find_cards_in_content(content, "Notes")

        assert [c.back for c in cards] == ["line one\nline two", "A2"]

    def test_front_and_back_are_trimmed(self):
        cards = find_cards_in_content(block("   Q  \n?\n\tA  "), "Notes")
        assert (cards[0].front, cards[0].back) == ("Q", "A")
        assert cards[0].id == generate_card_id("Q", "A", "Notes")

    def test_block_without_separator_yields_nothing(self):
        assert find_cards_in_content(block("Just some text"), "Notes") == []

    def test_two_separators_yield_nothing(self):
        content = block("Q\n?\nA\n?\nB")
        assert find_cards_in_content(content, "Notes") == []

    def test_empty_back_is_skipped(self):
        content = "```anki\nQ\n?\n   \n```"
        assert find_cards_in_content(content, "Notes") == []

    def test_malformed_card_does_not_affect_neighbours(self):
        content = block("Broken card without answer\n\nQ\n?\nA")
        cards = find_cards_in_content(content, "Notes")
        # The blank line before "Q" only splits because a separator follows,
        # so the first chunk is dropped and the real card survives.
        assert [(c.front, c.back) for c in cards] == [("Q", "A")]

    def test_other_fence_languages_are_ignored(self):
        content = "```python\nQ\n?\nA\n```"
        assert find_cards_in_content(content, "Notes") == []

    def test_unterminated_block_is_ignored(self):
        assert find_cards_in_content("```anki\nQ\n?\nA\n", "Notes") == []

    def test_block_ends_at_first_closing_fence(self):
        content = "```anki\nQ\n?\nA\n```python\nprint(1)\n```\n```"
        cards = find_cards_in_content(content, "Notes")
        assert len(cards) == 1
        assert cards[0].back == "A"

    def test_positions_of_multiple_blocks(self):
        first = block("Q1\n?\nA1")
        second = block("Q2\n?\nA2")
        content = f"intro\n{first}\n\nmiddle text\n{second}\n"
        cards = find_cards_in_content(content, "Notes")

        assert cards[0].position == content.index(first)
        assert cards[1].position == content.index(second)

    def test_parsing_is_idempotent(self):
        content = block("Q1\n?\nA1\n\nQ2\n?\nA2") + "\n" + block("Q3\n?\nA3")
        first = find_cards_in_content(content, "Notes")
        second = find_cards_in_content(content, "Notes")
        assert [c.model_dump() for c in first] == [
            c.model_dump() for c in second
        ]

    def test_moving_a_card_keeps_its_id(self):
        original = find_cards_in_content(block("Q\n?\nA"), "Notes")[0]
        moved = find_cards_in_content(
            "new heading\n\n" + block("Q\n?\nA"), "Notes"
        )[0]
        assert moved.position != original.position
        assert moved.id == original.id


# --- Tests for vault discovery ---


class TestLoadCardsFromVault:
    def test_finds_visible_markdown_files_only(self, vault_dir: Path):
        files = find_markdown_files(vault_dir)
        assert [p.relative_to(vault_dir).as_posix() for p in files] == [
            "Empty.md",
            "Geo.md",
            "history/History.md",
        ]

    def test_loads_cards_in_file_order(self, vault_dir: Path):
        cards, errors = load_cards_from_vault(vault_dir)

        assert not errors
        assert [c.front for c in cards] == [
            "What is the capital of France?",
            "When did the Berlin Wall fall?",
            "Who was the first Roman emperor?",
        ]
        assert [c.source_file for c in cards] == ["Geo", "History", "History"]

    def test_missing_vault_directory(self, tmp_path: Path):
        cards, errors = load_cards_from_vault(tmp_path / "nope")
        assert cards == []
        assert len(errors) == 1
        assert "does not exist" in str(errors[0])

    def test_unreadable_document_does_not_abort_scan(self, vault_dir: Path):
        (vault_dir / "Broken.md").write_bytes(b"\xff\xfe\xfa not utf-8")

        cards, errors = load_cards_from_vault(vault_dir)

        assert len(cards) == 3
        assert len(errors) == 1
        assert errors[0].file_path.name == "Broken.md"

    def test_read_document_missing_file(self, tmp_path: Path):
        with pytest.raises(DocumentReadError, match="File not found"):
            read_document(tmp_path / "missing.md")
