import pytest
from pathlib import Path
from datetime import datetime, timedelta, timezone
from typing import List

from vaultcards.models import Card, StudySettings
from vaultcards.hashing import generate_card_id
from vaultcards.store import CardStore


# each test runs with cwd in its temp dir so no stray .env is picked up
@pytest.fixture(autouse=True)
def go_to_tmpdir(tmp_path: Path, monkeypatch):
    """
    Run the test from its tmp_path and clear VAULTCARDS_* environment variables.
    """
    for var in (
        "VAULTCARDS_VAULT_DIR",
        "VAULTCARDS_DATA_FILE",
        "VAULTCARDS_STARTUP_INDEX_DELAY",
        "VAULTCARDS_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used across scheduling and selection tests."""
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_card(
    front: str,
    back: str = "Answer",
    source_file: str = "Notes",
    position: int = 0,
    **state,
) -> Card:
    """Build a card whose id is derived from its content, like the parser does."""
    return Card(
        id=generate_card_id(front, back, source_file),
        front=front,
        back=back,
        source_file=source_file,
        position=position,
        **state,
    )


@pytest.fixture
def new_cards() -> List[Card]:
    """Five merged but never-reviewed cards."""
    return [
        make_card(f"Question {i}", ease_factor=2.5, interval=0, review_count=0)
        for i in range(5)
    ]


@pytest.fixture
def reviewed_card(now: datetime) -> Card:
    """A card reviewed two days ago and due again in one day."""
    return make_card(
        "Reviewed question",
        last_reviewed=now - timedelta(days=2),
        next_review=now + timedelta(days=1),
        ease_factor=2.2,
        interval=3,
        review_count=2,
    )


@pytest.fixture
def settings() -> StudySettings:
    return StudySettings()


@pytest.fixture
def data_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "data.json"


@pytest.fixture
def store(data_path: Path) -> CardStore:
    return CardStore(data_path)


GEO_NOTE = """# Geography

Some prose before the card.

```anki
What is the capital of France?
?
Paris
```
"""

HISTORY_NOTE = """# History

```anki
When did the Berlin Wall fall?
?
1989

Who was the first Roman emperor?
?
Augustus
```
"""


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    """
    Create a small vault: two notes with three cards, a note without cards,
    and a hidden directory that must be ignored.
    """
    vault = tmp_path / "vault"
    (vault / "history").mkdir(parents=True)
    (vault / ".obsidian").mkdir()
    (vault / "Geo.md").write_text(GEO_NOTE, encoding="utf-8")
    (vault / "history" / "History.md").write_text(HISTORY_NOTE, encoding="utf-8")
    (vault / "Empty.md").write_text("No cards here.\n", encoding="utf-8")
    (vault / ".obsidian" / "Hidden.md").write_text(GEO_NOTE, encoding="utf-8")
    (vault / "image.txt").write_text(GEO_NOTE, encoding="utf-8")
    return vault


@pytest.fixture
def card_factory():
    """Factory fixture building content-addressed cards with optional state."""
    return make_card


@pytest.fixture
def populated_store(store: CardStore, new_cards, reviewed_card, now) -> CardStore:
    """Store with five new cards and one card that is not due yet."""
    store.save_cards(new_cards + [reviewed_card], now=now)
    store.save_settings(StudySettings(cards_per_session=3))
    return store
