import logging
import re
from pathlib import Path
from typing import List, Tuple

from .constants import CARD_BLOCK_TAG, QA_SEPARATOR
from .exceptions import DocumentReadError
from .hashing import generate_card_id
from .models import Card

logger = logging.getLogger(__name__)

# The block ends at the first closing fence; nested fences are not special-cased.
CARD_BLOCK_PATTERN = re.compile(
    r"```" + re.escape(CARD_BLOCK_TAG) + r"\n(.*?)\n```", re.DOTALL
)
# A blank line starts a new card only if a separator line still follows it.
CARD_SPLIT_PATTERN = re.compile(
    r"\n\n(?=.+?\n" + re.escape(QA_SEPARATOR) + r"\n)", re.DOTALL
)
QA_SEPARATOR_PATTERN = re.compile(r"\n" + re.escape(QA_SEPARATOR) + r"\n")


def _parse_card(text: str, source_file: str, position: int):
    parts = QA_SEPARATOR_PATTERN.split(text)
    if len(parts) != 2:
        return None
    front, back = parts[0].strip(), parts[1].strip()
    if not front or not back:
        return None
    return Card(
        id=generate_card_id(front, back, source_file),
        front=front,
        back=back,
        source_file=source_file,
        position=position,
    )


def find_cards_in_content(content: str, source_file: str) -> List[Card]:
    """
    Extract every card from the ``anki`` fenced blocks in a document.

    Parameters:
        content (str): Raw document text.
        source_file (str): Logical name of the document, used for provenance and the card id.

    Returns:
        List[Card]: Candidate cards in document order, without scheduling state. Sub-blocks that do not split into exactly one non-empty front and back are skipped silently.
    """
    cards: List[Card] = []
    for match in CARD_BLOCK_PATTERN.finditer(content):
        position = match.start()
        for chunk in CARD_SPLIT_PATTERN.split(match.group(1)):
            card = _parse_card(chunk, source_file, position)
            if card is not None:
                cards.append(card)
    return cards


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def find_markdown_files(vault_dir: Path) -> List[Path]:
    """All visible ``*.md`` files under vault_dir, sorted for a stable card order."""
    return sorted(
        path
        for path in vault_dir.rglob("*.md")
        if path.is_file() and not _is_hidden(path, vault_dir)
    )


def read_document(file_path: Path) -> str:
    """
    Read one vault document as UTF-8.

    Raises:
        DocumentReadError: If the file is missing, unreadable, or not valid UTF-8.
    """
    try:
        return file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DocumentReadError(file_path, "File not found.", e) from e
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(
            file_path, f"Could not read file: {e}", e
        ) from e


def load_cards_from_vault(
    vault_dir: Path,
) -> Tuple[List[Card], List[DocumentReadError]]:
    """
    Discover and parse every Markdown document in the vault.

    A document that cannot be read is logged and reported in the error list; the remaining documents are still parsed.

    Parameters:
        vault_dir (Path): Root directory of the Markdown vault.

    Returns:
        Tuple[List[Card], List[DocumentReadError]]: All candidate cards in file order, and the per-document read errors.
    """
    if not vault_dir.is_dir():
        return [], [
            DocumentReadError(
                vault_dir, f"Vault directory does not exist: {vault_dir}"
            )
        ]

    files = find_markdown_files(vault_dir)
    logger.info("Found %s Markdown files in %s", len(files), vault_dir)

    all_cards: List[Card] = []
    all_errors: List[DocumentReadError] = []
    files_with_cards = 0

    for file_path in files:
        try:
            content = read_document(file_path)
        except DocumentReadError as e:
            logger.error("Error processing file %s: %s", file_path, e)
            all_errors.append(e)
            continue

        cards = find_cards_in_content(content, file_path.stem)
        if cards:
            files_with_cards += 1
            all_cards.extend(cards)

    logger.info(
        "Found %s cards in %s of %s files with %s errors.",
        len(all_cards),
        files_with_cards,
        len(files),
        len(all_errors),
    )
    return all_cards, all_errors
