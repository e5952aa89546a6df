"""
Content-derived card identifiers.

The id is a 32-bit rolling hash over UTF-16 code units, so the same card
text always maps to the same id across indexing runs. It is a fingerprint,
not a cryptographic digest: collisions are possible and are not resolved.
"""

from .constants import CARD_ID_PREFIX

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def _utf16_units(text: str):
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def rolling_hash(text: str) -> int:
    """Signed 32-bit ``h * 31 + unit`` hash of the text's UTF-16 code units."""
    h = 0
    for unit in _utf16_units(text):
        h = _to_int32(h * 31 + unit)
    return h


def generate_card_id(front: str, back: str, source_file: str) -> str:
    """
    Derive the stable identifier for a card.

    Moving a card within its document keeps the id; editing its text or
    renaming the document produces a new one.
    """
    content = f"{front}|{back}|{source_file}"
    return CARD_ID_PREFIX + _to_base36(abs(rolling_hash(content)))
