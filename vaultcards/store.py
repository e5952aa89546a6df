"""
Explicit handle over the JSON data file holding study settings and cards.

Every read-modify-write goes through ``CardStore.transaction()`` so that two
operations sharing a handle cannot interleave and lose an update.
"""

import json
import logging
import os
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import ValidationError

from .exceptions import SettingsError, StoreReadError, StoreWriteError
from .models import Card, CardStoreData, StudySettings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
CARDS_KEY = "cards"


class CardStore:
    """Loads and saves the card store and settings sections of a data file."""

    def __init__(self, data_path: Union[str, Path]):
        """
        Parameters:
            data_path (Union[str, Path]): Location of the JSON data file. It does not need to exist yet; parent directories are created on first save.
        """
        self.data_path = Path(data_path)
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["CardStore"]:
        """Hold the store lock for a load-mutate-save sequence."""
        with self._lock:
            yield self

    # --- Raw file access ---

    def _read_raw(self) -> Dict[str, Any]:
        if not self.data_path.exists():
            return {}
        try:
            raw = json.loads(self.data_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise StoreReadError(
                f"Could not read data file {self.data_path}: {e}", e
            ) from e
        except json.JSONDecodeError as e:
            raise StoreReadError(
                f"Data file {self.data_path} is not valid JSON: {e}", e
            ) from e
        if not isinstance(raw, dict):
            raise StoreReadError(
                f"Top level of data file {self.data_path} must be an object."
            )
        return raw

    def _write_raw(self, raw: Dict[str, Any]) -> None:
        tmp_path = self.data_path.with_name(self.data_path.name + ".tmp")
        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(raw, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.data_path)
        except OSError as e:
            raise StoreWriteError(
                f"Could not write data file {self.data_path}: {e}", e
            ) from e

    # --- Cards ---

    def load_card_data(self) -> Optional[CardStoreData]:
        """
        Load the persisted card store.

        Returns:
            Optional[CardStoreData]: The store, or None if nothing has been indexed yet.

        Raises:
            StoreReadError: If the data file or its cards section is malformed.
        """
        with self._lock:
            section = self._read_raw().get(CARDS_KEY)
        if section is None:
            return None
        try:
            return CardStoreData.model_validate(section)
        except ValidationError as e:
            raise StoreReadError(
                f"Invalid card data in {self.data_path}: {e}", e
            ) from e

    def load_cards(self) -> List[Card]:
        """All persisted cards in store order; empty if nothing is indexed."""
        data = self.load_card_data()
        return list(data.cards) if data else []

    def _save_card_data(self, data: CardStoreData) -> None:
        with self._lock:
            raw = self._read_raw()
            raw[CARDS_KEY] = data.model_dump(
                mode="json", by_alias=True, exclude_none=True
            )
            self._write_raw(raw)

    def save_cards(
        self, cards: List[Card], now: Optional[datetime] = None
    ) -> CardStoreData:
        """
        Replace the card store with the given cards, keeping the settings section.

        Raises:
            StoreError: If the existing file cannot be read or the new one cannot be written.
        """
        data = CardStoreData.from_cards(cards, now)
        self._save_card_data(data)
        logger.info(f"Saved {data.total_cards} cards to {self.data_path}")
        return data

    def update_card(self, card: Card) -> bool:
        """
        Write one reviewed card back into the store, matched by id.

        Returns:
            bool: False when no stored card has this id (nothing is written).
        """
        with self.transaction():
            data = self.load_card_data()
            if data is None:
                return False
            idx = data.find_index(card.id)
            if idx is None:
                logger.warning(f"Card {card.id} is no longer in the store.")
                return False
            data.cards[idx] = card
            self._save_card_data(data)
        return True

    # --- Settings ---

    def load_settings(self) -> StudySettings:
        """
        Load study settings, applying defaults for missing keys.

        Raises:
            SettingsError: If a value is out of range or an unknown key is present.
            StoreReadError: If the data file itself is malformed.
        """
        with self._lock:
            section = self._read_raw().get(SETTINGS_KEY) or {}
        try:
            return StudySettings.model_validate(section)
        except ValidationError as e:
            raise SettingsError(
                f"Invalid settings in {self.data_path}: {e}", e
            ) from e

    def save_settings(self, settings: StudySettings) -> None:
        """Persist settings, keeping the cards section."""
        with self._lock:
            raw = self._read_raw()
            raw[SETTINGS_KEY] = settings.model_dump(mode="json", by_alias=True)
            self._write_raw(raw)
