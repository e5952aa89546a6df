from pathlib import Path
from typing import Optional


class VaultCardsError(Exception):
    """Base exception for vaultcards errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class StoreError(VaultCardsError):
    """Base exception for errors touching the persisted data file."""

    pass


class StoreReadError(StoreError):
    """Raised when the data file exists but cannot be read or decoded."""

    pass


class StoreWriteError(StoreError):
    """Raised when the data file cannot be written."""

    pass


class SettingsError(VaultCardsError):
    """Raised for invalid or unknown study settings."""

    pass


class DocumentReadError(VaultCardsError):
    """Raised (or collected) when a single vault document cannot be read."""

    def __init__(
        self,
        file_path: Path,
        message: str,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message, original_exception)
        self.file_path = file_path

    def __str__(self) -> str:
        return f"File: {self.file_path.name} | Error: {self.args[0]}"
