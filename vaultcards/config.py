"""
Centralized application configuration for vaultcards.
"""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_STARTUP_INDEX_DELAY

DATA_DIR_NAME = ".vaultcards"
DATA_FILE_NAME = "data.json"


def default_data_path(vault_dir: Path) -> Path:
    """Returns the default data file location inside a vault."""
    return vault_dir / DATA_DIR_NAME / DATA_FILE_NAME


class AppConfig(BaseSettings):
    """
    Defines application settings, loaded from environment variables or .env files.

    Study settings (session sizes, algorithm tuning) live in the data file,
    not here.
    """
    model_config = SettingsConfigDict(
        env_prefix="VAULTCARDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # The vault can be overridden by the VAULTCARDS_VAULT_DIR env var.
    vault_dir: Path = Path(".")

    # Defaults to <vault_dir>/.vaultcards/data.json when unset.
    data_file: Optional[Path] = None

    # Delay before the automatic startup indexing pass.
    startup_index_delay: float = DEFAULT_STARTUP_INDEX_DELAY

    log_level: str = "WARNING"

    def resolve_data_file(self, vault_dir: Optional[Path] = None) -> Path:
        """Explicit data file if configured, else the default inside the vault."""
        if self.data_file is not None:
            return self.data_file
        return default_data_path(vault_dir or self.vault_dir)
