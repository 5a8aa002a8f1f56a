"""Location of the gamelink database.

The sqlite file lives in ``GAMELINK_DATA_DIR`` or, when unset, in the per-user data
directory of the platform. ``DATABASE_URI`` replaces the file with any SQLAlchemy URL.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_text

APP_DIR_NAME: Final[str] = "gamelink"
DEFAULT_DB_FILENAME: Final[str] = "gamelink.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.database_filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    @classmethod
    def sqlite_file(cls, path: Path) -> DatabaseConfig:
        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(uri=f"sqlite+pysqlite:///{path}")


def _user_data_home() -> Path:
    if os.name == "nt":
        local = env_text("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = env_text("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    configured = env_text("GAMELINK_DATA_DIR")
    base = Path(configured) if configured else _user_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=base.expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    uri = env_text("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig.sqlite_file((storage or get_storage_config()).database_path)
