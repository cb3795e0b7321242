"""Runtime configuration for liftlog."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent / "data"


@dataclass
class Settings:
    """Settings resolved from the environment."""

    data_dir: Path = DATA_DIR
    db_name: str = "liftlog.db"
    default_user: str = "local"
    log_level: str = "WARNING"
    max_finished_sessions: int = 20
    max_open_sessions: int = 200

    @property
    def db_path(self) -> Path:
        """Full path of the SQLite database file."""
        return self.data_dir / self.db_name


def load_settings() -> Settings:
    """Build settings from LIFTLOG_* environment variables."""
    data_dir = os.environ.get("LIFTLOG_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir) if data_dir else DATA_DIR,
        db_name=os.environ.get("LIFTLOG_DB_NAME", "liftlog.db"),
        default_user=os.environ.get("LIFTLOG_USER", "local"),
        log_level=os.environ.get("LIFTLOG_LOG_LEVEL", "WARNING").upper(),
        max_finished_sessions=int(os.environ.get("LIFTLOG_MAX_FINISHED_SESSIONS", "20")),
        max_open_sessions=int(os.environ.get("LIFTLOG_MAX_OPEN_SESSIONS", "200")),
    )


def configure_logging(level: str) -> None:
    """Configure root logging for CLI and server processes."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
