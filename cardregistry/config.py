"""Application configuration"""

from dataclasses import dataclass, field
from os import getenv
from pathlib import Path


@dataclass
class Config:
    app_name: str = "cardregistry"
    app_version: str = "0.1.0"

    # Optional database URL for Postgres or other databases
    database_url_env: str | None = field(
        default=getenv("CARDREGISTRY_DATABASE_URL", None)
    )
    # flat file with person=/issuer=/account=/card= records, loaded on startup
    data_file_path: str = field(
        default=getenv("CARDREGISTRY_DATA_FILE", "data/initial-data.txt")
    )
    # seconds between diagnostics reports, 0 disables the reporter
    stats_report_interval: int = field(
        default=int(getenv("CARDREGISTRY_STATS_INTERVAL", "600"))
    )

    @property
    def database_path(self) -> Path:
        return Path("./data/") / Path(f"{self.app_name}.db")

    @property
    def database_url(self) -> str:
        # Use provided DATABASE_URL if available, else fall back to SQLite file
        if self.database_url_env:
            return self.database_url_env
        return f"sqlite:///{self.database_path}"


def get_config():
    return Config()
