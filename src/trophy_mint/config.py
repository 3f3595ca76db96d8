"""Process-wide configuration loaded from the environment.

Values come from environment variables, with ``.env`` files loaded first:

    export STEAM_API_KEY="your_api_key"
    export REDIS_URL="redis://localhost:6379"
    export NODE_HTTP_URL="https://base-sepolia.g.alchemy.com/v2/<key>"
    export ACHIEVEMENT_NFT_CONTRACT_ADDRESS="0x..."
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from rich.logging import RichHandler

DEFAULT_DATA_DIR = Path.home() / ".trophy_mint"


def load_env_files() -> None:
    """Load .env files - current directory first, then the data directory."""
    load_dotenv(Path.cwd() / ".env")
    load_dotenv(DEFAULT_DATA_DIR / ".env")


class Settings(BaseModel):
    """Runtime settings shared by the web app, the CLI and the worker."""

    steam_api_key: str | None = None
    redis_url: str = "redis://localhost:6379"
    cache_ttl_seconds: int = 3600
    http_timeout_seconds: float = 30.0

    node_http_url: str | None = None
    contract_address: str | None = None
    minter_address: str | None = None
    poll_interval_seconds: float = 15.0
    blocks_per_poll: int = Field(default=500, gt=0)
    cold_start_lookback_blocks: int = Field(default=100, ge=0)

    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset keys."""
        env_map = {
            "steam_api_key": "STEAM_API_KEY",
            "redis_url": "REDIS_URL",
            "cache_ttl_seconds": "CACHE_TTL_SECONDS",
            "http_timeout_seconds": "HTTP_TIMEOUT_SECONDS",
            "node_http_url": "NODE_HTTP_URL",
            "contract_address": "ACHIEVEMENT_NFT_CONTRACT_ADDRESS",
            "minter_address": "MINTER_ADDRESS",
            "poll_interval_seconds": "POLL_INTERVAL_SECONDS",
            "blocks_per_poll": "BLOCKS_PER_POLL",
            "cold_start_lookback_blocks": "COLD_START_LOOKBACK_BLOCKS",
            "data_dir": "DATA_DIR",
            "log_level": "LOG_LEVEL",
        }
        values = {}
        for field, env_name in env_map.items():
            value = os.getenv(env_name)
            if value:
                values[field] = value
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance for this process."""
    load_env_files()
    return Settings.from_env()


def configure_logging(level: str = "INFO") -> None:
    """Route log records through rich for CLI and server processes."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # httpx logs every request URL at INFO, and Steam URLs carry the API key
    logging.getLogger("httpx").setLevel(logging.WARNING)
