"""Application settings.

Reads configuration from environment variables, loading a repo-root .env
file first when one exists:
- RIVHIT_API_TOKEN: Rivhit Online API token (empty means mock mode)
- RIVHIT_USE_MOCK: "true" forces canned mock responses
- RIVHIT_BASE_URL: Rivhit Online API service root
- RIVHIT_TIMEOUT_SECONDS: Per-request timeout for ERP calls
- INVENTORY_STATE_DIR: Directory holding persisted ledger/registry state
- LOG_LEVEL / LOG_JSON: Logging level and JSON output toggle
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]

env_path = REPO_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_RIVHIT_BASE_URL = "https://api.rivhit.co.il/online/RivhitOnlineAPI.svc"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration."""
    rivhit_api_token: str = ""
    rivhit_use_mock: bool = False
    rivhit_base_url: str = DEFAULT_RIVHIT_BASE_URL
    rivhit_timeout_seconds: int = 30
    state_dir: Path = REPO_ROOT / ".state"
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def mock_mode(self) -> bool:
        """Mock responses are used when forced or when no token is configured."""
        return self.rivhit_use_mock or not self.rivhit_api_token

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            rivhit_api_token=os.getenv("RIVHIT_API_TOKEN", ""),
            rivhit_use_mock=_env_bool("RIVHIT_USE_MOCK"),
            rivhit_base_url=os.getenv("RIVHIT_BASE_URL", DEFAULT_RIVHIT_BASE_URL).rstrip("/"),
            rivhit_timeout_seconds=int(os.getenv("RIVHIT_TIMEOUT_SECONDS", "30")),
            state_dir=Path(os.getenv("INVENTORY_STATE_DIR", str(REPO_ROOT / ".state"))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("LOG_JSON"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings (read once)."""
    return Settings.from_env()
