import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar

from dotenv import dotenv_values, load_dotenv

from chatbot_server.core.errors import ConfigError

load_dotenv()

T = TypeVar("T", int, float)

REQUIRED_ENV_VARS = (
    "MONGODB_CONNECTION_URI",
    "MONGODB_DATABASE_NAME",
    "VECTOR_SEARCH_INDEX_NAME",
)

DEFAULT_PORT = 9000


def parse_number(key: str, raw: Optional[str], default: T, cast: Callable[[str], T]) -> T:
    """Parse a numeric setting; unset or empty gives `default`, garbage raises ConfigError."""
    if not raw:
        return default
    kind = "an integer" if cast is int else "a number"
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be {kind}, got {raw!r}") from exc


HOST = os.getenv("HOST", "0.0.0.0")
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "gemma3:1b")
EMBEDDING_SERVICE_URL = os.getenv(
    "EMBEDDING_SERVICE_URL",
    "http://localhost:8000"
)
STATIC_SITE_DIR = os.getenv("STATIC_SITE_DIR", "static")
MODEL_ADAPTER_TIMEOUT_S = parse_number(
    "MODEL_ADAPTER_TIMEOUT_S", os.getenv("MODEL_ADAPTER_TIMEOUT_S"), 30.0, float
)
MAX_HISTORY_MESSAGES = parse_number(
    "MAX_HISTORY_MESSAGES", os.getenv("MAX_HISTORY_MESSAGES"), 20, int
)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection secrets read once at startup."""

    connection_uri: str
    database_name: str
    vector_index_name: str


def load_env_vars(env_path: str | Path) -> ConnectionConfig:
    """
    Read the required MongoDB settings from an env file.

    Values already set in the process environment win over the file, the
    same precedence python-dotenv uses when loading. The process environment
    itself is not modified.

    Raises:
        ConfigError: the file does not exist or a required key is missing.
    """
    path = Path(env_path)
    if not path.is_file():
        raise ConfigError(f"Environment file not found: {path}")

    file_values: Dict[str, Optional[str]] = dotenv_values(path)

    values: Dict[str, str] = {}
    missing = []
    for key in REQUIRED_ENV_VARS:
        value = os.environ.get(key) or file_values.get(key)
        if not value:
            missing.append(key)
        else:
            values[key] = value

    if missing:
        raise ConfigError(
            f"Missing required environment variables in {path}: {', '.join(missing)}"
        )

    return ConnectionConfig(
        connection_uri=values["MONGODB_CONNECTION_URI"],
        database_name=values["MONGODB_DATABASE_NAME"],
        vector_index_name=values["VECTOR_SEARCH_INDEX_NAME"],
    )


def get_port(env_path: Optional[str | Path] = None) -> int:
    """
    Port to listen on, from PORT (default 9000).

    PORT may also be set in the env file at `env_path`; the process
    environment still wins, as for the required settings.
    """
    raw = os.environ.get("PORT")
    if not raw and env_path is not None and Path(env_path).is_file():
        raw = dotenv_values(env_path).get("PORT")
    return parse_number("PORT", raw, DEFAULT_PORT, int)
