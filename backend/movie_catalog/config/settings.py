import os
from pathlib import Path

from dotenv import load_dotenv

# The project-root .env wins over the shell so edits take effect on restart.
load_dotenv(override=True)


def _get_env_int(key: str, default: int) -> int:
    """Read an integer env var, falling back to the default when unset."""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"env var {key} expects an integer, got {raw}") from exc


def _get_env_float(key: str, default: float) -> float:
    """Read a float env var, falling back to the default when unset."""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"env var {key} expects a float, got {raw}") from exc


def _get_env_bool(key: str, default: bool) -> bool:
    """Read a boolean env var (true/false/1/0/yes/no/on/off)."""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return raw.lower() in {"1", "true", "y", "yes", "on"}


# ===== Paths =====

CONFIG_DIR = Path(__file__).resolve().parent  # backend/movie_catalog/config/
_BACKEND_DIR = CONFIG_DIR.parent.parent  # backend/

if _BACKEND_DIR.name == "backend":
    PROJECT_ROOT = _BACKEND_DIR.parent
else:
    PROJECT_ROOT = Path.cwd()

RUNTIME_ROOT = Path(os.getenv("RUNTIME_ROOT", PROJECT_ROOT / "files")).expanduser()


# ===== TMDB =====

TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
TMDB_API_KEY = os.getenv("TMDB_API_KEY", "")
TMDB_API_TOKEN = os.getenv("TMDB_API_TOKEN", "")
TMDB_TIMEOUT_S = _get_env_float("TMDB_TIMEOUT_S", 10.0)
TMDB_LANGUAGE = os.getenv("TMDB_LANGUAGE", "")  # empty = let TMDB pick

TMDB_IMAGE_BASE_URL = os.getenv("TMDB_IMAGE_BASE_URL", "https://image.tmdb.org/t/p/w500")
POSTER_PLACEHOLDER_URL = os.getenv(
    "POSTER_PLACEHOLDER_URL", "https://via.placeholder.com/500x750?text=No+Image"
)


# ===== Query cache =====

QUERY_STALE_MINUTES = _get_env_float("QUERY_STALE_MINUTES", 5.0)
QUERY_RETRY = _get_env_int("QUERY_RETRY", 2)
QUERY_RETRY_DELAY_S = _get_env_float("QUERY_RETRY_DELAY_S", 1.0)
QUERY_CACHE_MAX_SIZE = _get_env_int("QUERY_CACHE_MAX_SIZE", 200)


# ===== View =====

SEARCH_DEBOUNCE_MS = _get_env_int("SEARCH_DEBOUNCE_MS", 500)
OVERVIEW_SNIPPET_CHARS = _get_env_int("OVERVIEW_SNIPPET_CHARS", 160)
LOAD_ON_SEARCH_COMMIT = _get_env_bool("LOAD_ON_SEARCH_COMMIT", True)


# ===== Watchlist storage =====

# memory | file
WATCHLIST_STORAGE_BACKEND = os.getenv("WATCHLIST_STORAGE_BACKEND", "file").strip().lower()
WATCHLIST_STORAGE_PATH = Path(
    os.getenv("WATCHLIST_STORAGE_PATH", RUNTIME_ROOT / "local_storage.json")
).expanduser()
WATCHLIST_STORAGE_KEY = os.getenv("WATCHLIST_STORAGE_KEY", "watchlist")


# ===== FastAPI / Uvicorn =====

SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = _get_env_int("SERVER_PORT", 8000)
SERVER_RELOAD = _get_env_bool("SERVER_RELOAD", False)
SERVER_LOG_LEVEL = os.getenv("SERVER_LOG_LEVEL", "info")

# One worker: the view state lives in-process and is single-client.
UVICORN_CONFIG = {
    "host": SERVER_HOST,
    "port": SERVER_PORT,
    "reload": SERVER_RELOAD,
    "log_level": SERVER_LOG_LEVEL,
    "workers": 1,
}
