from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from ailibrary.core.errors import ConfigurationError

SUPABASE_URL_ENV = "NEXT_PUBLIC_SUPABASE_URL"
SUPABASE_KEY_ENV = "NEXT_PUBLIC_SUPABASE_ANON_KEY"
DB_PATH_ENV = "AILIB_DB_PATH"

DEFAULT_IMPORT_BATCH_SIZE = 10
DEFAULT_IMPORT_DELAY_SECONDS = 5.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
ENV_FILENAMES = (".env.local", ".env")


@dataclass(frozen=True)
class AppSettings:
    project_root: Path
    supabase_url: str | None
    supabase_key: str | None
    db_path: Path | None
    import_batch_size: int = DEFAULT_IMPORT_BATCH_SIZE
    import_delay_seconds: float = DEFAULT_IMPORT_DELAY_SECONDS
    request_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    @property
    def uses_local_db(self) -> bool:
        return self.db_path is not None

    def require_datastore(self) -> None:
        """Fail fast when neither a local database nor both Supabase variables are configured."""
        if self.uses_local_db:
            return
        if not self.supabase_url:
            raise ConfigurationError(f"{SUPABASE_URL_ENV} not found in environment or .env.local")
        if not self.supabase_key:
            raise ConfigurationError(f"{SUPABASE_KEY_ENV} not found in environment or .env.local")


def _read_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _read_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def load_env_files(project_root: Path) -> list[Path]:
    loaded: list[Path] = []
    for name in ENV_FILENAMES:
        candidate = project_root / name
        if candidate.is_file():
            # Variables already exported in the shell take precedence.
            load_dotenv(candidate, override=False)
            loaded.append(candidate)
    return loaded


def load_settings(project_root: Path | None = None, *, read_env_files: bool = True) -> AppSettings:
    root = (project_root or Path.cwd()).expanduser().resolve()
    if read_env_files:
        load_env_files(root)

    db_path_raw = _read_str_env(DB_PATH_ENV)
    db_path = Path(db_path_raw).expanduser() if db_path_raw else None
    if db_path is not None and not db_path.is_absolute():
        db_path = root / db_path

    return AppSettings(
        project_root=root,
        supabase_url=_read_str_env(SUPABASE_URL_ENV),
        supabase_key=_read_str_env(SUPABASE_KEY_ENV),
        db_path=db_path,
        import_batch_size=_read_int_env("AILIB_IMPORT_BATCH_SIZE", DEFAULT_IMPORT_BATCH_SIZE),
        import_delay_seconds=_read_float_env("AILIB_IMPORT_DELAY_SECONDS", DEFAULT_IMPORT_DELAY_SECONDS),
        request_timeout_seconds=_read_float_env("AILIB_HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS),
    )
