from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

APP_NAME = "boletos-cli"

KEYRING_SERVICE = "boletos-cli"
KEYRING_TOKEN_USERNAME = "access-token"
KEYRING_REFRESH_USERNAME = "refresh-token"

SCOPES = ("company", "admin")

DEFAULT_TIMEOUT = 30


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Returns None if only platformdirs would resolve and the dir does not exist yet.
    """
    from_env = os.environ.get("BOLETOS_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str, kind: str) -> Path:
    """Resolve a directory from env var, repo layout, or platform default.

    Priority: 1) env var, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    # Development layout: src/boletos/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / default_subdir
    if candidate.is_dir():
        return candidate
    if kind == "config":
        return Path(platformdirs.user_config_dir(APP_NAME))
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("BOLETOS_CONFIG_DIR", "config", kind="config")


def get_data_dir() -> Path:
    """Resolve data directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("BOLETOS_DATA_DIR", "data", kind="data")


# --- Keyring helpers ---


def _get_keyring_secret(username: str) -> str | None:
    """Read a secret from the OS keyring.

    Returns None on any failure (no backend, not stored, dbus errors, etc.).
    """
    try:
        import keyring

        return keyring.get_password(KEYRING_SERVICE, username)
    except Exception:
        return None


def _set_keyring_secret(username: str, value: str) -> bool:
    """Store a secret in the OS keyring. Returns True on success."""
    try:
        import keyring

        keyring.set_password(KEYRING_SERVICE, username, value)
        return True
    except Exception:
        return False


def _delete_keyring_secret(username: str) -> bool:
    """Remove a secret from the OS keyring. Returns True on success."""
    try:
        import keyring

        keyring.delete_password(KEYRING_SERVICE, username)
        return True
    except Exception:
        return False


def store_session(access_token: str, refresh_token: str | None = None) -> bool:
    """Persist the session tokens in the keyring. Returns True if the access token was stored."""
    ok = _set_keyring_secret(KEYRING_TOKEN_USERNAME, access_token)
    if refresh_token:
        _set_keyring_secret(KEYRING_REFRESH_USERNAME, refresh_token)
    return ok


def clear_session() -> None:
    _delete_keyring_secret(KEYRING_TOKEN_USERNAME)
    _delete_keyring_secret(KEYRING_REFRESH_USERNAME)


def get_access_token() -> str:
    """Return the user's access token.

    Priority: 1) BOLETOS_ACCESS_TOKEN env var, 2) OS keyring.
    Raises KeyError if neither source has a token.
    """
    token = os.environ.get("BOLETOS_ACCESS_TOKEN")
    if token:
        return token
    token = _get_keyring_secret(KEYRING_TOKEN_USERNAME)
    if token:
        return token
    raise KeyError("BOLETOS_ACCESS_TOKEN")


def get_refresh_token() -> str | None:
    return _get_keyring_secret(KEYRING_REFRESH_USERNAME)


# --- YAML config ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text()) or {}


def config_file() -> Path:
    return get_config_dir() / "config.yaml"


def load_file_config() -> dict:
    """Load config/config.yaml, or an empty dict when it does not exist."""
    path = config_file()
    if not path.is_file():
        return {}
    return load_yaml(path)


def save_file_config(data: dict) -> Path:
    """Save config/config.yaml (atomic write)."""
    path = config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(yaml.dump(data, default_flow_style=False, allow_unicode=True))
    os.replace(tmp, path)
    return path


@dataclass(frozen=True)
class Settings:
    """Connection settings for the remote platform, loaded once at startup."""

    supabase_url: str
    anon_key: str
    scope: str = "company"
    timeout: float = DEFAULT_TIMEOUT

    @property
    def functions_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/functions/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @property
    def is_admin(self) -> bool:
        return self.scope == "admin"

    @classmethod
    def from_dict(cls, d: dict) -> Settings:
        """Create Settings from a config.yaml-shaped dict, applying defaults."""
        scope = str(d.get("scope", "company"))
        if scope not in SCOPES:
            raise ValueError(f"Escopo invalido: '{scope}'. Use company ou admin.")
        return cls(
            supabase_url=d["supabase_url"],
            anon_key=d["anon_key"],
            scope=scope,
            timeout=float(d.get("timeout", DEFAULT_TIMEOUT)),
        )


def load_settings() -> Settings:
    """Build Settings from config.yaml with environment overrides.

    Raises KeyError when the platform URL or anon key is missing from both sources.
    """
    data = dict(load_file_config())
    overrides = {
        "supabase_url": os.environ.get("SUPABASE_URL"),
        "anon_key": os.environ.get("SUPABASE_ANON_KEY"),
        "scope": os.environ.get("BOLETOS_SCOPE"),
        "timeout": os.environ.get("BOLETOS_TIMEOUT"),
    }
    data.update({k: v for k, v in overrides.items() if v})
    return Settings.from_dict(data)
