from __future__ import annotations

from boletos import config as _config
from boletos.config import Settings
from boletos.services.auth_client import refresh_session
from boletos.services.functions_client import FunctionsClient


def connect(settings: Settings | None = None) -> FunctionsClient:
    """Build a FunctionsClient from the stored settings and access token.

    Raises KeyError when settings or the access token are not configured.
    """
    if settings is None:
        settings = _config.load_settings()
    return FunctionsClient(settings, _config.get_access_token())


def renew(settings: Settings) -> dict:
    """Refresh the stored session using the keyring refresh token."""
    session = refresh_session(settings, _config.get_refresh_token() or "")
    _config.store_session(session["access_token"], session.get("refresh_token"))
    return session
