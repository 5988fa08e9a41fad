from __future__ import annotations

from typing import Any

from requests import post

from boletos.config import Settings
from boletos.services.exceptions import AuthError
from boletos.services.http_retry import AUTH_TOKEN, call_with_retry, json_body


def _token_request(settings: Settings, grant_type: str, body: dict[str, str]) -> dict[str, Any]:
    url = f"{settings.auth_url}/token"
    resp = call_with_retry(
        lambda: post(
            url,
            params={"grant_type": grant_type},
            json=body,
            headers={"apikey": settings.anon_key, "Content-Type": "application/json"},
            timeout=settings.timeout,
        ),
        AUTH_TOKEN,
        target="Servico de autenticacao",
    )

    data = json_body(resp)
    if not resp.ok:
        reason = (
            data.get("error_description")
            or data.get("msg")
            or data.get("error")
            or (resp.text[:200] if resp.text else "")
        )
        raise AuthError(f"Falha na autenticacao ({resp.status_code}): {reason}")
    if not data.get("access_token"):
        raise AuthError("Resposta de autenticacao sem access_token")
    return data


def sign_in(settings: Settings, email: str, password: str) -> dict[str, Any]:
    """Password sign-in. Returns the session (access_token, refresh_token, user, ...)."""
    if not email or not password:
        raise AuthError("Informe e-mail e senha")
    return _token_request(settings, "password", {"email": email, "password": password})


def refresh_session(settings: Settings, refresh_token: str) -> dict[str, Any]:
    """Exchange a refresh token for a new session."""
    if not refresh_token:
        raise AuthError("Sessao expirada: execute 'boletos login'")
    return _token_request(settings, "refresh_token", {"refresh_token": refresh_token})
