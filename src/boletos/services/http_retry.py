"""Retry and response classification for calls to the platform.

Every edge-function and auth request goes through :func:`call_with_retry`.
A response is classified by the caller's *check* (see
:func:`check_function_response`); transport failures that outlive the
policy surface as CollaboratorUnavailableError.
"""

from __future__ import annotations

import json
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import requests
import requests.exceptions

from boletos.services.exceptions import (
    AuthError,
    CollaboratorUnavailableError,
    FunctionRejectError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


class RetryableStatusError(requests.exceptions.HTTPError):
    """A function answered with a status its policy allows retrying."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class RetryPolicy:
    """How often, and on what, a platform call is repeated.

    Connection errors are always retryable: the request never reached the
    platform. Timeouts and gateway statuses only when the call is a read.
    """

    max_attempts: int
    base_delay: float = 1.0
    max_delay: float = 10.0
    jitter: float = 0.25
    retry_timeouts: bool = False
    retryable_status_codes: frozenset[int] = field(default_factory=frozenset)

    @property
    def retryable_exceptions(self) -> tuple[type[Exception], ...]:
        excs: list[type[Exception]] = [requests.exceptions.ConnectionError]
        if self.retry_timeouts:
            excs.append(requests.exceptions.Timeout)
        if self.retryable_status_codes:
            excs.append(RetryableStatusError)
        return tuple(excs)

    def delay(self, attempt: int) -> float:
        """Backoff after failed attempt number *attempt* (0-indexed), with jitter."""
        delay = min(self.base_delay * 2**attempt, self.max_delay)
        spread = delay * self.jitter
        return max(0.0, delay + random.uniform(-spread, spread))


# Issuance, update, delete, create: a timeout may mean the bank or the
# database already applied the change.
FUNCTIONS_WRITE = RetryPolicy(max_attempts=3)

FUNCTIONS_READ = RetryPolicy(
    max_attempts=4,
    max_delay=15.0,
    retry_timeouts=True,
    retryable_status_codes=RETRYABLE_STATUS_CODES,
)

AUTH_TOKEN = RetryPolicy(max_attempts=3)


# --- Response classification ---


def json_body(resp: Any) -> dict:
    """The response's JSON object, or {} for non-JSON and non-object bodies."""
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _format_details(details: object) -> str:
    """Format a ``details`` field value as a human-readable string."""
    if isinstance(details, dict):
        errors = details.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(
                str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
            )
        for key in ("message", "msg", "error_description"):
            if details.get(key):
                return str(details[key])
        return json.dumps(details, ensure_ascii=False)[:200]
    if isinstance(details, list):
        return "; ".join(str(d) for d in details)
    return str(details)


def extract_error(data: dict) -> str | None:
    """Best-effort ``error: details`` message from a function body."""
    error = data.get("error")
    if not error:
        return None
    details = data.get("details")
    if details:
        return f"{error}: {_format_details(details)}"
    return str(error)


def check_function_response(resp: Any, function: str, policy: RetryPolicy) -> None:
    """Raise for anything but a clean answer from *function*.

    401/403 raise AuthError. Statuses the policy retries raise
    RetryableStatusError. Any other non-2xx, or a 2xx whose body carries
    ``error``, raises FunctionRejectError.
    """
    payload = json_body(resp)
    if resp.ok:
        error = extract_error(payload)
        if error:
            raise FunctionRejectError(error, response=payload, status_code=resp.status_code)
        return

    message = extract_error(payload) or (resp.text[:500] if resp.text else "")
    if resp.status_code in (401, 403):
        raise AuthError(f"Acesso negado em {function} ({resp.status_code}): {message}")
    if resp.status_code in policy.retryable_status_codes:
        raise RetryableStatusError(
            f"Erro em {function} ({resp.status_code}): {message}",
            status_code=resp.status_code,
        )
    raise FunctionRejectError(
        f"Erro em {function} ({resp.status_code}): {message}",
        response=payload,
        status_code=resp.status_code,
    )


# --- Retry loop ---


def call_with_retry(
    send: Callable[[], requests.Response],
    policy: RetryPolicy,
    *,
    target: str,
    check: Callable[[requests.Response], None] | None = None,
    sleep_func: Callable[[float], object] | None = None,
) -> requests.Response:
    """Send a request, retrying per *policy*, and return the checked response.

    *target* names the remote side in messages ("Plataforma (admin-boletos)").
    Errors raised by *check* that the policy does not retry propagate as is.
    """
    sleep = sleep_func or time.sleep
    attempt = 0
    while True:
        try:
            resp = send()
            if check is not None:
                check(resp)
            return resp
        except policy.retryable_exceptions as exc:
            attempt += 1
            if attempt >= policy.max_attempts:
                raise CollaboratorUnavailableError(f"{target} indisponivel: {exc}") from exc
            delay = policy.delay(attempt - 1)
            logger.warning(
                "%s: retry %d/%d after %s (%.1fs delay)",
                target,
                attempt,
                policy.max_attempts,
                type(exc).__name__,
                delay,
            )
            sleep(delay)
        except requests.exceptions.RequestException as exc:
            raise CollaboratorUnavailableError(f"{target} indisponivel: {exc}") from exc
