from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from requests import post

from boletos.config import Settings
from boletos.models.boleto import BillingReceivable, Boleto
from boletos.models.filters import BoletoQuery
from boletos.models.report import IssueResult
from boletos.services.exceptions import (
    AuthError,
    CollaboratorUnavailableError,
    FunctionRejectError,
    InvalidInputError,
)
from boletos.services.http_retry import (
    FUNCTIONS_READ,
    FUNCTIONS_WRITE,
    RetryPolicy,
    call_with_retry,
    check_function_response,
    json_body,
)
from boletos.services.status_rules import apply_status_rules

logger = logging.getLogger(__name__)

COMPANY_BOLETOS = "company-boletos"
ADMIN_BOLETOS = "admin-boletos"
ISSUER = "starkbank-integration"


@dataclass
class CreateBoletosResult:
    created: list[Boleto] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)


class FunctionsClient:
    """Client for the platform's boleto edge functions."""

    def __init__(
        self,
        settings: Settings,
        access_token: str,
        *,
        sleep_func: Callable[[float], object] = time.sleep,
    ) -> None:
        self.settings = settings
        self._access_token = access_token
        self._sleep = sleep_func

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "apikey": self.settings.anon_key,
            "Content-Type": "application/json",
        }

    def invoke(
        self,
        name: str,
        action: str,
        data: dict | None = None,
        *,
        policy: RetryPolicy = FUNCTIONS_READ,
    ) -> dict:
        """POST ``{action, data}`` to a function and return its JSON body."""
        url = f"{self.settings.functions_url}/{name}"
        body = {"action": action, "data": data or {}}
        resp = call_with_retry(
            lambda: post(url, json=body, headers=self._headers(), timeout=self.settings.timeout),
            policy,
            target=f"Plataforma ({name})",
            check=lambda r: check_function_response(r, name, policy),
            sleep_func=self._sleep,
        )
        return json_body(resp)

    def _boletos_function(self, admin: bool | None) -> str:
        if admin is None:
            admin = self.settings.is_admin
        return ADMIN_BOLETOS if admin else COMPANY_BOLETOS

    # --- Reads ---

    def list_boletos(self, query: BoletoQuery, *, admin: bool | None = None) -> list[Boleto]:
        """Fetch boletos matching *query*, ordered by due date."""
        data = self.invoke(
            self._boletos_function(admin),
            "getBoletos",
            {"filters": query.to_payload()},
        )
        return [Boleto.from_dict(row) for row in data.get("boletos") or []]

    def available_billing_receivables(self) -> list[BillingReceivable]:
        """Billing receivables that have no boleto yet (admin only)."""
        data = self.invoke(ADMIN_BOLETOS, "getAvailableBillingReceivables")
        return [BillingReceivable.from_dict(row) for row in data.get("billingReceivables") or []]

    # --- Writes ---

    def issue_boleto(self, boleto_id: str) -> IssueResult:
        """Send one boleto to the bank. Failures are returned, not raised."""
        try:
            data = self.invoke(
                ISSUER,
                "emitirBoleto",
                {"boletoId": boleto_id},
                policy=FUNCTIONS_WRITE,
            )
        except (FunctionRejectError, CollaboratorUnavailableError, AuthError) as exc:
            return IssueResult.failure(str(exc))
        logger.info("Boleto %s issued", boleto_id)
        return IssueResult.success(data.get("data"))

    def update_boleto(
        self,
        boleto_id: str,
        update: dict,
        *,
        current_pagamento: str | None = None,
    ) -> dict:
        """Update a boleto, applying the emission/payment status rules first."""
        if not boleto_id:
            raise InvalidInputError("ID do boleto obrigatorio")
        payload = apply_status_rules(current_pagamento, update)
        data = self.invoke(
            ADMIN_BOLETOS,
            "updateBoleto",
            {"boletoId": boleto_id, "updateData": payload},
            policy=FUNCTIONS_WRITE,
        )
        return data.get("boleto") or {}

    def delete_boleto(self, boleto_id: str) -> None:
        if not boleto_id:
            raise InvalidInputError("ID do boleto obrigatorio")
        self.invoke(ADMIN_BOLETOS, "deleteBoleto", {"boletoId": boleto_id}, policy=FUNCTIONS_WRITE)

    def create_boletos(self, billing_receivable_ids: list[str]) -> CreateBoletosResult:
        """Create boletos (status Criado) for the given billing receivables."""
        if not billing_receivable_ids:
            raise InvalidInputError("Nenhum recebivel informado")
        data = self.invoke(
            ADMIN_BOLETOS,
            "createBoletos",
            {"billingReceivableIds": list(billing_receivable_ids)},
            policy=FUNCTIONS_WRITE,
        )
        return CreateBoletosResult(
            created=[Boleto.from_dict(row) for row in data.get("createdBoletos") or []],
            errors=list(data.get("errors") or []),
        )
