"""Shared Select options for the boleto filter bar."""

from __future__ import annotations

from boletos.models.boleto import STATUS_EMISSAO, STATUS_PAGAMENTO
from boletos.models.filters import ALL

STATUS_EMISSAO_OPTIONS: tuple[tuple[str, str], ...] = (("Todos", ALL),) + tuple(
    (status, status) for status in STATUS_EMISSAO
)

STATUS_PAGAMENTO_OPTIONS: tuple[tuple[str, str], ...] = (("Todos", ALL),) + tuple(
    (status, status) for status in STATUS_PAGAMENTO
)
