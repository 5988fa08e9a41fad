from __future__ import annotations

from boletos.models.boleto import (
    PAGAMENTO_EM_ABERTO,
    PAGAMENTO_NA,
    STATUS_CANCELADO,
    STATUS_CRIADO,
    STATUS_EMISSAO,
    STATUS_EMITIDO,
    STATUS_PAGAMENTO,
)
from boletos.services.exceptions import InvalidInputError


def apply_status_rules(current_pagamento: str | None, update: dict) -> dict:
    """Return *update* with the payment status implied by its emission status.

    Criado/Cancelado reset payment to N/A; Emitido opens a boleto whose
    payment status was still N/A.
    """
    result = dict(update)
    emissao = result.get("status_emissao")
    pagamento = result.get("status_pagamento")

    if pagamento is not None and pagamento not in STATUS_PAGAMENTO:
        raise InvalidInputError(f"Status de pagamento invalido: '{pagamento}'")
    if emissao is None:
        return result
    if emissao not in STATUS_EMISSAO:
        raise InvalidInputError(f"Status de emissao invalido: '{emissao}'")

    if emissao in (STATUS_CRIADO, STATUS_CANCELADO):
        result["status_pagamento"] = PAGAMENTO_NA
    elif emissao == STATUS_EMITIDO and current_pagamento == PAGAMENTO_NA:
        result["status_pagamento"] = PAGAMENTO_EM_ABERTO
    return result
