from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

from boletos.services.exceptions import InvalidInputError

# UI "no selection" value; never sent to the remote query layer
ALL = "all"

_FILTER_KEYS = {
    "monthYear": "month_year",
    "statusEmissao": "status_emissao",
    "statusPagamento": "status_pagamento",
    "projectId": "project_id",
    "companyId": "company_id",
}

_QUERY_KEYS = {
    "from_date": "fromDate",
    "to_date": "toDate",
    "status_emissao": "statusEmissao",
    "status_pagamento": "statusPagamento",
    "project_id": "projectId",
    "company_id": "companyId",
}


def _clean(value: object) -> str | None:
    """Map UI placeholders ("all", blank) to None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == ALL:
        return None
    return text


@dataclass(frozen=True)
class BoletoFilters:
    """Boleto list filters as selected by the user. None means "no filter"."""

    month_year: str | None = None  # YYYY-MM
    status_emissao: str | None = None
    status_pagamento: str | None = None
    project_id: str | None = None
    company_id: str | None = None

    @classmethod
    def from_dict(cls, d: Mapping) -> BoletoFilters:
        """Create filters from the UI/API shape (camelCase or snake_case keys).

        The "all" sentinel and blank values become None.
        """
        if not isinstance(d, Mapping):
            raise InvalidInputError(f"Filtro invalido: esperado objeto, recebido {type(d).__name__}")
        values: dict[str, str | None] = {}
        for camel, snake in _FILTER_KEYS.items():
            raw = d.get(camel, d.get(snake))
            values[snake] = _clean(raw)
        return cls(**values)

    def merge(self, **changes: str | None) -> BoletoFilters:
        """Return a copy with *changes* applied (sentinels cleaned)."""
        return replace(self, **{k: _clean(v) for k, v in changes.items()})

    def to_dict(self) -> dict[str, str]:
        return {
            camel: getattr(self, snake)
            for camel, snake in _FILTER_KEYS.items()
            if getattr(self, snake) is not None
        }


@dataclass(frozen=True)
class BoletoQuery:
    """Normalized query sent to the remote getBoletos action."""

    from_date: str | None = None  # YYYY-MM-DD, inclusive
    to_date: str | None = None  # YYYY-MM-DD, inclusive
    status_emissao: str | None = None
    status_pagamento: str | None = None
    project_id: str | None = None
    company_id: str | None = None

    def to_payload(self) -> dict[str, str]:
        """Render the wire shape, omitting unset fields."""
        return {
            _QUERY_KEYS[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }
