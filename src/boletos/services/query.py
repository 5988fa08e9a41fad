"""Translate user-facing boleto filters into the remote query shape.

Everything here is pure: no I/O and no implicit "now". Callers that want the
current month as a default pass ``today`` explicitly.
"""

from __future__ import annotations

import calendar
import logging
import re
from collections.abc import Mapping
from datetime import date

from boletos.models.filters import BoletoFilters, BoletoQuery

logger = logging.getLogger(__name__)

_MONTH_YEAR_RE = re.compile(r"(\d{4})-(\d{1,2})")


def parse_month_year(value: str | None) -> tuple[int, int] | None:
    """Parse "YYYY-MM" into (year, month), or None when malformed."""
    if not value:
        return None
    m = _MONTH_YEAR_RE.fullmatch(value.strip())
    if not m:
        return None
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12 or year < 1:
        return None
    return year, month


def month_range(month_year: str | None) -> tuple[str, str] | None:
    """Return the inclusive (first_day, last_day) of a "YYYY-MM" month.

    Works on calendar fields only, so December of the last representable
    year still has a last day.
    """
    parsed = parse_month_year(month_year)
    if parsed is None:
        return None
    year, month = parsed
    _, days = calendar.monthrange(year, month)
    return date(year, month, 1).isoformat(), date(year, month, days).isoformat()


def translate(filters: BoletoFilters | Mapping) -> BoletoQuery:
    """Build the normalized BoletoQuery for *filters*.

    No month selected means no date constraint. A malformed month also
    degrades to no date constraint instead of raising.
    """
    if not isinstance(filters, BoletoFilters):
        filters = BoletoFilters.from_dict(filters)

    from_date = to_date = None
    if filters.month_year is not None:
        bounds = month_range(filters.month_year)
        if bounds is None:
            logger.debug("Ignoring malformed monthYear filter: %r", filters.month_year)
        else:
            from_date, to_date = bounds

    return BoletoQuery(
        from_date=from_date,
        to_date=to_date,
        status_emissao=filters.status_emissao,
        status_pagamento=filters.status_pagamento,
        project_id=filters.project_id,
        company_id=filters.company_id,
    )


def current_month_year(today: date) -> str:
    """Format *today*'s month as "YYYY-MM" (the default list filter)."""
    return f"{today.year:04d}-{today.month:02d}"


def shift_month(month_year: str, delta: int) -> str:
    """Move a "YYYY-MM" value by *delta* months.

    Raises ValueError for malformed input.
    """
    parsed = parse_month_year(month_year)
    if parsed is None:
        raise ValueError(f"Mes invalido: '{month_year}'. Use AAAA-MM.")
    year, month = parsed
    index = year * 12 + (month - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"
