from __future__ import annotations

from decimal import Decimal, InvalidOperation

_MESES = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)


def format_brl(value: str) -> str:
    """Format a numeric string as R$ X.XXX,XX."""
    d = Decimal(value)
    formatted = f"{d:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"


def format_brl_safe(value: str | None) -> str:
    """Like format_brl, but returns the raw value (or "") when it is not numeric."""
    if value is None:
        return ""
    try:
        return format_brl(value)
    except (InvalidOperation, ValueError):
        return value


def format_date_br(value: str | None) -> str:
    """Format an ISO date (YYYY-MM-DD) as DD/MM/YYYY."""
    if not value:
        return ""
    parts = value.split("T")[0].split("-")
    if len(parts) != 3:
        return value
    year, month, day = parts
    return f"{day}/{month}/{year}"


def format_month_year(value: str) -> str:
    """Format "YYYY-MM" as "Mês de YYYY"."""
    year, _, month = value.partition("-")
    try:
        return f"{_MESES[int(month) - 1]} de {year}"
    except (ValueError, IndexError):
        return value
