from __future__ import annotations

import re

from boletos.models.boleto import STATUS_EMISSAO, STATUS_PAGAMENTO
from boletos.services.query import parse_month_year


def validate_month_year(value: str) -> str:
    """Validate a "YYYY-MM" month selection and normalize it to a two-digit month.

    Raises ValueError for malformed months.
    """
    parsed = parse_month_year(value)
    if parsed is None:
        raise ValueError(f"Mes invalido: '{value}'. Use AAAA-MM.")
    year, month = parsed
    return f"{year:04d}-{month:02d}"


def parse_month_input(value: str) -> str:
    """Convert the TUI "MM/AAAA" input into "YYYY-MM"."""
    m = re.fullmatch(r"(\d{1,2})/(\d{4})", value.strip())
    if not m:
        raise ValueError(f"Mes invalido: '{value}'. Use MM/AAAA.")
    return validate_month_year(f"{m.group(2)}-{m.group(1)}")


def validate_status_emissao(value: str) -> str:
    if value not in STATUS_EMISSAO:
        raise ValueError(f"Status de emissao invalido: '{value}'")
    return value


def validate_status_pagamento(value: str) -> str:
    if value not in STATUS_PAGAMENTO:
        raise ValueError(f"Status de pagamento invalido: '{value}'")
    return value


def validate_linha_digitavel(value: str) -> str:
    """Validate a boleto linha digitavel: 47 digits, punctuation and spaces ignored."""
    digits = re.sub(r"[\s.]", "", value)
    if not re.fullmatch(r"\d{47}", digits):
        raise ValueError("Linha digitavel: deve ter 47 digitos numericos")
    return digits
