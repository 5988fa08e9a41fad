from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from boletos.config import Settings
from boletos.models.boleto import Boleto

# --- Settings fixtures ---


@pytest.fixture
def settings() -> Settings:
    return Settings(supabase_url="https://plataforma.example.com", anon_key="anon-key")


@pytest.fixture
def admin_settings() -> Settings:
    return Settings(
        supabase_url="https://plataforma.example.com", anon_key="anon-key", scope="admin"
    )


# --- Boleto fixtures ---


@pytest.fixture
def boleto_dict() -> dict:
    """A getBoletos row with its embedded relations."""
    return {
        "id": "bol-1",
        "valor_face": 1500.5,
        "valor_boleto": 1523.75,
        "data_vencimento": "2024-03-10T00:00:00+00:00",
        "data_emissao": None,
        "status_emissao": "Criado",
        "status_pagamento": "N/A",
        "percentual_atualizacao": 1.55,
        "payer_tax_id": "12345678909",
        "nosso_numero": None,
        "linha_digitavel": None,
        "project_id": "proj-1",
        "company_id": "comp-1",
        "projects": {"id": "proj-1", "name": "Residencial Aurora"},
        "companies": {"id": "comp-1", "name": "Aurora Incorporadora"},
        "indexes": {"id": "idx-1", "name": "INCC"},
        "billing_receivables": {
            "id": "br-1",
            "receivables": {"buyer_name": "Maria Souza", "buyer_cpf": "12345678909"},
            "payment_installments": {"numero_parcela": 3},
        },
    }


@pytest.fixture
def boleto(boleto_dict: dict) -> Boleto:
    return Boleto.from_dict(boleto_dict)


def mock_response(ok: bool = True, status_code: int = 200, json_data=None, text: str = ""):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data if json_data is not None else {}
    resp.text = text
    return resp
