from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from boletos.models.boleto import Boleto
from boletos.models.report import IssueResult


@pytest.fixture(autouse=True)
def data_dir(monkeypatch, tmp_path):
    """Keep issuance history writes inside the test's tmp dir."""
    monkeypatch.setenv("BOLETOS_DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def sample_boletos(boleto_dict) -> list[Boleto]:
    return [
        Boleto.from_dict(boleto_dict),
        Boleto.from_dict({**boleto_dict, "id": "bol-2", "status_emissao": "Emitido"}),
        Boleto.from_dict({**boleto_dict, "id": "bol-3"}),
    ]


@pytest.fixture
def fake_client(settings, sample_boletos):
    """A FunctionsClient stand-in: list returns three boletos, issuance succeeds."""
    client = MagicMock()
    client.settings = settings
    client.list_boletos.return_value = sample_boletos
    client.issue_boleto.return_value = IssueResult.success({"nosso_numero": "1"})
    return client
