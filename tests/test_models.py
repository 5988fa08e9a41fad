from __future__ import annotations

from decimal import Decimal

import pytest

from boletos.models.boleto import BillingReceivable, Boleto, total_valor_boleto
from boletos.models.filters import BoletoFilters, BoletoQuery
from boletos.models.report import IssuanceFailure, IssuanceReport, IssuanceSuccess, IssueResult
from boletos.services.exceptions import InvalidInputError

# --- Boleto ---


class TestBoleto:
    def test_from_dict(self, boleto_dict):
        b = Boleto.from_dict(boleto_dict)
        assert b.id == "bol-1"
        assert b.valor_face == "1500.5"
        assert b.valor_boleto == "1523.75"
        assert b.data_vencimento == "2024-03-10"
        assert b.percentual_atualizacao == "1.55"
        assert b.status_emissao == "Criado"
        assert b.status_pagamento == "N/A"

    def test_flattens_relations(self, boleto_dict):
        b = Boleto.from_dict(boleto_dict)
        assert b.project_name == "Residencial Aurora"
        assert b.company_name == "Aurora Incorporadora"
        assert b.index_name == "INCC"
        assert b.buyer_name == "Maria Souza"
        assert b.numero_parcela == 3

    def test_minimal_row(self):
        b = Boleto.from_dict({"id": 7, "valor_face": "100", "data_vencimento": "2024-01-05"})
        assert b.id == "7"
        assert b.valor_boleto == "100"
        assert b.status_emissao == "Criado"
        assert b.status_pagamento == "N/A"
        assert b.project_name is None
        assert b.buyer_name is None
        assert b.numero_parcela is None

    def test_can_issue_only_when_criado(self, boleto_dict):
        assert Boleto.from_dict(boleto_dict).can_issue is True
        assert Boleto.from_dict({**boleto_dict, "status_emissao": "Emitido"}).can_issue is False
        assert Boleto.from_dict({**boleto_dict, "status_emissao": "Cancelado"}).can_issue is False

    def test_frozen(self, boleto):
        with pytest.raises(AttributeError):
            boleto.status_emissao = "Emitido"  # type: ignore[misc]


class TestTotalValorBoleto:
    def test_sums_valor_boleto(self, boleto_dict):
        boletos = [
            Boleto.from_dict(boleto_dict),
            Boleto.from_dict({**boleto_dict, "id": "bol-2", "valor_boleto": "100.25"}),
        ]
        assert total_valor_boleto(boletos) == Decimal("1624.00")

    def test_skips_non_numeric(self, boleto_dict):
        boletos = [
            Boleto.from_dict({**boleto_dict, "valor_boleto": "n/d"}),
            Boleto.from_dict({**boleto_dict, "id": "bol-2", "valor_boleto": "10"}),
        ]
        assert total_valor_boleto(boletos) == Decimal("10")

    def test_empty(self):
        assert total_valor_boleto([]) == Decimal("0")


class TestBillingReceivable:
    def test_from_dict(self):
        r = BillingReceivable.from_dict(
            {
                "id": "br-9",
                "amount": 980.1,
                "nova_data_vencimento": "2024-05-20",
                "buyer_name": "Joao Lima",
                "buyer_cpf": "98765432100",
                "project_name": "Residencial Aurora",
                "company_name": "Aurora Incorporadora",
                "numero_parcela": "4",
                "index_name": "IPCA",
            }
        )
        assert r.id == "br-9"
        assert r.amount == "980.1"
        assert r.due_date == "2024-05-20"
        assert r.numero_parcela == 4
        assert r.index_name == "IPCA"


# --- Filters ---


class TestBoletoFilters:
    def test_from_dict_camel_case(self):
        f = BoletoFilters.from_dict(
            {"monthYear": "2024-03", "statusEmissao": "Criado", "projectId": "p1"}
        )
        assert f == BoletoFilters(month_year="2024-03", status_emissao="Criado", project_id="p1")

    def test_from_dict_snake_case(self):
        f = BoletoFilters.from_dict({"month_year": "2024-03", "company_id": "c1"})
        assert f.month_year == "2024-03"
        assert f.company_id == "c1"

    def test_sentinel_and_blank_become_none(self):
        f = BoletoFilters.from_dict(
            {"monthYear": "", "statusEmissao": "all", "statusPagamento": "  "}
        )
        assert f == BoletoFilters()

    def test_non_mapping_rejected(self):
        with pytest.raises(InvalidInputError, match="Filtro invalido"):
            BoletoFilters.from_dict("2024-03")  # type: ignore[arg-type]

    def test_merge(self):
        f = BoletoFilters(month_year="2024-03", status_emissao="Criado")
        merged = f.merge(status_emissao="all", status_pagamento="Pago")
        assert merged == BoletoFilters(month_year="2024-03", status_pagamento="Pago")
        assert f.status_emissao == "Criado"

    def test_to_dict_omits_unset(self):
        f = BoletoFilters(month_year="2024-03", status_pagamento="Pago")
        assert f.to_dict() == {"monthYear": "2024-03", "statusPagamento": "Pago"}


class TestBoletoQuery:
    def test_payload_keys(self):
        q = BoletoQuery(
            from_date="2024-03-01",
            to_date="2024-03-31",
            status_emissao="Emitido",
            status_pagamento="Em Aberto",
            project_id="p1",
            company_id="c1",
        )
        assert q.to_payload() == {
            "fromDate": "2024-03-01",
            "toDate": "2024-03-31",
            "statusEmissao": "Emitido",
            "statusPagamento": "Em Aberto",
            "projectId": "p1",
            "companyId": "c1",
        }

    def test_empty_payload(self):
        assert BoletoQuery().to_payload() == {}


# --- Report ---


class TestIssuanceReport:
    def test_counts(self):
        report = IssuanceReport(
            total_processed=3,
            successful=[IssuanceSuccess("a"), IssuanceSuccess("c")],
            failed=[IssuanceFailure("b", "recusado")],
        )
        assert report.succeeded == 2
        assert report.failed_count == 1
        assert report.failed_ids == ["b"]

    def test_issue_result_constructors(self):
        assert IssueResult.success({"x": 1}) == IssueResult(ok=True, data={"x": 1})
        assert IssueResult.failure("e") == IssueResult(ok=False, error="e")
