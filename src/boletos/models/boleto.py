from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

STATUS_CRIADO = "Criado"
STATUS_EMITIDO = "Emitido"
STATUS_CANCELADO = "Cancelado"

PAGAMENTO_NA = "N/A"
PAGAMENTO_PAGO = "Pago"
PAGAMENTO_EM_ABERTO = "Em Aberto"
PAGAMENTO_EM_ATRASO = "Em Atraso"

STATUS_EMISSAO = (STATUS_CRIADO, STATUS_EMITIDO, STATUS_CANCELADO)
STATUS_PAGAMENTO = (PAGAMENTO_NA, PAGAMENTO_PAGO, PAGAMENTO_EM_ABERTO, PAGAMENTO_EM_ATRASO)


def _str(value: object) -> str | None:
    return None if value is None else str(value)


def _name(relation: object) -> str | None:
    """Extract ``name`` from an embedded relation row ({id, name})."""
    if isinstance(relation, dict):
        return _str(relation.get("name"))
    return None


def _date_part(value: object) -> str | None:
    """Keep the calendar date of an ISO date/datetime string."""
    if not value:
        return None
    return str(value).split("T")[0]


@dataclass(frozen=True)
class Boleto:
    """A boleto row as returned by the getBoletos action."""

    id: str
    valor_face: str
    valor_boleto: str
    data_vencimento: str  # YYYY-MM-DD
    status_emissao: str
    status_pagamento: str
    data_emissao: str | None = None
    percentual_atualizacao: str | None = None
    payer_tax_id: str | None = None
    nosso_numero: str | None = None
    linha_digitavel: str | None = None
    project_id: str | None = None
    project_name: str | None = None
    company_id: str | None = None
    company_name: str | None = None
    index_name: str | None = None
    buyer_name: str | None = None
    numero_parcela: int | None = None

    @property
    def can_issue(self) -> bool:
        """Only boletos still in Criado can be sent to the bank."""
        return self.status_emissao == STATUS_CRIADO

    @classmethod
    def from_dict(cls, d: dict) -> Boleto:
        """Create a Boleto from an API row, flattening the embedded relations."""
        billing = d.get("billing_receivables") or {}
        receivable = billing.get("receivables") or {}
        installment = billing.get("payment_installments") or {}
        parcela = installment.get("numero_parcela")
        return cls(
            id=str(d["id"]),
            valor_face=str(d.get("valor_face", "0")),
            valor_boleto=str(d.get("valor_boleto", d.get("valor_face", "0"))),
            data_vencimento=_date_part(d.get("data_vencimento")) or "",
            status_emissao=d.get("status_emissao", STATUS_CRIADO),
            status_pagamento=d.get("status_pagamento", PAGAMENTO_NA),
            data_emissao=_date_part(d.get("data_emissao")),
            percentual_atualizacao=_str(d.get("percentual_atualizacao")),
            payer_tax_id=d.get("payer_tax_id"),
            nosso_numero=_str(d.get("nosso_numero")),
            linha_digitavel=d.get("linha_digitavel"),
            project_id=d.get("project_id"),
            project_name=_name(d.get("projects")),
            company_id=d.get("company_id"),
            company_name=_name(d.get("companies")),
            index_name=_name(d.get("indexes")),
            buyer_name=receivable.get("buyer_name"),
            numero_parcela=int(parcela) if parcela is not None else None,
        )


@dataclass(frozen=True)
class BillingReceivable:
    """A billing receivable that has no boleto yet."""

    id: str
    amount: str
    due_date: str
    buyer_name: str | None = None
    buyer_cpf: str | None = None
    project_name: str | None = None
    company_name: str | None = None
    numero_parcela: int | None = None
    index_name: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> BillingReceivable:
        parcela = d.get("numero_parcela")
        return cls(
            id=str(d["id"]),
            amount=str(d.get("amount", "0")),
            due_date=_date_part(d.get("nova_data_vencimento")) or "",
            buyer_name=d.get("buyer_name"),
            buyer_cpf=d.get("buyer_cpf"),
            project_name=d.get("project_name"),
            company_name=d.get("company_name"),
            numero_parcela=int(parcela) if parcela is not None else None,
            index_name=d.get("index_name"),
        )


def total_valor_boleto(boletos: Iterable[Boleto]) -> Decimal:
    """Sum of ``valor_boleto``; non-numeric amounts are left out."""
    total = Decimal("0")
    for b in boletos:
        try:
            total += Decimal(b.valor_boleto)
        except InvalidOperation:
            continue
    return total
