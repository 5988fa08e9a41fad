from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, RichLog, Static

from boletos.models.boleto import Boleto
from boletos.utils.formatters import format_brl_safe, format_date_br


class BoletoDetailScreen(ModalScreen[str | None]):
    """Read-only view of one boleto. Dismisses with "issue" when the user asks to issue it."""

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
        Binding("q", "go_back", show=False),
        Binding("e", "issue", "Emitir"),
    ]

    def __init__(self, boleto: Boleto) -> None:
        super().__init__()
        self._boleto = boleto

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Boleto", id="header-bar")
                yield Button("✕", id="btn-modal-close")
            yield RichLog(id="boleto-detail", wrap=True, markup=True)
            with Horizontal(classes="button-bar"):
                yield Button("✕ Fechar", id="btn-voltar")
                yield Button(
                    "▶ Emitir",
                    id="btn-emitir",
                    variant="primary",
                    disabled=not self._boleto.can_issue,
                    tooltip="Enviar este boleto ao banco (e)",
                )

    def on_mount(self) -> None:
        b = self._boleto
        log = self.query_one("#boleto-detail", RichLog)
        rows = [
            ("ID", b.id),
            ("Projeto", b.project_name),
            ("Empresa", b.company_name),
            ("Pagador", b.buyer_name),
            ("CPF/CNPJ", b.payer_tax_id),
            ("Parcela", str(b.numero_parcela) if b.numero_parcela is not None else None),
            ("Vencimento", format_date_br(b.data_vencimento)),
            ("Emissão", format_date_br(b.data_emissao)),
            ("Valor de face", format_brl_safe(b.valor_face)),
            ("Valor do boleto", format_brl_safe(b.valor_boleto)),
            ("Índice", b.index_name),
            ("Atualização (%)", b.percentual_atualizacao),
            ("Status emissão", b.status_emissao),
            ("Status pagamento", b.status_pagamento),
            ("Nosso número", b.nosso_numero),
            ("Linha digitável", b.linha_digitavel),
        ]
        for label, value in rows:
            log.write(f"[bold]{label}:[/bold] {value or '-'}")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-emitir":
                self.action_issue()
            case "btn-voltar" | "btn-modal-close":
                self.dismiss(None)

    def action_issue(self) -> None:
        if not self._boleto.can_issue:
            self.notify(
                f"Boleto com status {self._boleto.status_emissao} não pode ser emitido",
                severity="warning",
                timeout=3,
            )
            return
        self.dismiss("issue")

    def action_go_back(self) -> None:
        self.dismiss(None)
