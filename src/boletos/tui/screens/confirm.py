from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Label, Static

from boletos.models.boleto import Boleto, total_valor_boleto
from boletos.utils.formatters import format_brl, format_brl_safe, format_date_br


class IssueConfirmScreen(ModalScreen[bool]):
    """Preview of the batch about to be sent to the bank.

    Shows due date, amount and payer for the first PREVIEW_ROWS boletos plus
    the batch total. Dismisses True only on the explicit confirm button.
    """

    PREVIEW_ROWS = 8

    DEFAULT_CSS = """
    IssueConfirmScreen {
        align: center middle;
        background: $surface 80%;
    }
    #confirm-dialog {
        width: 84;
        height: auto;
        max-height: 30;
        background: $surface;
        border: thick $warning;
        padding: 1 2;
    }
    #confirm-title {
        text-style: bold;
        margin-bottom: 1;
    }
    #confirm-table {
        height: auto;
        max-height: 10;
    }
    #confirm-more, #confirm-note {
        color: $text-muted;
    }
    #confirm-total {
        margin-top: 1;
        text-style: bold;
    }
    #confirm-dialog .button-bar {
        height: 3;
        margin-top: 1;
        layout: horizontal;
        align-horizontal: right;
    }
    #confirm-dialog .button-bar Button {
        margin-left: 1;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancelar"),
        Binding("q", "cancel", show=False),
    ]

    def __init__(self, boletos: list[Boleto]) -> None:
        super().__init__()
        self._boletos = boletos

    def compose(self) -> ComposeResult:
        hidden = len(self._boletos) - self.PREVIEW_ROWS
        with Vertical(id="confirm-dialog"):
            yield Label(f"Emitir {len(self._boletos)} boleto(s) no banco?", id="confirm-title")
            yield DataTable(id="confirm-table", show_cursor=False, zebra_stripes=True)
            if hidden > 0:
                yield Static(f"… e mais {hidden} boleto(s)", id="confirm-more")
            yield Static(
                f"Total: {format_brl(str(total_valor_boleto(self._boletos)))}",
                id="confirm-total",
            )
            yield Static(
                "Os boletos são enviados um por vez. "
                "Falhas não interrompem o lote e ficam no relatório.",
                id="confirm-note",
            )
            with Horizontal(classes="button-bar"):
                yield Button("✕ Cancelar", id="btn-cancel")
                yield Button("▶ Emitir", id="btn-confirm", variant="warning")

    def on_mount(self) -> None:
        table = self.query_one("#confirm-table", DataTable)
        table.add_columns("Vencimento", "Valor", "Pagador", "Projeto")
        for b in self._boletos[: self.PREVIEW_ROWS]:
            table.add_row(
                format_date_br(b.data_vencimento),
                format_brl_safe(b.valor_boleto),
                b.buyer_name or "",
                b.project_name or "",
            )
        self.query_one("#btn-cancel", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-confirm")

    def action_cancel(self) -> None:
        self.dismiss(False)
