from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, RichLog, Static


class HelpScreen(ModalScreen):
    """Keyboard shortcuts and issuance notes."""

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Ajuda", id="header-bar")
                yield Button("✕", id="btn-modal-close")
            yield RichLog(id="help-content", wrap=True, markup=True)
            with Horizontal(classes="button-bar"):
                yield Button("✕ Fechar", id="btn-voltar")

    def on_mount(self) -> None:
        log = self.query_one("#help-content", RichLog)

        log.write("[bold]Boletos[/bold]")
        log.write("")
        log.write(
            "Consulta e emissão em lote dos boletos de recebíveis da plataforma. "
            "A lista mostra os boletos com vencimento no mês selecionado."
        )
        log.write("")

        log.write("[bold]Atalhos de teclado[/bold]")
        log.write("")
        log.write("  [bold cyan]espaço / x[/bold cyan]  Marcar          Marcar boleto para emissão")
        log.write("  [bold cyan]e[/bold cyan]           Emitir          Emitir marcados (ou o selecionado)")
        log.write("  [bold cyan]p[/bold cyan]           Pendentes       Emitir todos com status Criado")
        log.write("  [bold cyan]r[/bold cyan]           Atualizar       Recarregar da plataforma")
        log.write("  [bold cyan]\\[ / ][/bold cyan]       Mês             Mês anterior / próximo")
        log.write("  [bold cyan]f[/bold cyan]           Filtrar         Editar o mês")
        log.write("  [bold cyan]h[/bold cyan]           Ajuda           Esta tela")
        log.write("  [bold cyan]q[/bold cyan]           Sair            Encerrar aplicação")
        log.write("")
        log.write("[bold]Navegação na tabela[/bold]")
        log.write("")
        log.write("  [bold cyan]j / ↓[/bold cyan]  Próxima linha")
        log.write("  [bold cyan]k / ↑[/bold cyan]  Linha anterior")
        log.write("  [bold cyan]enter[/bold cyan]  Detalhes do boleto")
        log.write("")

        log.write("[bold yellow]Emissão[/bold yellow]")
        log.write("")
        log.write(
            "Os boletos são enviados ao banco um por vez, na ordem da lista. "
            "Uma falha não interrompe o lote: o relatório final mostra os "
            "emitidos e as falhas com o motivo."
        )
        log.write("")
        log.write(
            "Cada lote fica registrado localmente. Para reenviar apenas as "
            "falhas do último lote, use [bold]boletos retry-failed[/bold]."
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id in ("btn-voltar", "btn-modal-close"):
            self.app.pop_screen()

    def action_go_back(self) -> None:
        self.app.pop_screen()
