from __future__ import annotations

from pathlib import Path

from textual.app import App
from textual.binding import Binding

from boletos.services.functions_client import FunctionsClient


class BoletosApp(App):
    """Boletos TUI application."""

    CSS_PATH = Path(__file__).with_name("app.tcss")
    TITLE = "Boletos"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("q", "quit", "Sair", priority=True),
    ]

    def __init__(self, client: FunctionsClient | None = None):
        super().__init__()
        self._client = client

    def get_client(self) -> FunctionsClient:
        """Return the platform client, connecting on first use."""
        if self._client is None:
            from boletos.services.session import connect

            self._client = connect()
        return self._client

    def on_mount(self) -> None:
        from boletos.tui.screens.dashboard import DashboardScreen

        self.push_screen(DashboardScreen())
