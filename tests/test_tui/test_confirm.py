from __future__ import annotations

import pytest
from textual.app import App
from textual.widgets import Button, DataTable, Static

from boletos.models.boleto import Boleto
from boletos.tui.screens.confirm import IssueConfirmScreen


class _ConfirmApp(App):
    def __init__(self, boletos: list[Boleto]) -> None:
        super().__init__()
        self._boletos = boletos
        self.results: list[bool | None] = []

    def on_mount(self) -> None:
        self.push_screen(IssueConfirmScreen(self._boletos), callback=self.results.append)


def _batch(boleto_dict: dict, size: int) -> list[Boleto]:
    return [Boleto.from_dict({**boleto_dict, "id": f"bol-{n}"}) for n in range(size)]


@pytest.mark.asyncio
async def test_preview_lists_batch_with_total(boleto_dict):
    app = _ConfirmApp(_batch(boleto_dict, 2))
    async with app.run_test() as pilot:
        await pilot.pause()
        screen = app.screen
        assert isinstance(screen, IssueConfirmScreen)
        table = screen.query_one("#confirm-table", DataTable)
        assert table.row_count == 2
        assert table.get_row_at(0) == ["10/03/2024", "R$ 1.523,75", "Maria Souza", "Residencial Aurora"]
        assert screen.query_one("#confirm-total", Static).render().plain == "Total: R$ 3.047,50"
        assert not screen.query("#confirm-more")


@pytest.mark.asyncio
async def test_large_batch_is_truncated(boleto_dict):
    app = _ConfirmApp(_batch(boleto_dict, 11))
    async with app.run_test() as pilot:
        await pilot.pause()
        screen = app.screen
        assert screen.query_one("#confirm-table", DataTable).row_count == IssueConfirmScreen.PREVIEW_ROWS
        assert "mais 3 boleto(s)" in screen.query_one("#confirm-more", Static).render().plain


@pytest.mark.asyncio
async def test_confirm_button(boleto_dict):
    app = _ConfirmApp(_batch(boleto_dict, 1))
    async with app.run_test() as pilot:
        await pilot.pause()
        app.screen.query_one("#btn-confirm", Button).press()
        await pilot.pause()
        assert app.results == [True]


@pytest.mark.asyncio
async def test_escape_cancels(boleto_dict):
    app = _ConfirmApp(_batch(boleto_dict, 1))
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("escape")
        assert app.results == [False]


@pytest.mark.asyncio
async def test_cancel_has_initial_focus(boleto_dict):
    app = _ConfirmApp(_batch(boleto_dict, 1))
    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.focused is app.screen.query_one("#btn-cancel", Button)
