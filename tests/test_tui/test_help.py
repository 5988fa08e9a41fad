from __future__ import annotations

import pytest
from textual.widgets import Button

from boletos.tui.app import BoletosApp
from boletos.tui.screens.dashboard import DashboardScreen
from boletos.tui.screens.help import HelpScreen


@pytest.mark.asyncio
async def test_help_screen_opens(fake_client):
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        await pilot.press("h")
        assert isinstance(app.screen, HelpScreen)


@pytest.mark.asyncio
async def test_help_screen_closes_on_escape(fake_client):
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        await pilot.press("h")
        await pilot.press("escape")
        assert isinstance(app.screen, DashboardScreen)


@pytest.mark.asyncio
async def test_help_screen_closes_on_button(fake_client):
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        await pilot.press("h")
        app.screen.query_one("#btn-voltar", Button).press()
        await pilot.pause()
        assert isinstance(app.screen, DashboardScreen)
