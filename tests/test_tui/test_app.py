from __future__ import annotations

from unittest.mock import patch

import pytest

from boletos.tui.app import BoletosApp
from boletos.tui.screens.dashboard import DashboardScreen


@pytest.mark.asyncio
async def test_app_launches(fake_client):
    app = BoletosApp(client=fake_client)
    async with app.run_test():
        assert app.title == "Boletos"


@pytest.mark.asyncio
async def test_app_default_screen_is_dashboard(fake_client):
    app = BoletosApp(client=fake_client)
    async with app.run_test():
        assert isinstance(app.screen, DashboardScreen)


class _SubclassedApp(BoletosApp):
    """Subclass living outside the package, as embedding apps and tests do."""


def test_stylesheet_path_is_absolute():
    assert BoletosApp.CSS_PATH.is_absolute()
    assert BoletosApp.CSS_PATH.is_file()


@pytest.mark.asyncio
async def test_subclass_loads_package_stylesheet(fake_client):
    app = _SubclassedApp(client=fake_client)
    async with app.run_test():
        assert isinstance(app.screen, DashboardScreen)


def test_get_client_connects_once(fake_client):
    app = BoletosApp()
    with patch("boletos.services.session.connect", return_value=fake_client) as mock_connect:
        assert app.get_client() is fake_client
        assert app.get_client() is fake_client
    mock_connect.assert_called_once()


def test_injected_client_skips_connect(fake_client):
    app = BoletosApp(client=fake_client)
    with patch("boletos.services.session.connect") as mock_connect:
        assert app.get_client() is fake_client
    mock_connect.assert_not_called()
