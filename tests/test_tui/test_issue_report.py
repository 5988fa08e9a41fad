from __future__ import annotations

import json
from datetime import date

import pytest
from textual.widgets import Button

from boletos.models.report import IssueResult
from boletos.tui.app import BoletosApp
from boletos.tui.screens.boleto_detail import BoletoDetailScreen
from boletos.tui.screens.confirm import IssueConfirmScreen
from boletos.tui.screens.dashboard import DashboardScreen
from boletos.tui.screens.issue_report import IssueReportScreen


async def _settle(app, pilot) -> None:
    await app.workers.wait_for_complete()
    await pilot.pause()


async def _open_issue(app, pilot, ids: list[str]) -> IssueReportScreen:
    await _settle(app, pilot)
    screen = IssueReportScreen(ids)
    await app.push_screen(screen)
    await _settle(app, pilot)
    return screen


@pytest.mark.asyncio
async def test_issues_sequentially_and_reports(fake_client, data_dir):
    fake_client.issue_boleto.side_effect = [
        IssueResult.success({"nosso_numero": "1"}),
        IssueResult.failure("CPF invalido"),
        IssueResult.success({"nosso_numero": "3"}),
    ]
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        screen = await _open_issue(app, pilot, ["A", "B", "C"])
        assert app.screen is screen
        assert [c.args[0] for c in fake_client.issue_boleto.call_args_list] == ["A", "B", "C"]
        report = screen._report
        assert report.total_processed == 3
        assert [s.id for s in report.successful] == ["A", "C"]
        assert [(f.id, f.error) for f in report.failed] == [("B", "CPF invalido")]
        assert screen.query_one("#btn-voltar", Button).disabled is False

    runs = json.loads((data_dir / "issuance_runs.json").read_text())
    assert runs[-1]["failed"] == [{"id": "B", "error": "CPF invalido"}]


@pytest.mark.asyncio
async def test_exception_does_not_abort_batch(fake_client):
    fake_client.issue_boleto.side_effect = [RuntimeError("boom"), IssueResult.success()]
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        screen = await _open_issue(app, pilot, ["A", "B"])
        report = screen._report
        assert report.failed_ids == ["A"]
        assert report.succeeded == 1


@pytest.mark.asyncio
async def test_close_returns_to_dashboard_and_reloads(fake_client):
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        await _settle(app, pilot)
        calls_before = fake_client.list_boletos.call_count
        app.screen.action_issue_pending()
        await pilot.pause()
        assert isinstance(app.screen, IssueConfirmScreen)
        app.screen.query_one("#btn-confirm", Button).press()
        await pilot.pause()
        assert isinstance(app.screen, IssueReportScreen)
        await _settle(app, pilot)
        # Only the two Criado boletos are sent
        assert [c.args[0] for c in fake_client.issue_boleto.call_args_list] == ["bol-1", "bol-3"]
        app.screen.query_one("#btn-voltar", Button).press()
        await _settle(app, pilot)
        assert isinstance(app.screen, DashboardScreen)
        assert fake_client.list_boletos.call_count > calls_before


@pytest.mark.asyncio
async def test_detail_issue_button(fake_client, sample_boletos):
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        await _settle(app, pilot)
        app.push_screen(BoletoDetailScreen(sample_boletos[0]))
        await pilot.pause()
        assert app.screen.query_one("#btn-emitir", Button).disabled is False


@pytest.mark.asyncio
async def test_detail_issue_disabled_when_emitido(fake_client, sample_boletos):
    app = BoletosApp(client=fake_client)
    async with app.run_test() as pilot:
        await _settle(app, pilot)
        app.push_screen(BoletoDetailScreen(sample_boletos[1]))
        await pilot.pause()
        assert app.screen.query_one("#btn-emitir", Button).disabled is True
        await pilot.press("e")
        assert isinstance(app.screen, BoletoDetailScreen)


def test_dashboard_default_month_uses_today():
    screen = DashboardScreen(today=date(2023, 12, 31))
    assert screen._filters.month_year == "2023-12"
