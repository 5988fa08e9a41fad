from __future__ import annotations

import logging

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, ProgressBar, RichLog, Static

from boletos.models.report import IssuanceReport
from boletos.services.bulk_issue import issue_all

logger = logging.getLogger(__name__)


class IssueReportScreen(ModalScreen[bool]):
    """Issue boletos one by one, showing progress and the final report.

    Dismisses with True when at least one boleto was issued, so the caller
    can reload its list.
    """

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
        Binding("q", "go_back", show=False),
    ]

    def __init__(self, ids: list[str]) -> None:
        super().__init__()
        self._ids = list(ids)
        self._report: IssuanceReport | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Emissão de boletos", id="header-bar")
            yield ProgressBar(total=len(self._ids), show_eta=False, id="issue-progress")
            yield Label("", id="issue-summary")
            yield RichLog(id="issue-log", wrap=True, markup=True)
            with Horizontal(classes="button-bar"):
                yield Button("✕ Fechar", id="btn-voltar", disabled=True)

    def on_mount(self) -> None:
        self.query_one("#issue-summary", Label).update(f"Emitindo {len(self._ids)} boleto(s)…")
        self._run_issue()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-voltar":
            self.action_go_back()

    @work(thread=True)
    def _run_issue(self) -> None:
        def on_progress(index: int, total: int, boleto_id: str) -> None:
            self.app.call_from_thread(self._on_progress, index, total, boleto_id)

        try:
            client = self.app.get_client()  # type: ignore[attr-defined]
            report = issue_all(self._ids, client.issue_boleto, on_progress=on_progress)
        except Exception as e:
            self.app.call_from_thread(self._show_error, str(e))
            return

        try:
            from boletos.utils.history import add_run

            add_run(report, scope=client.settings.scope)
        except OSError:
            logger.warning("Could not record issuance run", exc_info=True)
        self.app.call_from_thread(self._show_report, report)

    def _on_progress(self, index: int, total: int, boleto_id: str) -> None:
        self.query_one("#issue-progress", ProgressBar).update(progress=index)
        self.query_one("#issue-summary", Label).update(f"Emitindo {index + 1}/{total}: {boleto_id}")

    def _show_report(self, report: IssuanceReport) -> None:
        self._report = report
        self.query_one("#issue-progress", ProgressBar).update(progress=report.total_processed)
        log = self.query_one("#issue-log", RichLog)
        for ok in report.successful:
            log.write(f"[green]OK[/green]   {ok.id}")
        for fail in report.failed:
            log.write(f"[red]ERRO[/red] {fail.id}: {fail.error}")

        summary = (
            f"Processados: {report.total_processed} · "
            f"emitidos: {report.succeeded} · falhas: {report.failed_count}"
        )
        self.query_one("#issue-summary", Label).update(summary)
        self.query_one("#btn-voltar", Button).disabled = False
        if report.failed:
            self.notify(
                f"{report.failed_count} boleto(s) com falha. "
                "Use 'boletos retry-failed' para reenviar.",
                severity="warning",
                timeout=5,
            )
        else:
            self.notify(f"{report.succeeded} boleto(s) emitido(s)", timeout=3)

    def _show_error(self, msg: str) -> None:
        self.query_one("#issue-summary", Label).update(f"Erro: {msg}")
        self.query_one("#btn-voltar", Button).disabled = False
        self.notify(f"Erro: {msg}", severity="error", timeout=5)

    def action_go_back(self) -> None:
        if self.query_one("#btn-voltar", Button).disabled:
            self.notify("Aguarde o fim da emissão", severity="warning", timeout=2)
            return
        self.dismiss(bool(self._report and self._report.succeeded))
