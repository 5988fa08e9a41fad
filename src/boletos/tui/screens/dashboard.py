from __future__ import annotations

from datetime import date

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Button, DataTable, Footer, Label, MaskedInput, Select, Static

from boletos.models.boleto import Boleto, total_valor_boleto
from boletos.models.filters import ALL, BoletoFilters
from boletos.services.query import current_month_year, shift_month, translate
from boletos.tui.options import STATUS_EMISSAO_OPTIONS, STATUS_PAGAMENTO_OPTIONS
from boletos.utils.formatters import format_brl, format_brl_safe, format_date_br, format_month_year
from boletos.utils.validators import parse_month_input

_EMISSAO_STYLES = {
    "Criado": "[yellow]Criado[/yellow]",
    "Emitido": "[green]Emitido[/green]",
    "Cancelado": "[red]Cancelado[/red]",
}

_PAGAMENTO_STYLES = {
    "N/A": "[dim]N/A[/dim]",
    "Pago": "[green]Pago[/green]",
    "Em Aberto": "[blue]Em Aberto[/blue]",
    "Em Atraso": "[red]Em Atraso[/red]",
}

MARK = "●"


def _to_month_input(month_year: str) -> str:
    """Render "YYYY-MM" as the "MM/AAAA" filter mask."""
    year, _, month = month_year.partition("-")
    return f"{month}/{year}"


class DashboardScreen(Screen):
    """Boleto list with month and status filters."""

    BINDINGS = [
        # List actions, hidden from footer (have buttons above table)
        Binding("e", "issue_selected", "Emitir", show=False),
        Binding("p", "issue_pending", "Emitir pendentes", show=False),
        Binding("r", "refresh", "Atualizar", show=False),
        # Generic actions, shown in footer
        Binding("left_square_bracket", "prev_month", "Mês anterior", key_display="["),
        Binding("right_square_bracket", "next_month", "Próximo mês", key_display="]"),
        Binding("f", "focus_filter", "Filtrar"),
        Binding("h", "help", "Ajuda"),
        Binding("q", "quit", "Sair"),
    ]

    def __init__(self, filters: BoletoFilters | None = None, today: date | None = None) -> None:
        super().__init__()
        self._today = today or date.today()
        if filters is None:
            filters = BoletoFilters(month_year=current_month_year(self._today))
        self._filters = filters
        self._boletos: list[Boleto] = []
        self._marked: set[str] = set()
        self._mark_column = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="top-bar"):
            yield Static("Boletos", id="app-title")
            yield Static("…", id="scope-badge")

        month = self._filters.month_year
        with Horizontal(id="filter-bar"):
            yield Static(self._month_title(), id="section-title")
            yield Button("◀", id="btn-prev-month", tooltip="Mês anterior ([)")
            yield MaskedInput(
                template="00/0000",
                value=_to_month_input(month) if month else "",
                id="filter-month",
                tooltip="Mês de vencimento (MM/AAAA). Vazio para todos os meses",
            )
            yield Button("▶", id="btn-next-month", tooltip="Próximo mês (])")
            yield Select(
                STATUS_EMISSAO_OPTIONS,
                value=self._filters.status_emissao or ALL,
                allow_blank=False,
                id="filter-emissao",
                tooltip="Status de emissão",
            )
            yield Select(
                STATUS_PAGAMENTO_OPTIONS,
                value=self._filters.status_pagamento or ALL,
                allow_blank=False,
                id="filter-pagamento",
                tooltip="Status de pagamento",
            )
            yield Button(
                "▷ Filtrar",
                id="btn-filtrar",
                variant="primary",
                tooltip="Aplicar filtros",
            )

        with Horizontal(id="action-bar"):
            yield Button(
                "▶ Emitir selecionados",
                id="btn-issue",
                variant="primary",
                tooltip="Emitir os boletos marcados, ou o boleto sob o cursor (e)",
            )
            yield Button(
                "▶ Emitir pendentes",
                id="btn-issue-pending",
                variant="success",
                tooltip="Emitir todos os boletos com status Criado da lista (p)",
            )
            yield Button(
                "↻ Atualizar",
                id="btn-refresh",
                tooltip="Recarregar boletos da plataforma (r)",
            )
            yield Label("", id="summary")

        yield DataTable(id="boletos-table", cursor_type="row")

        yield Static(
            "Nenhum boleto encontrado para o filtro selecionado.\n"
            "Use os botões ◀ ▶ (teclas [ e ]) para trocar de mês "
            "ou deixe o mês vazio para listar todos.",
            id="empty-state",
        )

        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#boletos-table", DataTable).focus()
        self._reload()

    def on_key(self, event: Key) -> None:
        table = self.query_one("#boletos-table", DataTable)
        if not table.has_focus:
            return
        match event.key:
            case "j":
                table.action_cursor_down()
            case "k":
                table.action_cursor_up()
            case "space" | "x":
                self.action_toggle_mark()
            case "enter":
                self._open_selected()
            case _:
                return
        event.prevent_default()
        event.stop()

    # --- Filters ---

    def _month_title(self) -> str:
        if self._filters.month_year:
            return format_month_year(self._filters.month_year)
        return "Todos os meses"

    def _read_filters(self) -> BoletoFilters | None:
        """Build filters from the filter bar, or None (with a toast) if the month is invalid."""
        raw = self.query_one("#filter-month", MaskedInput).value.strip()
        month_year = None
        if raw.replace("/", "").strip():
            try:
                month_year = parse_month_input(raw)
            except ValueError as e:
                self.notify(str(e), severity="error", timeout=4)
                return None
        return self._filters.merge(
            month_year=month_year,
            status_emissao=self.query_one("#filter-emissao", Select).value,
            status_pagamento=self.query_one("#filter-pagamento", Select).value,
        )

    def _apply_filter(self) -> None:
        filters = self._read_filters()
        if filters is None:
            return
        if filters != self._filters:
            self._marked.clear()
        self._filters = filters
        self.query_one("#section-title", Static).update(self._month_title())
        self._reload()

    def _shift_month(self, delta: int) -> None:
        base = self._filters.month_year or current_month_year(self._today)
        month_year = shift_month(base, delta)
        self.query_one("#filter-month", MaskedInput).value = _to_month_input(month_year)
        self._apply_filter()

    # --- Data loading (threaded) ---

    def _reload(self) -> None:
        self.query_one("#summary", Label).update("Carregando…")
        self._load_boletos(self._filters)

    @work(thread=True, exclusive=True)
    def _load_boletos(self, filters: BoletoFilters) -> None:
        try:
            client = self.app.get_client()  # type: ignore[attr-defined]
            boletos = client.list_boletos(translate(filters))
            is_admin = client.settings.is_admin
        except KeyError:
            self.app.call_from_thread(
                self._on_load_error, "Sessão não configurada: execute 'boletos login'"
            )
            return
        except Exception as e:
            self.app.call_from_thread(self._on_load_error, str(e))
            return
        self.app.call_from_thread(self._on_loaded, boletos, is_admin)

    def _on_loaded(self, boletos: list[Boleto], is_admin: bool) -> None:
        badge = self.query_one("#scope-badge", Static)
        badge.update("ADMIN" if is_admin else "EMPRESA")
        badge.set_class(is_admin, "scope-admin")
        self._boletos = boletos
        ids = {b.id for b in boletos}
        self._marked &= ids
        self._populate_table()

    def _on_load_error(self, msg: str) -> None:
        self.query_one("#summary", Label).update("")
        self.notify(f"Erro ao carregar boletos: {msg}", severity="error", timeout=5)

    def _populate_table(self) -> None:
        table = self.query_one("#boletos-table", DataTable)
        table.clear(columns=True)
        columns = table.add_columns(
            " ", "Vencimento", "Valor", "Emissão", "Pagamento", "Parcela", "Projeto", "Pagador"
        )
        self._mark_column = columns[0]

        for b in self._boletos:
            table.add_row(
                MARK if b.id in self._marked else "",
                format_date_br(b.data_vencimento),
                format_brl_safe(b.valor_boleto),
                _EMISSAO_STYLES.get(b.status_emissao, b.status_emissao),
                _PAGAMENTO_STYLES.get(b.status_pagamento, b.status_pagamento),
                str(b.numero_parcela) if b.numero_parcela is not None else "",
                b.project_name or "",
                b.buyer_name or "",
                key=b.id,
            )

        has_rows = table.row_count > 0
        table.display = has_rows
        self.query_one("#empty-state", Static).display = not has_rows
        self._update_summary()

    def _update_summary(self) -> None:
        total = total_valor_boleto(self._boletos)
        pending = sum(1 for b in self._boletos if b.can_issue)
        text = f"{len(self._boletos)} boleto(s) · {format_brl(str(total))} · {pending} pendente(s)"
        if self._marked:
            text += f" · {len(self._marked)} marcado(s)"
        self.query_one("#summary", Label).update(text)

    # --- Selection ---

    def _selected_boleto(self) -> Boleto | None:
        """Return the boleto under the cursor, or None if the table is empty."""
        table = self.query_one("#boletos-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return next((b for b in self._boletos if b.id == row_key.value), None)

    def action_toggle_mark(self) -> None:
        boleto = self._selected_boleto()
        if boleto is None:
            return
        if boleto.id in self._marked:
            self._marked.discard(boleto.id)
        else:
            self._marked.add(boleto.id)
        table = self.query_one("#boletos-table", DataTable)
        table.update_cell(boleto.id, self._mark_column, MARK if boleto.id in self._marked else "")
        self._update_summary()

    def _open_selected(self) -> None:
        boleto = self._selected_boleto()
        if boleto is None:
            return
        from boletos.tui.screens.boleto_detail import BoletoDetailScreen

        self.app.push_screen(
            BoletoDetailScreen(boleto),
            callback=lambda result: self._on_detail_closed(boleto, result),
        )

    def _on_detail_closed(self, boleto: Boleto, result: str | None) -> None:
        if result == "issue":
            self._confirm_issue([boleto])

    # --- Event handlers ---

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id in ("filter-emissao", "filter-pagamento"):
            self._apply_filter()

    def on_input_submitted(self, event: MaskedInput.Submitted) -> None:
        self._apply_filter()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-prev-month":
                self.action_prev_month()
            case "btn-next-month":
                self.action_next_month()
            case "btn-filtrar":
                self._apply_filter()
            case "btn-issue":
                self.action_issue_selected()
            case "btn-issue-pending":
                self.action_issue_pending()
            case "btn-refresh":
                self.action_refresh()

    # --- Issuance ---

    def _confirm_issue(self, boletos: list[Boleto]) -> None:
        if not boletos:
            self.notify("Nenhum boleto pendente de emissão", severity="warning", timeout=3)
            return
        from boletos.tui.screens.confirm import IssueConfirmScreen

        ids = [b.id for b in boletos]
        self.app.push_screen(
            IssueConfirmScreen(boletos),
            callback=lambda confirmed: self._on_issue_confirmed(ids, confirmed),
        )

    def _on_issue_confirmed(self, ids: list[str], confirmed: bool | None) -> None:
        if not confirmed:
            return
        from boletos.tui.screens.issue_report import IssueReportScreen

        self.app.push_screen(IssueReportScreen(ids), callback=self._on_issue_done)

    def _on_issue_done(self, issued: bool | None) -> None:
        self._marked.clear()
        if issued:
            self._reload()

    def action_issue_selected(self) -> None:
        if self._marked:
            chosen = [b for b in self._boletos if b.id in self._marked]
        else:
            current = self._selected_boleto()
            chosen = [current] if current else []
        issuable = [b for b in chosen if b.can_issue]
        skipped = len(chosen) - len(issuable)
        if skipped:
            self.notify(
                f"{skipped} boleto(s) ignorado(s): apenas status Criado pode ser emitido",
                severity="warning",
                timeout=4,
            )
        self._confirm_issue(issuable)

    def action_issue_pending(self) -> None:
        self._confirm_issue([b for b in self._boletos if b.can_issue])

    # --- Actions ---

    def action_refresh(self) -> None:
        self._reload()

    def action_prev_month(self) -> None:
        self._shift_month(-1)

    def action_next_month(self) -> None:
        self._shift_month(1)

    def action_help(self) -> None:
        from boletos.tui.screens.help import HelpScreen

        self.app.push_screen(HelpScreen())

    def action_focus_filter(self) -> None:
        self.query_one("#filter-month", MaskedInput).focus()

    def action_quit(self) -> None:
        self.app.exit()
