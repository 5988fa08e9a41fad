from __future__ import annotations

import argparse
import getpass
import json
import logging
import stat
import sys
from datetime import date
from pathlib import Path


def _check_keyring_available() -> bool:
    """Check if keyring is installed with a usable backend."""
    try:
        import keyring
        from keyring.backends.fail import Keyring as FailKeyring

        return not isinstance(keyring.get_keyring(), FailKeyring)
    except Exception:
        return False


def _upsert_env_var(env_file: Path, key: str, value: str) -> None:
    """Set or update a key=value pair in a .env file, creating it if needed."""
    from dotenv import set_key

    env_file.parent.mkdir(parents=True, exist_ok=True)
    if not env_file.exists():
        env_file.touch()
    set_key(str(env_file), key, value)


def _remove_env_var(env_file: Path, key: str) -> None:
    """Remove a key from a .env file if present."""
    from dotenv import unset_key

    if env_file.exists():
        unset_key(str(env_file), key)


def _warn_open_permissions(env_file: Path) -> None:
    """Warn if .env file has group/other read permissions (Unix only)."""
    try:
        mode = env_file.stat().st_mode
        if mode & (stat.S_IRGRP | stat.S_IROTH):
            print(f"\n  AVISO: {env_file} tem permissões abertas.")
            print("  Recomendação: chmod 600", env_file)
    except OSError:
        pass


# --- init / login / logout ---


def _init_config() -> None:
    """Interactively write config.yaml with the platform URL, anon key and scope."""
    from boletos.config import SCOPES, get_data_dir, load_file_config, save_file_config

    current = load_file_config()
    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)

    print()
    print("Configuração da plataforma")
    print("──────────────────────────")
    print()
    try:
        url = input(f"URL da plataforma [{current.get('supabase_url', '')}]: ").strip()
        anon_key = input("Chave pública (anon key) [manter atual]: ").strip()
        scope = ""
        while scope not in SCOPES:
            default_scope = current.get("scope", "company")
            scope = input(f"Escopo (company/admin) [{default_scope}]: ").strip() or default_scope
    except (EOFError, KeyboardInterrupt):
        print()
        print("Configuração cancelada.")
        return

    data = dict(current)
    if url:
        data["supabase_url"] = url
    if anon_key:
        data["anon_key"] = anon_key
    data["scope"] = scope

    if not data.get("supabase_url") or not data.get("anon_key"):
        print("  ERRO: URL e chave pública são obrigatórias.")
        return

    path = save_file_config(data)
    print()
    print(f"Configuração: {path}")
    print(f"Dados:   {data_dir}")
    print()
    print("Próximo passo: boletos login")


def _login(email: str | None) -> int:
    from boletos import config as _config
    from boletos.services.auth_client import sign_in
    from boletos.services.exceptions import AuthError, CollaboratorUnavailableError

    try:
        settings = _config.load_settings()
    except (KeyError, ValueError) as e:
        print(f"Erro: configuração incompleta ({e}). Execute 'boletos init'.")
        return 1

    try:
        if not email:
            email = input("E-mail: ").strip()
        password = getpass.getpass("Senha: ")
        session = sign_in(settings, email, password)
    except (AuthError, CollaboratorUnavailableError) as e:
        print(f"Erro: {e}")
        return 1
    except (EOFError, KeyboardInterrupt):
        print()
        return 1

    env_file = _config.get_config_dir() / ".env"
    if _check_keyring_available() and _config.store_session(
        session["access_token"], session.get("refresh_token")
    ):
        _remove_env_var(env_file, "BOLETOS_ACCESS_TOKEN")
        print("Sessão armazenada no keychain do sistema.")
    else:
        print("Keychain do sistema indisponível. Salvando token no .env.")
        _upsert_env_var(env_file, "BOLETOS_ACCESS_TOKEN", session["access_token"])
        _warn_open_permissions(env_file)

    user = session.get("user") or {}
    print(f"Autenticado como {user.get('email', email)}")
    return 0


def _renew() -> int:
    from boletos import config as _config
    from boletos.services.exceptions import AuthError, CollaboratorUnavailableError
    from boletos.services.session import renew

    try:
        renew(_config.load_settings())
    except (KeyError, ValueError) as e:
        print(f"Erro: configuração incompleta ({e}). Execute 'boletos init'.")
        return 1
    except (AuthError, CollaboratorUnavailableError) as e:
        print(f"Erro: {e}")
        return 1
    print("Sessão renovada.")
    return 0


def _logout() -> int:
    from boletos import config as _config

    _config.clear_session()
    _remove_env_var(_config.get_config_dir() / ".env", "BOLETOS_ACCESS_TOKEN")
    print("Sessão removida.")
    return 0


# --- boleto commands ---


def _filters_from_args(args: argparse.Namespace):
    from boletos.models.filters import BoletoFilters
    from boletos.services.query import current_month_year
    from boletos.utils.validators import validate_month_year

    if args.todos:
        month_year = None
    elif args.mes:
        month_year = validate_month_year(args.mes)
    else:
        month_year = current_month_year(date.today())
    return BoletoFilters.from_dict(
        {
            "monthYear": month_year,
            "statusEmissao": args.emissao,
            "statusPagamento": args.pagamento,
            "projectId": args.projeto,
            "companyId": args.empresa,
        }
    )


def _print_boletos(boletos: list) -> None:
    from boletos.utils.formatters import format_brl_safe, format_date_br

    if not boletos:
        print("Nenhum boleto encontrado.")
        return
    header = f"{'Vencimento':<11} {'Valor':>16}  {'Emissão':<10} {'Pagamento':<10} {'Projeto':<20} ID"
    print(header)
    print("─" * len(header))
    for b in boletos:
        print(
            f"{format_date_br(b.data_vencimento):<11} "
            f"{format_brl_safe(b.valor_boleto):>16}  "
            f"{b.status_emissao:<10} {b.status_pagamento:<10} "
            f"{(b.project_name or '')[:20]:<20} {b.id}"
        )
    print(f"\n{len(boletos)} boleto(s)")


def _list(args: argparse.Namespace) -> int:
    from dataclasses import asdict

    from boletos.services.query import translate

    filters = _filters_from_args(args)
    query = translate(filters)
    client = _connect_or_none()
    if client is None:
        return 1
    boletos = client.list_boletos(query, admin=args.admin or None)
    if args.json:
        print(json.dumps([asdict(b) for b in boletos], indent=2, ensure_ascii=False))
    else:
        _print_boletos(boletos)
    return 0


def _connect_or_none():
    from boletos.services.session import connect

    try:
        return connect()
    except KeyError as e:
        print(f"Erro: {e} não configurado. Execute 'boletos init' e 'boletos login'.")
    except ValueError as e:
        print(f"Erro: {e}")
    return None


def _print_report(report, as_json: bool) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return
    print()
    print(f"Processados: {report.total_processed}")
    print(f"  Emitidos: {report.succeeded}")
    print(f"  Falhas:   {report.failed_count}")
    for failure in report.failed:
        print(f"    {failure.id}: {failure.error}")


def _run_issue(ids: list[str], as_json: bool, client=None) -> int:
    from boletos.services.bulk_issue import issue_all
    from boletos.utils.history import add_run

    if client is None:
        client = _connect_or_none()
    if client is None:
        return 1

    def _progress(index: int, total: int, boleto_id: str) -> None:
        if not as_json:
            print(f"[{index + 1}/{total}] Emitindo {boleto_id}…")

    report = issue_all(ids, client.issue_boleto, on_progress=_progress)
    _print_report(report, as_json)
    try:
        add_run(report, scope=client.settings.scope)
    except OSError as e:
        print(f"Aviso: execução não registrada no histórico: {e}", file=sys.stderr)
    return 1 if report.failed else 0


def _issue(args: argparse.Namespace) -> int:
    from boletos.models.boleto import STATUS_CRIADO
    from boletos.services.query import translate

    ids = list(args.ids)
    client = None
    if args.pendentes:
        client = _connect_or_none()
        if client is None:
            return 1
        filters = _filters_from_args(args).merge(status_emissao=STATUS_CRIADO)
        ids.extend(b.id for b in client.list_boletos(translate(filters)) if b.can_issue)
    return _run_issue(ids, args.json, client)


def _retry_failed(args: argparse.Namespace) -> int:
    from boletos.utils.history import last_failed_ids

    ids = last_failed_ids()
    if not ids:
        print("Nenhuma falha na última execução.")
        return 0
    return _run_issue(ids, args.json)


def _update(args: argparse.Namespace) -> int:
    from boletos.utils.validators import (
        validate_linha_digitavel,
        validate_status_emissao,
        validate_status_pagamento,
    )

    update: dict[str, str] = {}
    if args.emissao:
        update["status_emissao"] = validate_status_emissao(args.emissao)
    if args.pagamento:
        update["status_pagamento"] = validate_status_pagamento(args.pagamento)
    if args.nosso_numero:
        update["nosso_numero"] = args.nosso_numero
    if args.linha:
        update["linha_digitavel"] = validate_linha_digitavel(args.linha)
    if not update:
        print("Nada para atualizar.")
        return 1

    client = _connect_or_none()
    if client is None:
        return 1
    boleto = client.update_boleto(args.id, update, current_pagamento=args.pagamento_atual)
    print(
        f"Boleto {args.id} atualizado: "
        f"{boleto.get('status_emissao', '?')} / {boleto.get('status_pagamento', '?')}"
    )
    return 0


def _delete(args: argparse.Namespace) -> int:
    if not args.sim:
        answer = input(f"Excluir boleto {args.id}? [s/N]: ").strip().lower()
        if answer not in ("s", "sim", "y", "yes"):
            print("Exclusão cancelada.")
            return 1
    client = _connect_or_none()
    if client is None:
        return 1
    client.delete_boleto(args.id)
    print(f"Boleto {args.id} excluído.")
    return 0


def _receivables(args: argparse.Namespace) -> int:
    from boletos.utils.formatters import format_brl_safe, format_date_br

    client = _connect_or_none()
    if client is None:
        return 1
    items = client.available_billing_receivables()
    if not items:
        print("Nenhum recebível disponível para gerar boletos.")
        return 0
    for r in items:
        parcela = f"#{r.numero_parcela}" if r.numero_parcela is not None else ""
        print(
            f"{format_date_br(r.due_date):<11} {format_brl_safe(r.amount):>16}  "
            f"{(r.buyer_name or '')[:24]:<24} {parcela:<5} {r.id}"
        )
    print(f"\n{len(items)} recebível(is)")
    return 0


def _create(args: argparse.Namespace) -> int:
    client = _connect_or_none()
    if client is None:
        return 1
    result = client.create_boletos(args.ids)
    print(f"Boletos criados: {len(result.created)}")
    for err in result.errors:
        print(f"  {err.get('billingReceivableId', '?')}: {err.get('error', '')}")
    return 1 if result.errors else 0


def _history(args: argparse.Namespace) -> int:
    from boletos.utils.history import list_runs

    runs = list_runs(limit=args.limite)
    if not runs:
        print("Nenhuma emissão registrada.")
        return 0
    for run in runs:
        print(
            f"{run['started_at']}  [{run['scope']}]  total {run['total']}  "
            f"ok {len(run['succeeded'])}  falhas {len(run['failed'])}"
        )
    return 0


def _preflight() -> bool:
    """Verify minimal config before launching the TUI."""
    from boletos.config import config_file, get_access_token, get_data_dir, load_settings

    get_data_dir().mkdir(parents=True, exist_ok=True)
    try:
        load_settings()
    except (KeyError, ValueError):
        print(f"Erro: configuração não encontrada ou incompleta: {config_file()}")
        print("Execute 'boletos init' para configurar a plataforma.")
        return False
    try:
        get_access_token()
    except KeyError:
        print("Erro: sessão não encontrada.")
        print("Execute 'boletos login' para autenticar.")
        return False
    return True


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--mes", help="Mês de vencimento (AAAA-MM); padrão: mês atual")
    p.add_argument("--todos", action="store_true", help="Sem filtro de mês")
    p.add_argument("--emissao", help="Status de emissão (Criado, Emitido, Cancelado)")
    p.add_argument("--pagamento", help="Status de pagamento (N/A, Pago, Em Aberto, Em Atraso)")
    p.add_argument("--projeto", help="ID do projeto")
    p.add_argument("--empresa", help="ID da empresa (somente admin)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="boletos", description="Gestão de boletos")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log detalhado")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init", help="Configurar a plataforma")
    p = sub.add_parser("login", help="Autenticar e armazenar a sessão")
    p.add_argument("--email")
    p.add_argument("--renovar", action="store_true", help="Renovar a sessão armazenada")
    sub.add_parser("logout", help="Remover a sessão armazenada")

    p = sub.add_parser("list", help="Listar boletos")
    _add_filter_args(p)
    p.add_argument("--admin", action="store_true", help="Usar a visão de administrador")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("issue", help="Emitir boletos no banco, um por vez")
    p.add_argument("ids", nargs="*", help="IDs dos boletos")
    p.add_argument(
        "--pendentes",
        action="store_true",
        help="Incluir todos os boletos 'Criado' do filtro",
    )
    _add_filter_args(p)
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("retry-failed", help="Reenviar as falhas da última emissão")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("update", help="Atualizar status de um boleto (admin)")
    p.add_argument("id")
    p.add_argument("--emissao")
    p.add_argument("--pagamento")
    p.add_argument("--pagamento-atual", help="Status de pagamento atual do boleto")
    p.add_argument("--nosso-numero")
    p.add_argument("--linha", help="Linha digitável")

    p = sub.add_parser("delete", help="Excluir um boleto (admin)")
    p.add_argument("id")
    p.add_argument("--sim", action="store_true", help="Não pedir confirmação")

    sub.add_parser("receivables", help="Recebíveis sem boleto (admin)")
    p = sub.add_parser("create", help="Gerar boletos para recebíveis (admin)")
    p.add_argument("ids", nargs="+", help="IDs dos recebíveis de cobrança")

    p = sub.add_parser("history", help="Histórico de emissões em lote")
    p.add_argument("--limite", type=int, default=20)
    return parser


_COMMANDS = {
    "list": _list,
    "issue": _issue,
    "retry-failed": _retry_failed,
    "update": _update,
    "delete": _delete,
    "receivables": _receivables,
    "create": _create,
    "history": _history,
}


def main(argv: list[str] | None = None) -> None:
    """Entry point for the boletos CLI/TUI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    match args.command:
        case "init":
            _init_config()
            return
        case "login":
            sys.exit(_renew() if args.renovar else _login(args.email))
        case "logout":
            sys.exit(_logout())
        case None:
            pass
        case command:
            from boletos.services.exceptions import (
                AuthError,
                CollaboratorUnavailableError,
                FunctionRejectError,
                InvalidInputError,
            )

            try:
                code = _COMMANDS[command](args)
            except AuthError as e:
                print(f"Erro: {e}")
                print("Execute 'boletos login' para renovar a sessão.")
                code = 1
            except (
                InvalidInputError,
                FunctionRejectError,
                CollaboratorUnavailableError,
                ValueError,
            ) as e:
                print(f"Erro: {e}")
                code = 1
            sys.exit(code)

    if not _preflight():
        sys.exit(1)

    from boletos.tui.app import BoletosApp

    app = BoletosApp()
    app.run()


if __name__ == "__main__":
    main()
