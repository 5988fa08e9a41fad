from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from boletos.models.report import IssuanceFailure, IssuanceReport, IssuanceSuccess, IssueResult
from boletos.services.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

IssueOne = Callable[[str], IssueResult]
ProgressCallback = Callable[[int, int, str], object]


def _validate_ids(ids: object) -> list[str]:
    if not isinstance(ids, (list, tuple)):
        raise InvalidInputError("Nenhum boleto informado: esperada uma lista de IDs")
    if not ids:
        raise InvalidInputError("Nenhum boleto informado")
    bad = [i for i in ids if not isinstance(i, str) or not i.strip()]
    if bad:
        raise InvalidInputError(f"IDs de boleto invalidos: {bad!r}")
    return list(ids)


def _as_result(value: object) -> IssueResult:
    """Accept plain {ok, data|error} dicts from collaborators as well."""
    if isinstance(value, IssueResult):
        return value
    if isinstance(value, Mapping):
        if value.get("ok"):
            return IssueResult.success(value.get("data"))
        return IssueResult.failure(str(value.get("error") or "Erro desconhecido"))
    return IssueResult.failure(f"Resultado invalido: {value!r}")


def issue_all(
    ids: Sequence[str],
    issue_one: IssueOne,
    *,
    on_progress: ProgressCallback | None = None,
) -> IssuanceReport:
    """Issue every boleto in *ids*, one at a time, in input order.

    A failure (failed result or exception from *issue_one*) is recorded and
    processing continues with the next id. Nothing is retried or rolled back.
    Raises InvalidInputError before any call when *ids* is empty or not a
    list of strings.
    """
    boleto_ids = _validate_ids(ids)
    total = len(boleto_ids)
    report = IssuanceReport(total_processed=total)

    for index, boleto_id in enumerate(boleto_ids):
        if on_progress is not None:
            try:
                on_progress(index, total, boleto_id)
            except Exception:
                # The batch outlives its observer (e.g. a closed screen).
                logger.warning("Progress callback failed at %s", boleto_id, exc_info=True)
        try:
            result = issue_one(boleto_id)
        except Exception as exc:
            logger.warning("Boleto %s: unexpected error during issuance", boleto_id, exc_info=True)
            result = IssueResult.failure(str(exc) or type(exc).__name__)
        else:
            result = _as_result(result)

        if result.ok:
            report.successful.append(IssuanceSuccess(id=boleto_id, data=result.data))
        else:
            error = result.error or "Erro desconhecido"
            logger.warning("Boleto %s not issued: %s", boleto_id, error)
            report.failed.append(IssuanceFailure(id=boleto_id, error=error))

    return report
