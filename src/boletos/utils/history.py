"""Local log of bulk issuance runs.

The platform keeps the boleto rows; this file only remembers what each run
of ``boletos issue`` reported, so the failed subset can be re-submitted.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from filelock import FileLock

from boletos import config as _config
from boletos.models.report import IssuanceReport

logger = logging.getLogger(__name__)

MAX_RUNS = 200


def _history_path() -> Path:
    return _config.get_data_dir() / "issuance_runs.json"


def _backup_corrupt(path: Path) -> Path:
    """Rename a corrupt file to a timestamped backup before it gets overwritten."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    backup = path.with_name(f"{path.name}.corrupt.{ts}")
    path.rename(backup)
    logger.warning("Corrupt file backed up: %s → %s", path, backup)
    return backup


@contextmanager
def _locked() -> Iterator[None]:
    """Hold an exclusive file lock during history read-modify-write."""
    hp = _history_path()
    hp.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(hp.with_suffix(".lock")):
        yield


def _load() -> list[dict[str, Any]]:
    hp = _history_path()
    if not hp.exists():
        return []
    try:
        data = json.loads(hp.read_text())
    except (json.JSONDecodeError, ValueError):
        _backup_corrupt(hp)
        return []
    if not isinstance(data, list):
        _backup_corrupt(hp)
        return []
    return data


def _save(runs: list[dict[str, Any]]) -> None:
    hp = _history_path()
    hp.parent.mkdir(parents=True, exist_ok=True)
    tmp = hp.with_suffix(".tmp")
    tmp.write_text(json.dumps(runs, indent=2, ensure_ascii=False) + "\n")
    os.replace(tmp, hp)


def add_run(
    report: IssuanceReport,
    *,
    scope: str,
    started_at: str | None = None,
) -> dict[str, Any]:
    """Append a run to the history, keeping only the most recent MAX_RUNS."""
    entry: dict[str, Any] = {
        "started_at": started_at or datetime.now(UTC).isoformat(timespec="seconds"),
        "scope": scope,
        "total": report.total_processed,
        "succeeded": [s.id for s in report.successful],
        "failed": [f.to_dict() for f in report.failed],
    }
    with _locked():
        runs = _load()
        runs.append(entry)
        _save(runs[-MAX_RUNS:])
    return entry


def list_runs(limit: int | None = None) -> list[dict[str, Any]]:
    """Return recorded runs, most recent first."""
    with _locked():
        runs = _load()
    runs.reverse()
    return runs[:limit] if limit else runs


def last_failed_ids() -> list[str]:
    """Ids that failed in the most recent run (empty when none or no runs)."""
    runs = list_runs(limit=1)
    if not runs:
        return []
    return [f["id"] for f in runs[0].get("failed", [])]
