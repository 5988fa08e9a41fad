from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class IssueResult:
    """Outcome of issuing a single boleto: {ok, data} or {ok, error}."""

    ok: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def success(cls, data: Any = None) -> IssueResult:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> IssueResult:
        return cls(ok=False, error=error)


@dataclass(frozen=True)
class IssuanceSuccess:
    id: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "data": self.data}


@dataclass(frozen=True)
class IssuanceFailure:
    id: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "error": self.error}


@dataclass
class IssuanceReport:
    """Aggregate result of one bulk issuance run.

    Each input id lands in exactly one partition, in input order.
    """

    total_processed: int = 0
    successful: list[IssuanceSuccess] = field(default_factory=list)
    failed: list[IssuanceFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.successful)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def failed_ids(self) -> list[str]:
        return [f.id for f in self.failed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalProcessed": self.total_processed,
            "successful": {
                "count": self.succeeded,
                "items": [s.to_dict() for s in self.successful],
            },
            "failed": {
                "count": self.failed_count,
                "items": [f.to_dict() for f in self.failed],
            },
        }
