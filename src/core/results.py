"""
FitTrack Assistant — Service result types.

Services never raise on business-rule failures; they return one of these
values and the UI decides how to render it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.data.models import DailyReport


class ResultKind(Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    INACTIVE = "inactive"
    CONFLICT = "conflict"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    INVALID_INPUT = "invalid_input"


@dataclass
class ServiceResult:
    kind: ResultKind
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.SUCCESS


@dataclass
class EntitlementResult(ServiceResult):
    new_expiry: datetime | None = None


@dataclass
class ReportResult(ServiceResult):
    rows: list[DailyReport] = field(default_factory=list)
