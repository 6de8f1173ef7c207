from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ContactSubmissionRecord:
    id: str
    name: str
    email: str
    created_at: datetime
    message: str | None = None


@dataclass(frozen=True)
class RecommendationRecord:
    id: str
    type: str
    title: str
    created_at: datetime
    description: str | None = None
    submitter_name: str | None = None
    submitter_email: str | None = None
