"""
Contact form endpoints.

Submissions are validated against a fixed schema and kept in memory for the life of
the process.
"""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.deps import CatalogStoreDep, as_rows, bad_request, server_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# --- Pydantic models ---

class ContactSubmissionCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    message: str | None = Field(default=None, max_length=5000)

    @field_validator("message", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ContactSubmission(BaseModel):
    id: str
    name: str
    email: str
    message: str | None = None
    created_at: datetime


class SubmissionResponse(BaseModel):
    message: str
    id: str


# --- Endpoints ---

@router.post("", response_model=SubmissionResponse)
async def submit_contact(request: Request, store: CatalogStoreDep) -> dict:
    """Validate and store a contact form submission."""
    try:
        payload = await request.json()
        submission = ContactSubmissionCreate.model_validate(payload)
    except ValueError as exc:
        logger.info(f"Rejected contact form submission: {exc}")
        raise bad_request("Invalid contact form data") from exc

    try:
        record = store.add_contact_submission(**submission.model_dump())
    except Exception as exc:
        raise server_error("Failed to save contact form", exc) from exc
    return {"message": "Message sent successfully!", "id": record.id}


@router.get("", response_model=list[ContactSubmission])
def list_contact_submissions(store: CatalogStoreDep) -> list[dict]:
    try:
        return as_rows(store.contact_submissions())
    except Exception as exc:
        raise server_error("Failed to fetch contact submissions", exc) from exc
