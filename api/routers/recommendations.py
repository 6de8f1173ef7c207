"""
Visitor recommendation endpoints.
"""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.deps import CatalogStoreDep, as_rows, bad_request, server_error
from api.routers.contact import EMAIL_PATTERN, SubmissionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


class RecommendationCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: str = Field(min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    submitter_name: str | None = Field(default=None, max_length=200)
    submitter_email: str | None = Field(default=None, max_length=320, pattern=EMAIL_PATTERN)

    @field_validator("description", "submitter_name", "submitter_email", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Recommendation(BaseModel):
    id: str
    type: str
    title: str
    description: str | None = None
    submitter_name: str | None = None
    submitter_email: str | None = None
    created_at: datetime


@router.post("", response_model=SubmissionResponse)
async def submit_recommendation(request: Request, store: CatalogStoreDep) -> dict:
    try:
        payload = await request.json()
        recommendation = RecommendationCreate.model_validate(payload)
    except ValueError as exc:
        logger.info(f"Rejected recommendation: {exc}")
        raise bad_request("Invalid recommendation data") from exc

    try:
        record = store.add_recommendation(**recommendation.model_dump())
    except Exception as exc:
        raise server_error("Failed to save recommendation", exc) from exc
    return {"message": "Recommendation submitted successfully!", "id": record.id}


@router.get("", response_model=list[Recommendation])
def list_recommendations(store: CatalogStoreDep) -> list[dict]:
    try:
        return as_rows(store.recommendations())
    except Exception as exc:
        raise server_error("Failed to fetch recommendations", exc) from exc
