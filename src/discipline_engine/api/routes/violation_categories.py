"""Violation category catalog endpoints (read-only)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from discipline_engine.api.dependencies import CurrentCaller, Discipline
from discipline_engine.api.schemas import (
    ErrorResponse,
    ViolationCategoryListResponse,
    ViolationCategoryResponse,
)

router = APIRouter(prefix="/violation-categories", tags=["violation-categories"])


@router.get("", response_model=ViolationCategoryListResponse)
async def list_violation_categories(
    service: Discipline,
    caller: CurrentCaller,
) -> ViolationCategoryListResponse:
    """Active categories, ordered and grouped by severity."""
    flat, grouped = await service.list_categories()
    return ViolationCategoryListResponse(
        items=[ViolationCategoryResponse.model_validate(c) for c in flat],
        grouped={
            getattr(severity, "value", severity): [
                ViolationCategoryResponse.model_validate(c) for c in categories
            ]
            for severity, categories in grouped.items()
        },
    )


@router.get(
    "/{violation_category_id}",
    response_model=ViolationCategoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_violation_category(
    service: Discipline,
    caller: CurrentCaller,
    violation_category_id: Annotated[UUID, Path()],
) -> ViolationCategoryResponse:
    """Get one violation category."""
    category = await service.get_category(violation_category_id)
    return ViolationCategoryResponse.model_validate(category)
