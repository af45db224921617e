"""Employee point total and discipline history endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from discipline_engine.api.dependencies import AppSettings, CurrentCaller, Discipline
from discipline_engine.api.schemas import (
    CorrectiveActionResponse,
    DisciplineHistoryResponse,
    EmployeePointsResponse,
    ErrorResponse,
)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get(
    "/{employee_id}/points",
    response_model=EmployeePointsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee_points(
    service: Discipline,
    settings: AppSettings,
    caller: CurrentCaller,
    employee_id: Annotated[UUID, Path()],
) -> EmployeePointsResponse:
    """Cumulative and rolling-window points over non-voided actions."""
    total = await service.get_employee_total_points(employee_id)
    current = await service.get_current_points(employee_id)
    return EmployeePointsResponse(
        employee_id=employee_id,
        total_points=total,
        current_points=current,
        rolling_window_days=settings.rolling_window_days,
    )


@router.get(
    "/{employee_id}/discipline-history",
    response_model=DisciplineHistoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_discipline_history(
    service: Discipline,
    caller: CurrentCaller,
    employee_id: Annotated[UUID, Path()],
    include_voided: Annotated[bool, Query()] = False,
) -> DisciplineHistoryResponse:
    """All corrective actions for an employee, newest first."""
    history = await service.get_discipline_history(employee_id, include_voided)
    return DisciplineHistoryResponse(
        employee_id=history.employee.employee_id,
        employee_name=history.employee.full_name,
        actions=[CorrectiveActionResponse.model_validate(a) for a in history.actions],
        total_points=history.total_points,
        current_points=history.current_points,
        counts_by_status=history.counts_by_status,
        counts_by_severity=history.counts_by_severity,
    )
