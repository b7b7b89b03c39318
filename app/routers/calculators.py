"""计算器 API"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db_session
from app.schemas.calculators import (
    CalculationResponse,
    CaloriesRequest,
    MacrosRequest,
    TmbRequest,
)
from app.services.calculators import CalculatorService

router = APIRouter(prefix="/api/calculators", tags=["calculators"])


@router.post("/tmb")
async def calculate_tmb(
    request: TmbRequest,
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    return await CalculatorService(db).tmb(request)


@router.post("/macros")
async def calculate_macros(
    request: MacrosRequest,
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    return await CalculatorService(db).macros(request)


@router.post("/calories")
async def calculate_calories(
    request: CaloriesRequest,
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    return await CalculatorService(db).calories(request)


@router.get("/{session_id}", response_model=list[CalculationResponse])
async def list_calculations(
    session_id: str,
    db: AsyncSession = Depends(get_db_session),
):
    """会话的计算记录（最新在前）"""
    return await CalculatorService(db).list_for_session(session_id)
