from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide
from typing import List

from app.containers import AppContainer
from api.schemas.responses import ErrorResponse
from services.portfolio.models import HoldingResponse, PositionResponse
from services.portfolio.repository import PortfolioRepository

router = APIRouter(
    tags=["Portfolio"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("/allHoldings", response_model=List[HoldingResponse])
@inject
async def list_holdings(
    repository: PortfolioRepository = Depends(Provide[AppContainer.portfolio_repository]),
):
    """All long-term holdings. Public."""
    return await repository.list_holdings()


@router.get("/allPositions", response_model=List[PositionResponse])
@inject
async def list_positions(
    repository: PortfolioRepository = Depends(Provide[AppContainer.portfolio_repository]),
):
    """All intraday positions. Public."""
    return await repository.list_positions()
