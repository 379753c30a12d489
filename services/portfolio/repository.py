from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from core.database.connection import DatabaseManager
from core.database.models import Holding, Position
from core.logging import get_logger
from core.utils.exceptions import PersistenceError
from .models import HoldingResponse, PositionResponse

logger = get_logger(__name__, component="portfolio")


class PortfolioRepository:
    """Read-only access to seeded holdings and positions."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def list_holdings(self) -> List[HoldingResponse]:
        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(select(Holding).order_by(Holding.name))
                return [HoldingResponse.model_validate(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Failed to fetch holdings", error=str(e))
            raise PersistenceError("Failed to fetch holdings.", operation="list_holdings",
                                   table=Holding.__tablename__) from e

    async def list_positions(self) -> List[PositionResponse]:
        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(select(Position).order_by(Position.name))
                return [PositionResponse.model_validate(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Failed to fetch positions", error=str(e))
            raise PersistenceError("Failed to fetch positions.", operation="list_positions",
                                   table=Position.__tablename__) from e
