"""Owner-scoped, append-only order ledger."""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from core.database.connection import DatabaseManager
from core.database.models import Order
from core.logging import get_logger
from core.utils.exceptions import PersistenceError
from .models import OrderResponse

logger = get_logger(__name__, component="orders")


class OrderLedger:
    """Records user-submitted orders. Orders are never matched, mutated or deleted."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def submit(self, owner_id: str, instrument_name: str, quantity: float,
                     price: float, mode: str) -> OrderResponse:
        """Append one order for ``owner_id``.

        The owner must come from the authenticated identity, never from the
        request body.
        """
        try:
            async with self.db_manager.get_session() as session:
                order = Order(
                    owner_id=owner_id,
                    instrument_name=instrument_name,
                    quantity=quantity,
                    price=price,
                    mode=mode,
                )
                session.add(order)
                await session.commit()
                saved = OrderResponse.model_validate(order)
        except SQLAlchemyError as e:
            logger.error("Failed to save order", owner_id=owner_id, error=str(e))
            raise PersistenceError("Failed to save order.", operation="submit",
                                   table=Order.__tablename__) from e

        logger.info("Order saved",
                    order_id=saved.id,
                    owner_id=owner_id,
                    instrument=instrument_name,
                    mode=mode)
        return saved

    async def list_for_owner(self, owner_id: str) -> List[OrderResponse]:
        """All orders owned by ``owner_id``, oldest first."""
        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(
                    select(Order)
                    .where(Order.owner_id == owner_id)
                    .order_by(Order.created_at, Order.id)
                )
                orders = result.scalars().all()
                return [OrderResponse.model_validate(order) for order in orders]
        except SQLAlchemyError as e:
            logger.error("Failed to fetch orders", owner_id=owner_id, error=str(e))
            raise PersistenceError("Failed to fetch orders.", operation="list_for_owner",
                                   table=Order.__tablename__) from e
