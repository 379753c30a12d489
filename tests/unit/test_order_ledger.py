from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from core.utils.exceptions import PersistenceError
from services.orders.ledger import OrderLedger
from services.orders.models import NewOrderRequest


@pytest.mark.unit
class TestOrderLedger:

    async def test_submit_and_list_for_owner(self, order_ledger, credential_store):
        alice = await credential_store.register("alice", "a@x.io", "pw1")

        saved = await order_ledger.submit(alice.id, "AAPL", 10, 150.5, "BUY")
        orders = await order_ledger.list_for_owner(alice.id)

        assert [o.id for o in orders] == [saved.id]
        assert orders[0].owner_id == alice.id
        assert orders[0].instrument_name == "AAPL"
        assert orders[0].quantity == 10
        assert orders[0].price == 150.5
        assert orders[0].mode == "BUY"

    async def test_orders_are_owner_scoped(self, order_ledger, credential_store):
        alice = await credential_store.register("alice", "a@x.io", "pw1")
        bob = await credential_store.register("bob", "b@x.io", "pw2")

        await order_ledger.submit(alice.id, "AAPL", 1, 10.0, "BUY")
        await order_ledger.submit(bob.id, "MSFT", 2, 20.0, "SELL")
        await order_ledger.submit(alice.id, "TSLA", 3, 30.0, "SELL")

        alice_orders = await order_ledger.list_for_owner(alice.id)
        bob_orders = await order_ledger.list_for_owner(bob.id)

        assert [o.instrument_name for o in alice_orders] == ["AAPL", "TSLA"]
        assert [o.instrument_name for o in bob_orders] == ["MSFT"]
        assert await order_ledger.list_for_owner("nobody") == []

    async def test_wire_names(self, order_ledger, credential_store):
        alice = await credential_store.register("alice", "a@x.io", "pw1")
        saved = await order_ledger.submit(alice.id, "AAPL", 1, 10.0, "BUY")

        wire = saved.model_dump(by_alias=True)
        assert wire["userId"] == alice.id
        assert wire["name"] == "AAPL"
        assert wire["qty"] == 1
        assert "owner_id" not in wire

    async def test_save_failure_is_persistence_error(self):
        session = AsyncMock()
        session.add = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        db_manager = MagicMock()
        db_manager.get_session.return_value.__aenter__.return_value = session
        db_manager.get_session.return_value.__aexit__.return_value = False

        with pytest.raises(PersistenceError) as exc_info:
            await OrderLedger(db_manager).submit("u1", "AAPL", 1, 10.0, "BUY")
        assert exc_info.value.message == "Failed to save order."

    async def test_fetch_failure_is_persistence_error(self):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
        db_manager = MagicMock()
        db_manager.get_session.return_value.__aenter__.return_value = session
        db_manager.get_session.return_value.__aexit__.return_value = False

        with pytest.raises(PersistenceError) as exc_info:
            await OrderLedger(db_manager).list_for_owner("u1")
        assert exc_info.value.message == "Failed to fetch orders."


@pytest.mark.unit
class TestNewOrderRequest:

    def test_owner_fields_in_body_are_dropped(self):
        request = NewOrderRequest.model_validate(
            {"name": "AAPL", "qty": 1, "price": 10, "mode": "BUY", "userId": "someone-else", "ownerId": "x"}
        )
        assert request.model_dump() == {"name": "AAPL", "qty": 1.0, "price": 10.0, "mode": "BUY"}

    @pytest.mark.parametrize("body", [
        {"qty": 1, "price": 10, "mode": "BUY"},
        {"name": "AAPL", "qty": 0, "price": 10, "mode": "BUY"},
        {"name": "AAPL", "qty": 1, "price": -1, "mode": "BUY"},
        {"name": "", "qty": 1, "price": 10, "mode": "BUY"},
    ])
    def test_invalid_bodies_rejected(self, body):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            NewOrderRequest.model_validate(body)
