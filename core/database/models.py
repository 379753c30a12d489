# Database models for application state
from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from core.utils.ids import generate_record_id
from .connection import Base


class User(Base):
    """Registered account. password_hash is never exposed outside the credential store."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_record_id)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        server_default=func.now(), nullable=False)


class Order(Base):
    """User-submitted order record; append-only and owner-scoped"""
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=generate_record_id)
    owner_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    instrument_name = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    mode = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index('idx_orders_owner_created', 'owner_id', 'created_at'),
    )


class Holding(Base):
    """Long-term holding, listed read-only"""
    __tablename__ = "holdings"

    id = Column(String(32), primary_key=True, default=generate_record_id)
    name = Column(String, nullable=False)
    qty = Column(Float, nullable=False)
    avg = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    net = Column(String)
    day = Column(String)
    is_loss = Column(Boolean, default=False, nullable=False)


class Position(Base):
    """Intraday position, listed read-only"""
    __tablename__ = "positions"

    id = Column(String(32), primary_key=True, default=generate_record_id)
    product = Column(String, nullable=False)
    name = Column(String, nullable=False)
    qty = Column(Float, nullable=False)
    avg = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    net = Column(String)
    day = Column(String)
    is_loss = Column(Boolean, default=False, nullable=False)
