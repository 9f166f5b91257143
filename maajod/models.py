import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Numeric, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship, validates

from .db import Base
from .utils.security import hash_password

USER_ROLES = ("admin", "user")
STORE_ROLES = ("owner", "admin", "member")
TRANSACTION_TYPES = ("income", "expense")
EXPENSE_CATEGORIES = ("ingredients", "supplies", "utilities", "other")


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    memberships = relationship("Membership", back_populates="user", cascade="all, delete-orphan")

    @validates("username")
    def _lower_username(self, _key, value):
        return value.strip().lower() if value else value

    # 寫入時若還不是雜湊就先雜湊
    @validates("password")
    def _hash_on_write(self, _key, value):
        return hash_password(value)


class Store(Base):
    __tablename__ = "stores"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    memberships = relationship("Membership", back_populates="store", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="store", cascade="all, delete-orphan")


class Membership(Base):
    __tablename__ = "user_stores"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    user = relationship("User", back_populates="memberships")
    store = relationship("Store", back_populates="memberships")

    __table_args__ = (UniqueConstraint("user_id", "store_id", name="uq_user_store"),)


class Transaction(Base):
    __tablename__ = "transactions"
    id = Column(String(36), primary_key=True, default=_uuid)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(10), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String(20))
    note = Column(Text, default="")
    date = Column(DateTime, nullable=False, default=datetime.now)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    store = relationship("Store", back_populates="transactions")

    __table_args__ = (Index("ix_transactions_store_date", "store_id", "date"),)
