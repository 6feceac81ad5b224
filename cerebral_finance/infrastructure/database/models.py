"""SQLAlchemy ORM models for cards, debts, crypto holdings, goals and client state"""

import uuid
from decimal import Decimal
from datetime import datetime, timezone
from sqlalchemy import Column, Boolean, DateTime, Integer, Numeric, Text, JSON, Uuid, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

MONEY = Numeric(14, 2)
RATE = Numeric(7, 4)
QUANTITY = Numeric(24, 8)


class CreditCard(Base):
    """Revolving credit card account"""

    __tablename__ = "credit_card"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    last_four_digits = Column(Text, nullable=False)
    bank = Column(Text, nullable=True)
    credit_limit = Column(MONEY, nullable=False)
    current_balance = Column(MONEY, nullable=False, default=0)
    apr = Column(RATE, nullable=False)
    minimum_payment_percentage = Column(RATE, nullable=False, default=Decimal("0.02"))
    annual_fee = Column(MONEY, nullable=False, default=0)
    rewards_program = Column(Text, nullable=True)
    reward_type = Column(Text, nullable=False, default="points")
    cashback_rate = Column(RATE, nullable=False, default=0)
    points_balance = Column(MONEY, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Debt(Base):
    """Installment loan or other non-revolving debt"""

    __tablename__ = "debt"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default="loan")
    balance = Column(MONEY, nullable=False)
    interest_rate = Column(RATE, nullable=False, default=0)
    minimum_payment = Column(MONEY, nullable=True)  # null: use the card-style minimum
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CryptoAsset(Base):
    """Crypto holding with user-entered prices"""

    __tablename__ = "crypto_asset"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    symbol = Column(Text, nullable=False)
    quantity = Column(QUANTITY, nullable=False, default=0)
    average_cost = Column(MONEY, nullable=False, default=0)
    current_price = Column(MONEY, nullable=False, default=0)
    platform = Column(Text, nullable=True)
    wallet_address = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserGoals(Base):
    """Stated goals and self-reported cash flow; the newest row is current"""

    __tablename__ = "user_goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    primary_goal = Column(Text, nullable=False)
    secondary_goals = Column(JSON, nullable=True)
    target_savings_rate = Column(RATE, nullable=True)
    emergency_fund_target = Column(MONEY, nullable=True)
    debt_payoff_timeframe = Column(Integer, nullable=True)
    risk_tolerance = Column(Text, nullable=True)
    monthly_income = Column(MONEY, nullable=True)
    monthly_expenses = Column(MONEY, nullable=True)
    retirement_age = Column(Integer, nullable=True)
    major_purchase_target = Column(Text, nullable=True)
    major_purchase_amount = Column(MONEY, nullable=True)
    major_purchase_timeframe = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    # Microsecond default so "newest" is unambiguous within the same second
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


class ClientState(Base):
    """JSON blobs the dashboard keeps per user (loans, expenses, balances, custom assets)"""

    __tablename__ = "client_state"
    __table_args__ = (UniqueConstraint("user_id", "key", name="uq_client_state_user_key"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    key = Column(Text, nullable=False)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
