"""Data access layer for cards, debts, crypto holdings, goals and client state"""

import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from cerebral_finance.infrastructure.database.models import ClientState, CreditCard, CryptoAsset, Debt, UserGoals
from cerebral_finance.domain.exceptions import RecordNotFoundError
from cerebral_finance.domain.models import Goals, Holding, Instrument, InstrumentKind


def _decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


def card_to_instrument(card: CreditCard) -> Instrument:
    return Instrument(
        name=card.name,
        balance=_decimal(card.current_balance),
        apr=_decimal(card.apr),
        kind=InstrumentKind.CREDIT_CARD,
        credit_limit=_decimal(card.credit_limit),
        minimum_payment_percentage=_decimal(card.minimum_payment_percentage),
    )


def debt_to_instrument(debt: Debt) -> Instrument:
    return Instrument(
        name=debt.name,
        balance=_decimal(debt.balance),
        apr=_decimal(debt.interest_rate),
        kind=InstrumentKind.LOAN,
        fixed_payment=_decimal(debt.minimum_payment),
        loan_type=debt.type,
    )


def asset_to_holding(asset: CryptoAsset) -> Holding:
    return Holding(
        symbol=asset.symbol,
        quantity=_decimal(asset.quantity),
        average_cost=_decimal(asset.average_cost),
        current_price=_decimal(asset.current_price),
    )


def goals_to_domain(row: UserGoals) -> Goals:
    return Goals(
        primary_goal=row.primary_goal,
        secondary_goals=list(row.secondary_goals or []),
        target_savings_rate=_decimal(row.target_savings_rate),
        emergency_fund_target=_decimal(row.emergency_fund_target),
        debt_payoff_timeframe=row.debt_payoff_timeframe,
        risk_tolerance=row.risk_tolerance,
        monthly_income=_decimal(row.monthly_income),
        monthly_expenses=_decimal(row.monthly_expenses),
        retirement_age=row.retirement_age,
        major_purchase_target=row.major_purchase_target,
        major_purchase_amount=_decimal(row.major_purchase_amount),
        major_purchase_timeframe=row.major_purchase_timeframe,
        notes=row.notes,
    )


class _UserScopedRepository:
    """Shared lookup/update helpers for tables keyed by (user_id, id)"""

    model: Any = None
    label = "Record"

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def get(self, record_id: uuid.UUID):
        """Fetch one record owned by this user or raise RecordNotFoundError"""
        query = self.db.query(self.model).filter(self.model.id == record_id, self.model.user_id == self.user_id)
        if hasattr(self.model, "is_active"):
            query = query.filter(self.model.is_active.is_(True))
        record = query.first()
        if record is None:
            raise RecordNotFoundError(f"{self.label} not found")
        return record

    def create(self, fields: Dict[str, Any]):
        record = self.model(user_id=self.user_id, **fields)
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def update(self, record_id: uuid.UUID, fields: Dict[str, Any]):
        record = self.get(record_id)
        for name, value in fields.items():
            setattr(record, name, value)
        self.db.flush()
        return record


class CreditCardRepository(_UserScopedRepository):
    """Repository for credit cards (soft delete)"""

    model = CreditCard
    label = "Credit card"

    def list_active(self) -> List[CreditCard]:
        return (
            self.db.query(CreditCard)
            .filter(CreditCard.user_id == self.user_id, CreditCard.is_active.is_(True))
            .order_by(CreditCard.created_at.desc())
            .all()
        )

    def deactivate(self, record_id: uuid.UUID) -> None:
        self.get(record_id).is_active = False
        self.db.flush()


class CryptoAssetRepository(_UserScopedRepository):
    """Repository for crypto holdings (soft delete)"""

    model = CryptoAsset
    label = "Crypto asset"

    def list_active(self) -> List[CryptoAsset]:
        return (
            self.db.query(CryptoAsset)
            .filter(CryptoAsset.user_id == self.user_id, CryptoAsset.is_active.is_(True))
            .order_by(CryptoAsset.created_at.desc())
            .all()
        )

    def deactivate(self, record_id: uuid.UUID) -> None:
        self.get(record_id).is_active = False
        self.db.flush()


class DebtRepository(_UserScopedRepository):
    """Repository for loans and other debts"""

    model = Debt
    label = "Debt"

    def list_all(self) -> List[Debt]:
        return self.db.query(Debt).filter(Debt.user_id == self.user_id).order_by(Debt.created_at.desc()).all()

    def delete(self, record_id: uuid.UUID) -> None:
        self.db.delete(self.get(record_id))
        self.db.flush()


class GoalsRepository(_UserScopedRepository):
    """Repository for user goals; the most recent row is the current one"""

    model = UserGoals
    label = "User goals"

    def get_current(self) -> Optional[UserGoals]:
        return (
            self.db.query(UserGoals)
            .filter(UserGoals.user_id == self.user_id)
            .order_by(UserGoals.created_at.desc())
            .first()
        )

    def delete(self, record_id: uuid.UUID) -> None:
        self.db.delete(self.get(record_id))
        self.db.flush()


class ClientStateRepository:
    """SQL-backed StateStore: one JSON value per (user, key)"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _row(self, key: str) -> Optional[ClientState]:
        return (
            self.db.query(ClientState)
            .filter(ClientState.user_id == self.user_id, ClientState.key == key)
            .first()
        )

    def load(self, key: str, default: Any = None) -> Any:
        row = self._row(key)
        if row is None or row.value is None:
            return default
        return row.value

    def save(self, key: str, value: Any) -> None:
        row = self._row(key)
        if row is None:
            self.db.add(ClientState(user_id=self.user_id, key=key, value=value))
        else:
            row.value = value
        self.db.flush()
