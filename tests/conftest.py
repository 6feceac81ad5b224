"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from cerebral_finance.api.main import create_app
from cerebral_finance.infrastructure.database.models import Base
from cerebral_finance.infrastructure.database.session import engine_options, get_db
from cerebral_finance.domain.models import Expense, Frequency, Goals, Holding, Instrument, InstrumentKind


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, **engine_options(TEST_DATABASE_URL))
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def sample_cards() -> list[Instrument]:
    """Two cards at 50% combined utilization ($1,500 of $3,000)"""
    return [
        Instrument(
            name="Everyday Visa",
            balance=Decimal("1000"),
            apr=Decimal("18.99"),
            credit_limit=Decimal("2000"),
        ),
        Instrument(
            name="Store Card",
            balance=Decimal("500"),
            apr=Decimal("15.99"),
            credit_limit=Decimal("1000"),
        ),
    ]


@pytest.fixture
def sample_loan() -> Instrument:
    """Car loan with a contractual payment comfortably above interest"""
    return Instrument(
        name="Car Loan",
        balance=Decimal("12000"),
        apr=Decimal("6"),
        kind=InstrumentKind.LOAN,
        fixed_payment=Decimal("350"),
        loan_type="auto",
    )


@pytest.fixture
def sample_holdings() -> list[Holding]:
    return [
        Holding(symbol="BTC", quantity=Decimal("0.1"), average_cost=Decimal("30000"), current_price=Decimal("40000")),
        Holding(symbol="ETH", quantity=Decimal("2"), average_cost=Decimal("2000"), current_price=Decimal("1500")),
    ]


@pytest.fixture
def sample_expenses() -> list[Expense]:
    return [
        Expense(amount=Decimal("1500"), frequency=Frequency.MONTHLY, category="Housing", name="Rent"),
        Expense(amount=Decimal("100"), frequency=Frequency.WEEKLY, category="Food", name="Groceries"),
        Expense(amount=Decimal("1200"), frequency=Frequency.YEARLY, category="Insurance", name="Car insurance"),
    ]


@pytest.fixture
def sample_goals() -> Goals:
    return Goals(
        primary_goal="debt_payoff",
        secondary_goals=["emergency_fund", "retirement"],
        debt_payoff_timeframe=24,
        risk_tolerance="moderate",
        monthly_income=Decimal("6000"),
        monthly_expenses=Decimal("3000"),
    )
