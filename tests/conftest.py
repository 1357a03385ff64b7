"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finplan_gateway.api.main import create_app
from finplan_gateway.infrastructure.database.models import Base
from finplan_gateway.infrastructure.database.session import get_db
from finplan_gateway.domain.models import (
    Account,
    AccountType,
    Expense,
    FinancialSnapshot,
    Income,
    IncomeType,
    Investment,
    LoanCategory,
    LoanInput,
    Property,
    PropertyType,
    UserPreferences,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
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
def two_loans() -> list[LoanInput]:
    """A small high-rate loan and a large low-rate loan"""
    return [
        LoanInput(id="car", name="Car loan", principal=10_000, annual_rate=0.09, min_repayment=300),
        LoanInput(id="home", name="Home loan", principal=50_000, annual_rate=0.05, min_repayment=500),
    ]


@pytest.fixture
def household_snapshot() -> FinancialSnapshot:
    """Salaried household with a home, an investment unit, shares and savings"""
    return FinancialSnapshot(
        user_id="user_household",
        as_of=date(2026, 6, 30),
        current_age=40,
        income_stability=85,
        properties=[
            Property(
                id="prop_home",
                name="Home",
                current_value=800_000,
                property_type=PropertyType.HOME,
                purchase_price=600_000,
                purchase_date=date(2016, 6, 30),
                state="NSW",
            ),
            Property(
                id="prop_unit",
                name="Unit",
                current_value=500_000,
                property_type=PropertyType.INVESTMENT,
                purchase_price=450_000,
                purchase_date=date(2019, 6, 30),
                state="QLD",
            ),
        ],
        loans=[
            LoanInput(
                id="loan_home",
                name="Home loan",
                principal=400_000,
                annual_rate=0.0475,
                min_repayment=2_300,
                property_id="prop_home",
            ),
            LoanInput(
                id="loan_unit",
                name="Unit loan",
                principal=350_000,
                annual_rate=0.052,
                min_repayment=1_520,
                category=LoanCategory.INVESTMENT,
                interest_only=True,
                property_id="prop_unit",
            ),
        ],
        accounts=[
            Account(id="acc_savings", name="Savings", balance=30_000, account_type=AccountType.SAVINGS),
            Account(id="acc_everyday", name="Everyday", balance=5_000),
        ],
        incomes=[
            Income(id="inc_salary", name="Salary", amount=11_000),
            Income(
                id="inc_rent",
                name="Unit rent",
                amount=2_000,
                income_type=IncomeType.RENT,
                property_id="prop_unit",
            ),
        ],
        expenses=[
            Expense(id="exp_living", name="Living", amount=4_500),
            Expense(id="exp_travel", name="Travel", amount=500, is_essential=False),
        ],
        investments=[
            Investment(
                id="inv_index",
                name="Index fund",
                units=1_000,
                average_price=40,
                current_price=50,
                ticker="VAS",
                sector="Diversified",
                income_yield=0.04,
                franking_percentage=70,
            ),
        ],
        preferences=UserPreferences(
            risk_appetite="MODERATE",
            retirement_age=65,
            time_horizon="LONG",
            debt_comfort="MEDIUM",
        ),
    )
