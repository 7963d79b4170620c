"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from payment_scheduler.api.main import create_app
from payment_scheduler.infrastructure.database.models import Base, PaymentItem, PaymentSchedule
from payment_scheduler.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2026, 3, 16)


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
def add_item(db: Session) -> Callable[..., PaymentItem]:
    """Insert a payment item; due date defaults to start_date"""

    def _add_item(
        item_name: str,
        total_amount: str,
        paid_amount: str = "0",
        start_date: date = TODAY,
        end_date: date | None = None,
        **kwargs,
    ) -> PaymentItem:
        item = PaymentItem(
            item_name=item_name,
            total_amount=Decimal(total_amount),
            paid_amount=Decimal(paid_amount),
            start_date=start_date,
            end_date=end_date,
            **kwargs,
        )
        db.add(item)
        db.commit()
        return item

    return _add_item


@pytest.fixture
def add_schedule(db: Session) -> Callable[..., PaymentSchedule]:
    """Insert a payment schedule for an existing item"""

    def _add_schedule(item: PaymentItem, scheduled_date: date, amount: str, status: str = "scheduled") -> PaymentSchedule:
        schedule = PaymentSchedule(
            payment_item_id=item.id,
            scheduled_date=scheduled_date,
            original_due_date=item.end_date or item.start_date,
            scheduled_amount=Decimal(amount),
            status=status,
            reschedule_count=0,
        )
        db.add(schedule)
        db.commit()
        return schedule

    return _add_schedule


@pytest.fixture
def scenario_items(add_item) -> list[PaymentItem]:
    """One obligation overdue by 10 days, one due in 5 days"""
    overdue = add_item(
        "供應商貨款",
        "5000",
        start_date=TODAY - timedelta(days=40),
        end_date=TODAY - timedelta(days=10),
    )
    upcoming = add_item("網路費", "4000", paid_amount="1000", start_date=TODAY + timedelta(days=5))
    return [overdue, upcoming]
