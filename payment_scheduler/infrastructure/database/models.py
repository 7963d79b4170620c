"""SQLAlchemy ORM models for payment items and schedules"""

from sqlalchemy import Column, String, Boolean, DateTime, Date, Integer, ForeignKey, Numeric, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class PaymentItem(Base):
    """Outstanding payment obligation"""

    __tablename__ = "payment_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_name = Column(String(255), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    payment_type = Column(String(20), nullable=False, default="single")
    category = Column(String(50), nullable=True)
    project_name = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    schedules = relationship("PaymentSchedule", back_populates="payment_item", cascade="all, delete-orphan")


class PaymentSchedule(Base):
    """Confirmed payment date for an item"""

    __tablename__ = "payment_schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_item_id = Column(Integer, ForeignKey("payment_items.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    original_due_date = Column(Date, nullable=True)
    reschedule_count = Column(Integer, nullable=False, default=0)
    scheduled_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="scheduled", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    payment_item = relationship("PaymentItem", back_populates="schedules")
