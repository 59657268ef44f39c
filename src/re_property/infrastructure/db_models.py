"""SQLAlchemy ORM model for the properties table.

Table is created by Alembic migration: alembic/versions/002_create_properties.py
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import date, datetime

from sqlalchemy import BigInteger, Date, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.re_common.database import Base


class PropertyORM(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    rent_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    security_deposit: Mapped[int] = mapped_column(BigInteger, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    owner_payout_id: Mapped[str] = mapped_column(String(128), nullable=False)
    property_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
