"""SQLAlchemy ORM models for the banking ledger and ship compliance balances"""

from sqlalchemy import Column, DateTime, Integer, Numeric, Text, UniqueConstraint, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BankEntryRow(Base):
    """Append-only banking transaction; amount is signed (+BANK, -APPLY)"""

    __tablename__ = "bank_entries"
    __table_args__ = (Index("ix_bank_entries_ship_year", "ship_id", "year"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    ship_id = Column(Text, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    amount_gco2eq = Column(Numeric(15, 2), nullable=False)
    cb_before = Column(Numeric(15, 2), nullable=True)
    cb_after = Column(Numeric(15, 2), nullable=True)
    transaction_type = Column(Text, nullable=True)  # NULL on legacy rows
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ShipComplianceRow(Base):
    """Current compliance balance for a ship-year"""

    __tablename__ = "ship_compliance"
    __table_args__ = (UniqueConstraint("ship_id", "year", name="uq_ship_compliance_ship_year"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    ship_id = Column(Text, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    cb_gco2eq = Column(Numeric(15, 2), nullable=False)
