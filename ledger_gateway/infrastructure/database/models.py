"""SQLAlchemy ORM models for ledger entries"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Text,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class LedgerEntryRecord(Base):
    """
    Ledger entry row; one table holds all three roles.

    Role is decided by (is_installment, parent_id):
    - not installment              → standalone
    - installment, no parent_id    → installment parent
    - installment, parent_id set   → installment child
    """

    __tablename__ = "ledger_entry"
    __table_args__ = (
        CheckConstraint("parent_id IS NULL OR is_installment", name="ck_child_is_installment"),
        CheckConstraint("parent_id IS NULL OR estimated_total_fee IS NULL", name="ck_child_has_no_fee"),
        CheckConstraint("parent_id IS NULL OR installment_months IS NULL", name="ck_child_has_no_months"),
        CheckConstraint(
            "parent_id IS NULL OR fee_estimation_strategy IS NULL", name="ck_child_has_no_strategy"
        ),
        {"sqlite_autoincrement": True},  # never reuse ids of deleted children
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Text, nullable=False, index=True)
    entry_date = Column(Date, nullable=False)
    type = Column(Text, nullable=False)  # income | expense
    amount = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False, default="")
    category_id = Column(Integer, nullable=True)

    is_installment = Column(Boolean, nullable=False, default=False)
    installment_months = Column(Integer, nullable=True)
    installment_index = Column(Integer, nullable=True)
    total_principal = Column(BigInteger, nullable=True)
    card_issuer = Column(Text, nullable=True)
    estimated_total_fee = Column(BigInteger, nullable=True)
    fee_estimation_strategy = Column(Text, nullable=True)  # min | average | max
    parent_id = Column(Integer, ForeignKey("ledger_entry.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
