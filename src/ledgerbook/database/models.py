"""SQLAlchemy models for the ledgerbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Ledger account model."""

    __tablename__ = "accounts"

    owner_id = Column(String, primary_key=True)
    id = Column(String, primary_key=True)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    nature = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    parent_id = Column(String, nullable=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Transaction(Base):
    """Transaction header model."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    owner_id = Column(String, nullable=False)
    schema_version = Column(Integer, nullable=False, default=1)
    sequence = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    base_currency = Column(String(6), nullable=False)
    memo = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_transactions_owner_date", "owner_id", "date"),)

    # Relationships
    postings = relationship(
        "Posting",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="Posting.position",
    )


class Posting(Base):
    """Posting model. Amounts are integer minor units with their currency."""

    __tablename__ = "postings"

    id = Column(String, primary_key=True)
    transaction_id = Column(String, ForeignKey("transactions.id"), nullable=False)
    position = Column(Integer, nullable=False)
    account_id = Column(String, nullable=False)
    side = Column(String(6), nullable=False)
    original_amount_minor = Column(BigInteger, nullable=False)
    original_currency = Column(String(6), nullable=False)
    booked_amount_minor = Column(BigInteger, nullable=False)
    booked_currency = Column(String(6), nullable=False)
    # Decimal kept as text to avoid float round-trips
    exchange_rate = Column(String, nullable=True)
    description = Column(String, nullable=True)

    __table_args__ = (Index("ix_postings_account", "account_id"),)

    # Relationships
    transaction = relationship("Transaction", back_populates="postings")


class ExternalAccount(Base):
    """Hand-maintained net-worth account model."""

    __tablename__ = "external_accounts"

    owner_id = Column(String, primary_key=True)
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    balance_minor = Column(BigInteger, nullable=False)
    currency = Column(String(6), nullable=False)
    exclude_from_total = Column(Boolean, default=False, nullable=False)
    estimated_yield = Column(String, nullable=True)
    due_date = Column(Date, nullable=True)
    recurring_due_date = Column(Integer, nullable=True)
    is_paid_this_month = Column(Boolean, default=False, nullable=False)
    last_paid_date = Column(Date, nullable=True)
    min_monthly_payment_minor = Column(BigInteger, nullable=True)
    payment_to_avoid_interest_minor = Column(BigInteger, nullable=True)
    last_updated = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Snapshot(Base):
    """Month-end net worth snapshot model."""

    __tablename__ = "snapshots"

    owner_id = Column(String, primary_key=True)
    month = Column(String(7), primary_key=True)
    net_worth_minor = Column(BigInteger, nullable=False)
    currency = Column(String(6), nullable=False)
    totals_by_nature = Column(JSON, nullable=False)
    account_snapshots = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
