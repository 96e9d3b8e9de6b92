"""SQLAlchemy models for fintrack database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    bank_name = Column(String, nullable=False)
    opening_balance = Column(Numeric(14, 2), default=0, nullable=False)
    balance = Column(Numeric(14, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_account_user_name"),)

    transactions = relationship("Transaction", back_populates="account")


class Card(Base):
    """Credit card model."""

    __tablename__ = "cards"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    credit_limit = Column(Numeric(14, 2), default=0, nullable=False)
    used_amount = Column(Numeric(14, 2), default=0, nullable=False)
    closing_day = Column(Integer, nullable=False)
    due_day = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    transactions = relationship("Transaction", back_populates="card")


class Category(Base):
    """Category model, partitioned by transaction type."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    color = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", "type", name="uq_category_user_name_type"),)

    transactions = relationship("Transaction", back_populates="category")


class Tag(Base):
    """Tag model."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_tag_user_name"),)


class TransactionTag(Base):
    """Ordered association between transactions and tags."""

    __tablename__ = "transaction_tags"

    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), primary_key=True)
    position = Column(Integer, nullable=False, default=0)

    tag = relationship("Tag")


class Transaction(Base):
    """Transaction model. ``amount`` is always positive; direction lives in ``type``."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    unique_id = Column(String, nullable=False)
    type = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    card_id = Column(Integer, ForeignKey("cards.id"), nullable=True)
    notes = Column(String, nullable=True)
    installments_count = Column(Integer, default=1, nullable=False)
    installment_number = Column(Integer, default=1, nullable=False)
    parent_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "unique_id", name="uq_transaction_user_unique_id"),
        Index("ix_transactions_user_date", "user_id", "date"),
    )

    account = relationship("Account", back_populates="transactions")
    card = relationship("Card", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    tag_links = relationship(
        "TransactionTag",
        order_by="TransactionTag.position",
        cascade="all, delete-orphan",
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
