"""SQLAlchemy models for finledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    JSON,
    CheckConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Company(Base):
    """Company model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    default_currency = Column(String(3), nullable=False, default="TRY")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    clients = relationship("Client", back_populates="company", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="company", cascade="all, delete-orphan")
    records = relationship("LedgerEntry", back_populates="company", cascade="all, delete-orphan")


class Client(Base):
    """Client model."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String, nullable=False)
    preferred_currency = Column(String(3), nullable=False)
    website = Column(String, nullable=True)
    monthly_budget = Column(Numeric(14, 2), nullable=True)
    contract_months = Column(Integer, nullable=True)
    payment_method = Column(String, nullable=True)
    services = Column(JSON, nullable=False, default=list)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    company = relationship("Company", back_populates="clients")
    projects = relationship("Project", back_populates="client")


class Project(Base):
    """Project model."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="planned")
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    company = relationship("Company", back_populates="projects")
    client = relationship("Client", back_populates="projects")


class LedgerEntry(Base):
    """Income or expense record, company-owned or personal."""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    scope = Column(String, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True)
    date = Column(Date, nullable=False)
    title = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    vat_amount = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False)
    fx_rate_to_base = Column(Numeric(18, 6), nullable=True)
    base_amount = Column(Numeric(18, 2), nullable=True)
    linked_type = Column(String, nullable=False, default="none")
    linked_client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    linked_project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    details = Column(String, nullable=True)
    category = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        CheckConstraint("vat_amount >= 0", name="ck_ledger_vat_non_negative"),
        CheckConstraint("kind IN ('income', 'expense')", name="ck_ledger_kind"),
        CheckConstraint("scope IN ('company', 'personal')", name="ck_ledger_scope"),
    )

    # Relationships
    company = relationship("Company", back_populates="records")
    linked_client = relationship("Client")
    linked_project = relationship("Project")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
