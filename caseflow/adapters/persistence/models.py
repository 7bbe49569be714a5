"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caseflow.adapters.persistence.database import Base


class ClientModel(Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="client")
    assigned_to: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("caseworkers.id", ondelete="SET NULL"), nullable=True
    )
    onboarded_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("caseworkers.id", ondelete="SET NULL"), nullable=True
    )
    onboarding_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    case_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    case_status: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (Index("idx_clients_tenant", "tenant_id"),)


class CaseworkerModel(Base):
    __tablename__ = "caseworkers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_available_for_new_clients: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    max_client_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_workload: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    specialization: Mapped[list[str]] = mapped_column(
        ARRAY(String(50)), nullable=False, default=list
    )
    completed_cases: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    successful_cases: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rejected_cases: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    case_success_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)

    assignments: Mapped[list["AssignmentModel"]] = relationship(
        back_populates="caseworker", foreign_keys="AssignmentModel.current_caseworker_id"
    )

    __table_args__ = (
        Index("idx_caseworkers_tenant_available", "tenant_id", "is_active", "is_available_for_new_clients"),
        Index("idx_caseworkers_workload", "current_workload"),
    )


class AssignmentModel(Base):
    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    current_caseworker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("caseworkers.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    assigned_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    acceptance_deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    onboarded_by: Mapped[int] = mapped_column(Integer, ForeignKey("caseworkers.id"), nullable=False)
    onboarding_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    case_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    case_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")

    auto_reassignment_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_reassignment_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_auto_reassignment_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    is_auto_reassigned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requires_attention: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    caseworker: Mapped["CaseworkerModel"] = relationship(
        back_populates="assignments", foreign_keys=[current_caseworker_id]
    )
    history: Mapped[list["AssignmentHistoryModel"]] = relationship(
        back_populates="assignment",
        order_by="AssignmentHistoryModel.sequence",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        # One open assignment per (client, tenant)
        Index(
            "uq_assignments_open_per_client",
            "client_id",
            "tenant_id",
            unique=True,
            postgresql_where=text("status IN ('pending', 'accepted', 'active')"),
        ),
        Index("idx_assignments_caseworker_status", "current_caseworker_id", "status"),
        Index("idx_assignments_deadline_status", "acceptance_deadline", "status"),
        Index("idx_assignments_tenant_attention", "tenant_id", "requires_attention"),
    )


class AssignmentHistoryModel(Base):
    __tablename__ = "assignment_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    caseworker_id: Mapped[int] = mapped_column(Integer, ForeignKey("caseworkers.id"), nullable=False)
    assigned_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reassigned_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reassign_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    # NULL = assigned by the escalation sweep
    assigned_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    assignment: Mapped["AssignmentModel"] = relationship(back_populates="history")

    __table_args__ = (
        Index("uq_assignment_history_sequence", "assignment_id", "sequence", unique=True),
    )
