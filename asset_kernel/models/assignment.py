"""
Module: asset_kernel.models.assignment
Responsibility: ORM persistence for the assignment ledger and its append-only
    log.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain enums only.

Invariants enforced:
    - One asset may have many active entries (one per employee), but at most
      one active entry per (asset, employee): partial unique index
      uq_active_assignment.
    - An inactive entry always has a return_date (ck_asset_assignments_returned).
    - Log rows reference their assignment by plain id, with no foreign key,
      so the history outlives an administrative delete.  Log rows are
      protected against UPDATE/DELETE by db/immutability.py.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from asset_kernel.db.base import Base, TrackedBase, UUIDString
from asset_kernel.db.types import UTCDateTime
from asset_kernel.domain.lifecycle import AssignmentType
from asset_kernel.models.asset import Asset


class AssetAssignment(TrackedBase):
    """
    One employee's hold on one asset.

    Department and manager are captured from the directory at issuance and
    kept even if the employee later moves.
    """

    __tablename__ = "asset_assignments"

    __table_args__ = (
        Index(
            "uq_active_assignment",
            "asset_id",
            "employee_id",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
        Index("idx_assignment_employee", "employee_id"),
        Index("idx_assignment_asset_active", "asset_id", "is_active"),
        CheckConstraint(
            "assignment_type IN ('permanent', 'temporary')",
            name="ck_asset_assignments_valid_type",
        ),
        CheckConstraint(
            "is_active OR return_date IS NOT NULL",
            name="ck_asset_assignments_returned",
        ),
    )

    asset_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("assets.id"),
        nullable=False,
    )

    # Directory id; employees live outside this schema.
    employee_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    assigned_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    assignment_type: Mapped[AssignmentType] = mapped_column(
        String(20),
        nullable=False,
        default=AssignmentType.PERMANENT,
    )

    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    condition_at_issuance: Mapped[str | None] = mapped_column(String(20), nullable=True)
    issuance_condition_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    assigned_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    # Return details
    return_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    return_condition: Mapped[str | None] = mapped_column(String(20), nullable=True)
    return_condition_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Directory snapshot at issuance
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    employee_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    employee_department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    employee_manager: Mapped[str | None] = mapped_column(String(255), nullable=True)

    asset: Mapped[Asset] = relationship(lazy="joined")

    def __repr__(self) -> str:
        state = "active" if self.is_active else "returned"
        return f"<AssetAssignment {self.asset_id} -> {self.employee_id} ({state})>"


class AssignmentLogEntry(Base):
    """
    Append-only record of one ledger transition.

    Carries a snapshot of the asset and employee display fields as they were
    when the action happened.
    """

    __tablename__ = "assignment_logs"

    __table_args__ = (
        UniqueConstraint("seq", name="uq_assignment_log_seq"),
        Index("idx_assignment_log_employee", "employee_id", "action_date"),
        Index("idx_assignment_log_assignment", "assignment_id"),
        Index("idx_assignment_log_asset", "asset_id"),
        CheckConstraint(
            "action IN ('assigned', 'unassigned', 'returned', 'expired', "
            "'transferred', 'updated', 'deleted')",
            name="ck_assignment_logs_valid_action",
        ),
        CheckConstraint(
            "status IN ('active', 'returned')",
            name="ck_assignment_logs_valid_status",
        ),
    )

    # Monotonic write order; action_date alone can tie within one batch.
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Plain column: no FK, so deleting the assignment keeps its history.
    assignment_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    asset_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    employee_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    action: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    previous_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    previous_employee_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    assignment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    condition_at_action: Mapped[str | None] = mapped_column(String(20), nullable=True)
    condition_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    action_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    action_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    action_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Snapshot
    asset_name: Mapped[str] = mapped_column(String(255), nullable=False)
    asset_tag: Mapped[str] = mapped_column(String(50), nullable=False)
    asset_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    employee_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    employee_department: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<AssignmentLogEntry {self.action} {self.assignment_id}>"
