"""
Module: asset_kernel.models.complaint
Responsibility: ORM persistence for complaints raised against issued assets.
Architecture position: Kernel > Models.

Invariants enforced:
    - A resolved or closed complaint names its resolver
      (ck_asset_complaints_resolver).
    - assignment_id is nulled when the assignment is deleted; the complaint
      keeps its asset and reporter.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from asset_kernel.db.base import TrackedBase, UUIDString
from asset_kernel.db.types import UTCDateTime
from asset_kernel.models.asset import Asset


class AssetComplaint(TrackedBase):
    """A problem report filed by the employee holding an asset."""

    __tablename__ = "asset_complaints"

    __table_args__ = (
        Index("idx_asset_complaint_employee", "employee_id"),
        Index("idx_asset_complaint_asset", "asset_id"),
        CheckConstraint(
            "status IN ('open', 'in_progress', 'resolved', 'closed')",
            name="ck_asset_complaints_valid_status",
        ),
        CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')",
            name="ck_asset_complaints_valid_priority",
        ),
        CheckConstraint(
            "status NOT IN ('resolved', 'closed') OR resolved_by_id IS NOT NULL",
            name="ck_asset_complaints_resolver",
        ),
    )

    asset_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("assets.id"),
        nullable=False,
    )

    assignment_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("asset_assignments.id", ondelete="SET NULL"),
        nullable=True,
    )

    employee_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")

    resolved_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    asset: Mapped[Asset] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<AssetComplaint {self.id} ({self.status})>"
