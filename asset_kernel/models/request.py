"""
Module: asset_kernel.models.request
Responsibility: ORM persistence for employee asset requests.
Architecture position: Kernel > Models.

Invariants enforced:
    - status holds only pending/approved/rejected/fulfilled; the legal moves
      between them live in domain/workflow.py and are checked by the service.
    - priority holds only low/medium/high/urgent.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from asset_kernel.db.base import TrackedBase, UUIDString
from asset_kernel.db.types import UTCDateTime
from asset_kernel.models.asset import AssetCategory


class AssetRequest(TrackedBase):
    """An employee's request for an asset of some category."""

    __tablename__ = "asset_requests"

    __table_args__ = (
        Index("idx_asset_request_requester", "requester_id"),
        Index("idx_asset_request_status", "status"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'fulfilled')",
            name="ck_asset_requests_valid_status",
        ),
        CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')",
            name="ck_asset_requests_valid_priority",
        ),
    )

    requester_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    requester_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    category_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("asset_categories.id"),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)
    justification: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    approved_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    approval_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    rejected_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    fulfilled_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    fulfilled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    fulfilled_asset_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("assets.id"),
        nullable=True,
    )
    # Plain column: the assignment may later be deleted administratively.
    fulfilled_assignment_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    category: Mapped[AssetCategory] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<AssetRequest {self.id} ({self.status})>"
