"""
Module: asset_kernel.models.condition_image
Responsibility: ORM persistence for quarterly condition photos of issued
    hardware.
Architecture position: Kernel > Models.

Invariants enforced:
    - Each image belongs to one ledger entry; the same URL is recorded once
      per entry (uq_condition_image_url).
    - upload_quarter is 1-4 (ck_condition_images_quarter).
    - The per-quarter cap is enforced by LedgerService, not by the schema.
    - Images go with their entry when it is deleted.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from asset_kernel.db.base import TrackedBase, UUIDString
from asset_kernel.db.types import UTCDateTime


class AssetConditionImage(TrackedBase):
    """A photo of an issued asset, uploaded by its holder."""

    __tablename__ = "asset_condition_images"

    __table_args__ = (
        UniqueConstraint("assignment_id", "image_url", name="uq_condition_image_url"),
        Index("idx_condition_image_assignment", "assignment_id"),
        Index("idx_condition_image_period", "upload_year", "upload_quarter"),
        Index("idx_condition_image_employee", "employee_id"),
        CheckConstraint(
            "upload_quarter BETWEEN 1 AND 4",
            name="ck_condition_images_quarter",
        ),
    )

    assignment_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("asset_assignments.id", ondelete="CASCADE"),
        nullable=False,
    )

    asset_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("assets.id"),
        nullable=False,
    )

    employee_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    image_size_bytes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    upload_year: Mapped[int] = mapped_column(Integer, nullable=False)
    upload_quarter: Mapped[int] = mapped_column(Integer, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        return f"<AssetConditionImage {self.image_filename} ({self.upload_year} Q{self.upload_quarter})>"
