"""
Module: asset_kernel.models.asset
Responsibility: ORM persistence for asset categories, assets and the
    virtual-machine details attached to VM assets.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain enums only.  MUST NOT import from services/ or selectors/.

Invariants enforced:
    - asset_tag is unique (uq_asset_tag).  Tags are stored normalized
      (stripped, upper-cased) by the registry.
    - Category names are unique case-insensitively: name_key holds the
      casefolded name and carries the unique constraint.
    - status and condition hold only known values (check constraints).
    - At most one VirtualMachineDetails row per asset (uq_vm_asset).
    - Assets are never deleted; archive instead.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from asset_kernel.db.base import TrackedBase, UUIDString
from asset_kernel.domain.lifecycle import AssetCondition, AssetStatus, CategoryKind


class AssetCategory(TrackedBase):
    """
    Grouping for assets (Laptop, Monitor, Virtual Machine, ...).

    ``kind`` decides whether assets in the category are virtual machines.
    """

    __tablename__ = "asset_categories"

    __table_args__ = (
        UniqueConstraint("name_key", name="uq_asset_category_name_key"),
        CheckConstraint(
            "kind IN ('regular', 'virtual_machine')",
            name="ck_asset_categories_valid_kind",
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # casefold(name), for case-insensitive uniqueness
    name_key: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    kind: Mapped[CategoryKind] = mapped_column(
        String(20),
        nullable=False,
        default=CategoryKind.REGULAR,
    )

    assets: Mapped[list["Asset"]] = relationship(back_populates="category")

    def __repr__(self) -> str:
        return f"<AssetCategory {self.name} ({self.kind})>"


class Asset(TrackedBase):
    """
    A physical or virtual item the organization issues to employees.

    ``status`` is partly derived: while it is available/assigned the ledger
    owns it.  The sticky statuses are only set by explicit registry calls.
    """

    __tablename__ = "assets"

    __table_args__ = (
        UniqueConstraint("asset_tag", name="uq_asset_tag"),
        Index("idx_asset_status", "status"),
        Index("idx_asset_category", "category_id"),
        CheckConstraint(
            "status IN ('available', 'assigned', 'maintenance', "
            "'retired', 'lost', 'archived')",
            name="ck_assets_valid_status",
        ),
        CheckConstraint(
            "condition IN ('excellent', 'good', 'fair', 'poor', 'damaged')",
            name="ck_assets_valid_condition",
        ),
    )

    asset_tag: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("asset_categories.id"),
        nullable=False,
    )

    brand: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    serial_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    condition: Mapped[AssetCondition] = mapped_column(
        String(20),
        nullable=False,
        default=AssetCondition.GOOD,
    )

    status: Mapped[AssetStatus] = mapped_column(
        String(20),
        nullable=False,
        default=AssetStatus.AVAILABLE,
    )

    # Lifecycle dates
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    warranty_expiry: Mapped[date | None] = mapped_column(Date, nullable=True)
    insurance_warranty_extended: Mapped[date | None] = mapped_column(Date, nullable=True)
    previous_audit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    hardware_image_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Document links
    invoice_copy_link: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    warranty_document_link: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    category: Mapped[AssetCategory] = relationship(
        back_populates="assets",
        lazy="joined",
    )

    virtual_machine: Mapped["VirtualMachineDetails | None"] = relationship(
        back_populates="asset",
        uselist=False,
        lazy="joined",
    )

    @property
    def is_virtual_machine(self) -> bool:
        return self.category.kind == CategoryKind.VIRTUAL_MACHINE

    def __repr__(self) -> str:
        return f"<Asset {self.asset_tag}: {self.status}>"


class VirtualMachineDetails(TrackedBase):
    """Provisioning details for an asset in a virtual-machine category."""

    __tablename__ = "virtual_machines"

    __table_args__ = (
        UniqueConstraint("asset_id", name="uq_vm_asset"),
        UniqueConstraint("vm_number", name="uq_vm_number"),
        CheckConstraint(
            "audit_status IN ('compliant', 'pending', 'non_compliant')",
            name="ck_virtual_machines_valid_audit_status",
        ),
    )

    asset_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("assets.id"),
        nullable=False,
    )

    vm_number: Mapped[str] = mapped_column(String(50), nullable=False)
    vm_location: Mapped[str | None] = mapped_column(String(20), nullable=True)
    access_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    current_user_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    purpose: Mapped[str | None] = mapped_column(String(30), nullable=True)
    project_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Access details.  Only the login name is kept, never credentials.
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ghost_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    vpn_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mfa_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    cloud_provider: Mapped[str | None] = mapped_column(String(20), nullable=True)
    backup_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    audit_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    # Approval trail
    requested_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    approved_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    request_ticket_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approval_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    asset: Mapped[Asset] = relationship(back_populates="virtual_machine")

    def __repr__(self) -> str:
        return f"<VirtualMachineDetails {self.vm_number}>"
