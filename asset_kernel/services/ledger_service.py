"""
asset_kernel.services.ledger_service -- The assignment ledger.

Responsibility:
    Issues assets to employees, takes them back, edits and deletes ledger
    entries, and sweeps overdue temporary entries.  Every transition appends
    one AssignmentLogEntry and then re-derives the asset's status from the
    number of active entries.

Architecture position:
    Kernel > Services.  May import from domain/, models/, selectors/, db/.

Invariants enforced:
    - Derived status: after every mutation an asset in a ledger-driven
      status is ``assigned`` iff it has an active entry.  Sticky statuses
      (maintenance, retired, lost, archived) are never overwritten.
    - At most one active entry per (asset, employee).
    - Multi-employee assign, bulk return and the expiry sweep are
      all-or-nothing (SAVEPOINT).  All validation happens before the first
      write.
    - unassign_user on an already-returned entry is a successful no-op.
    - Temporary entries carry an expiry date after today; permanent entries
      carry none.
    - Condition images are recorded by the holder of an active hardware
      entry, at most ``max_images_per_quarter`` per entry and quarter.

Failure modes:
    - AssetNotFoundError / AssignmentNotFoundError / EmployeeNotFoundError.
    - AssetNotAssignableError on retired, lost or archived assets.
    - DuplicateActiveAssignmentError when the employee already holds the asset.
    - ExpiryDateRequiredError / InvalidFieldValueError on bad terms.
    - MissingCapabilityError / OutOfScopeError from the access scope.
    - NotHardwareAssetError / ConditionImageLimitError /
      DuplicateConditionImageError on condition images.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from asset_kernel.domain.access import AccessScope
from asset_kernel.domain.clock import Clock
from asset_kernel.domain.condition_images import (
    MAX_IMAGES_PER_QUARTER,
    Quarter,
    can_upload_more,
    is_hardware_category,
)
from asset_kernel.domain.directory import EmployeeDirectory, EmployeeRecord
from asset_kernel.domain.dtos import AssignmentInfo, ConditionImageInfo
from asset_kernel.domain.intents import (
    ASSIGNMENT_PATCH_FIELDS,
    AssignmentDetails,
    coerce_enum,
    reject_unknown_fields,
)
from asset_kernel.domain.lifecycle import (
    UNASSIGNABLE_STATUSES,
    AssetCondition,
    AssetStatus,
    AssignmentType,
    LogAction,
    LogEntryStatus,
    derive_status,
)
from asset_kernel.exceptions import (
    AssetNotAssignableError,
    AssetNotFoundError,
    AssignmentNotFoundError,
    AssignmentInactiveError,
    ConditionImageLimitError,
    DuplicateConditionImageError,
    DuplicateActiveAssignmentError,
    EmployeeNotFoundError,
    ExpiryDateRequiredError,
    InvalidFieldValueError,
    MissingFieldError,
    NotHardwareAssetError,
    OutOfScopeError,
)
from asset_kernel.logging_config import LogContext, get_logger
from asset_kernel.models.asset import Asset
from asset_kernel.models.assignment import AssetAssignment, AssignmentLogEntry
from asset_kernel.models.complaint import AssetComplaint
from asset_kernel.models.condition_image import AssetConditionImage
from asset_kernel.selectors.assignment_selector import count_active_assignments
from asset_kernel.selectors.condition_image_selector import count_condition_images
from asset_kernel.selectors.mapping import assignment_to_info, condition_image_to_info
from asset_kernel.services.base import BaseService
from asset_kernel.services.sequence_service import SequenceService

logger = get_logger("services.ledger")


class LedgerService(BaseService[AssetAssignment]):
    """
    Write side of the assignment ledger.

    Args:
        session: Caller-owned session; this service only flushes.
        directory: Employee directory used to validate assignees and
            snapshot their display fields.
        clock: Time source for timestamps and expiry checks.
        default_return_condition: Recorded when a return names no condition.
        max_images_per_quarter: Cap on condition images per entry and quarter.
    """

    def __init__(
        self,
        session: Session,
        directory: EmployeeDirectory,
        clock: Clock | None = None,
        default_return_condition: AssetCondition = AssetCondition.GOOD,
        max_images_per_quarter: int = MAX_IMAGES_PER_QUARTER,
    ):
        super().__init__(session, clock)
        self.directory = directory
        self.default_return_condition = AssetCondition(default_return_condition)
        self.max_images_per_quarter = max_images_per_quarter
        self.sequences = SequenceService(session)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_asset(self, asset_id: UUID) -> Asset:
        asset = self.session.get(Asset, asset_id)
        if asset is None:
            raise AssetNotFoundError(str(asset_id))
        return asset

    def _get_entry(self, assignment_id: UUID) -> AssetAssignment:
        entry = self.session.get(AssetAssignment, assignment_id)
        if entry is None:
            raise AssignmentNotFoundError(str(assignment_id))
        return entry

    def _lock_entry(self, assignment_id: UUID) -> AssetAssignment:
        stmt = (
            select(AssetAssignment)
            .where(AssetAssignment.id == assignment_id)
            .with_for_update(of=AssetAssignment)
            .execution_options(populate_existing=True)
        )
        entry = self.session.execute(stmt).unique().scalar_one_or_none()
        if entry is None:
            raise AssignmentNotFoundError(str(assignment_id))
        return entry

    def _get_employee(self, scope: AccessScope, employee_id: UUID) -> EmployeeRecord:
        record = self.directory.get(employee_id)
        if record is None:
            raise EmployeeNotFoundError(str(employee_id))
        if not record.is_active:
            raise InvalidFieldValueError("employee_id", employee_id, "employee is inactive")
        scope.require_visible(employee_id)
        return record

    def _manager_name(self, record: EmployeeRecord) -> str | None:
        if record.manager_id is None:
            return None
        manager = self.directory.get(record.manager_id)
        return manager.name if manager is not None else None

    def _active_entry(self, asset_id: UUID, employee_id: UUID) -> AssetAssignment | None:
        stmt = select(AssetAssignment).where(
            AssetAssignment.asset_id == asset_id,
            AssetAssignment.employee_id == employee_id,
            AssetAssignment.is_active == True,  # noqa: E712
        )
        return self.session.execute(stmt).unique().scalar_one_or_none()

    def _to_dto(self, entry: AssetAssignment) -> AssignmentInfo:
        return assignment_to_info(entry, self.clock.today())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_new_expiry(self, expiry_date: date | None) -> date:
        if expiry_date is None:
            raise ExpiryDateRequiredError()
        if expiry_date <= self.clock.today():
            raise InvalidFieldValueError("expiry_date", expiry_date, "must be after today")
        return expiry_date

    def _validate_terms(
        self,
        assignment_type: AssignmentType | str,
        expiry_date: date | None,
    ) -> tuple[AssignmentType, date | None]:
        kind = coerce_enum(AssignmentType, "assignment_type", assignment_type)
        if kind == AssignmentType.TEMPORARY:
            return kind, self._validate_new_expiry(expiry_date)
        if expiry_date is not None:
            raise InvalidFieldValueError(
                "expiry_date", expiry_date, "permanent assignments do not expire"
            )
        return kind, None

    def _snapshot_employee(self, entry: AssetAssignment, record: EmployeeRecord) -> None:
        entry.employee_id = record.employee_id
        entry.employee_name = record.name
        entry.employee_code = record.employee_code
        entry.employee_department = record.department
        entry.employee_manager = self._manager_name(record)

    def _write_log(
        self,
        entry: AssetAssignment,
        action: LogAction,
        status: LogEntryStatus,
        actor_id: UUID,
        *,
        previous_status: LogEntryStatus | None = None,
        previous_employee_id: UUID | None = None,
        condition: str | None = None,
        condition_notes: str | None = None,
        notes: str | None = None,
    ) -> AssignmentLogEntry:
        asset = entry.asset
        log = AssignmentLogEntry(
            seq=self.sequences.next_value(SequenceService.ASSIGNMENT_LOG),
            assignment_id=entry.id,
            asset_id=asset.id,
            employee_id=entry.employee_id,
            action=action.value,
            status=status.value,
            previous_status=previous_status.value if previous_status else None,
            previous_employee_id=previous_employee_id,
            assignment_type=AssignmentType(entry.assignment_type).value,
            expiry_date=entry.expiry_date,
            condition_at_action=condition,
            condition_notes=condition_notes,
            action_by_id=actor_id,
            action_date=self.clock.now(),
            action_notes=notes,
            asset_name=asset.name,
            asset_tag=asset.asset_tag,
            asset_category=asset.category.name,
            employee_name=entry.employee_name,
            employee_code=entry.employee_code,
            employee_department=entry.employee_department,
        )
        self.session.add(log)
        return log

    def _sync_status(self, asset: Asset) -> AssetStatus:
        active = count_active_assignments(self.session, asset.id)
        current = AssetStatus(asset.status)
        derived = derive_status(current, active)
        if derived != current:
            asset.status = derived.value
            logger.debug(
                "asset_status_derived",
                extra={
                    "asset_id": str(asset.id),
                    "from_status": current.value,
                    "to_status": derived.value,
                    "active_count": active,
                },
            )
        return derived

    def _close(
        self,
        entry: AssetAssignment,
        actor_id: UUID,
        action: LogAction,
        return_condition: AssetCondition | None,
        return_notes: str | None,
    ) -> None:
        entry.is_active = False
        entry.return_date = self.clock.now()
        entry.return_condition = return_condition.value if return_condition else None
        entry.return_condition_notes = return_notes
        entry.updated_by_id = actor_id
        self._write_log(
            entry,
            action,
            LogEntryStatus.RETURNED,
            actor_id,
            previous_status=LogEntryStatus.ACTIVE,
            condition=entry.return_condition,
            condition_notes=return_notes,
        )

    def _return_condition(self, value: AssetCondition | str | None) -> AssetCondition:
        if value is None:
            return self.default_return_condition
        return coerce_enum(AssetCondition, "return_condition", value)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def assign(
        self,
        scope: AccessScope,
        asset_id: UUID,
        employee_ids: Sequence[UUID],
        details: AssignmentDetails | None = None,
    ) -> list[AssignmentInfo]:
        """
        Issue one asset to one or more employees.

        One active entry is created per employee, all in one SAVEPOINT:
        either every entry (and its log row) exists afterwards, or none does.

        Returns:
            The created entries, in the order of ``employee_ids``.
        """
        details = details or AssignmentDetails()
        asset = self._get_asset(asset_id)
        scope.require_asset_management(virtual_machine=asset.is_virtual_machine)

        employee_ids = list(employee_ids)
        if not employee_ids:
            raise MissingFieldError("employee_ids", "assignment")
        seen: set[UUID] = set()
        for employee_id in employee_ids:
            if employee_id in seen:
                raise InvalidFieldValueError(
                    "employee_ids", employee_id, "employee listed more than once"
                )
            seen.add(employee_id)

        if AssetStatus(asset.status) in UNASSIGNABLE_STATUSES:
            raise AssetNotAssignableError(str(asset.id), asset.status)

        assignment_type, expiry_date = self._validate_terms(
            details.assignment_type, details.expiry_date
        )
        condition = (
            coerce_enum(AssetCondition, "condition_at_issuance", details.condition_at_issuance)
            if details.condition_at_issuance is not None
            else AssetCondition(asset.condition)
        )

        employees = [self._get_employee(scope, eid) for eid in employee_ids]
        for employee in employees:
            if self._active_entry(asset.id, employee.employee_id) is not None:
                raise DuplicateActiveAssignmentError(str(asset.id), str(employee.employee_id))

        now = self.clock.now()
        created: list[AssetAssignment] = []
        with LogContext.bind(actor_id=str(scope.principal_id), asset_id=str(asset.id)):
            with self.session.begin_nested():
                for employee in employees:
                    entry = AssetAssignment(
                        asset=asset,
                        assigned_by_id=scope.principal_id,
                        assignment_type=assignment_type.value,
                        expiry_date=expiry_date,
                        condition_at_issuance=condition.value,
                        issuance_condition_notes=details.issuance_condition_notes,
                        notes=details.notes,
                        is_active=True,
                        assigned_at=now,
                        created_by_id=scope.principal_id,
                    )
                    self._snapshot_employee(entry, employee)
                    self.session.add(entry)
                    self.session.flush()
                    self._write_log(
                        entry,
                        LogAction.ASSIGNED,
                        LogEntryStatus.ACTIVE,
                        scope.principal_id,
                        condition=condition.value,
                        condition_notes=details.issuance_condition_notes,
                        notes=details.notes,
                    )
                    created.append(entry)
                self._sync_status(asset)
                self.session.flush()

            logger.info(
                "asset_assigned",
                extra={
                    "employee_count": len(created),
                    "assignment_type": assignment_type.value,
                    "status": asset.status,
                },
            )
        return [self._to_dto(e) for e in created]

    def unassign_user(
        self,
        scope: AccessScope,
        assignment_id: UUID,
        return_condition: AssetCondition | str | None = None,
        return_notes: str | None = None,
    ) -> AssignmentInfo:
        """
        Close one employee's entry.

        Idempotent: an entry that is already returned is left untouched and
        returned as-is.  The asset goes back to ``available`` when its last
        active entry closes.
        """
        entry = self._get_entry(assignment_id)
        scope.require_asset_management(virtual_machine=entry.asset.is_virtual_machine)

        if not entry.is_active:
            logger.info(
                "unassign_already_returned",
                extra={"assignment_id": str(entry.id)},
            )
            return self._to_dto(entry)

        condition = self._return_condition(return_condition)
        self._close(entry, scope.principal_id, LogAction.UNASSIGNED, condition, return_notes)
        status = self._sync_status(entry.asset)
        self.session.flush()

        logger.info(
            "asset_unassigned",
            extra={
                "assignment_id": str(entry.id),
                "asset_id": str(entry.asset_id),
                "employee_id": str(entry.employee_id),
                "return_condition": condition.value,
                "status": status.value,
            },
        )
        return self._to_dto(entry)

    def unassign_asset(
        self,
        scope: AccessScope,
        asset_id: UUID,
        return_condition: AssetCondition | str | None = None,
        return_notes: str | None = None,
    ) -> int:
        """
        Take an asset back from everyone holding it, atomically.

        Returns:
            Number of entries closed (0 if none were active).
        """
        asset = self._get_asset(asset_id)
        scope.require_asset_management(virtual_machine=asset.is_virtual_machine)
        condition = self._return_condition(return_condition)

        stmt = select(AssetAssignment).where(
            AssetAssignment.asset_id == asset.id,
            AssetAssignment.is_active == True,  # noqa: E712
        )
        entries = self.session.execute(stmt).unique().scalars().all()

        with self.session.begin_nested():
            for entry in entries:
                self._close(entry, scope.principal_id, LogAction.RETURNED, condition, return_notes)
            self._sync_status(asset)
            self.session.flush()

        logger.info(
            "asset_returned",
            extra={
                "asset_id": str(asset.id),
                "unassigned_count": len(entries),
                "return_condition": condition.value,
                "status": asset.status,
            },
        )
        return len(entries)

    def update_assignment(
        self,
        scope: AccessScope,
        assignment_id: UUID,
        changes: Mapping[str, Any],
    ) -> AssignmentInfo:
        """
        Edit entry metadata: asset, employee, terms, issuance condition, notes.

        Changing the employee is logged as ``transferred``; anything else as
        ``updated``.  Switching to permanent clears the expiry date.
        Switching to temporary requires an expiry date, either supplied or
        already on the entry.
        """
        reject_unknown_fields(changes, ASSIGNMENT_PATCH_FIELDS)
        entry = self._get_entry(assignment_id)
        old_asset = entry.asset
        scope.require_asset_management(virtual_machine=old_asset.is_virtual_machine)

        new_asset = old_asset
        if "asset_id" in changes and changes["asset_id"] != entry.asset_id:
            new_asset = self._get_asset(changes["asset_id"])
            scope.require_asset_management(virtual_machine=new_asset.is_virtual_machine)
            if entry.is_active and AssetStatus(new_asset.status) in UNASSIGNABLE_STATUSES:
                raise AssetNotAssignableError(str(new_asset.id), new_asset.status)

        new_employee: EmployeeRecord | None = None
        previous_employee_id: UUID | None = None
        if "employee_id" in changes and changes["employee_id"] != entry.employee_id:
            new_employee = self._get_employee(scope, changes["employee_id"])
            previous_employee_id = entry.employee_id

        if entry.is_active and (new_asset is not old_asset or new_employee is not None):
            target_employee = new_employee.employee_id if new_employee else entry.employee_id
            existing = self._active_entry(new_asset.id, target_employee)
            if existing is not None and existing.id != entry.id:
                raise DuplicateActiveAssignmentError(str(new_asset.id), str(target_employee))

        assignment_type = coerce_enum(
            AssignmentType,
            "assignment_type",
            changes.get("assignment_type", entry.assignment_type),
        )
        if assignment_type == AssignmentType.PERMANENT:
            if changes.get("expiry_date") is not None:
                raise InvalidFieldValueError(
                    "expiry_date", changes["expiry_date"], "permanent assignments do not expire"
                )
            expiry_date = None
        elif "expiry_date" in changes:
            expiry_date = self._validate_new_expiry(changes["expiry_date"])
        else:
            expiry_date = entry.expiry_date
            if expiry_date is None:
                raise ExpiryDateRequiredError()

        if "condition_at_issuance" in changes and changes["condition_at_issuance"] is not None:
            condition = coerce_enum(
                AssetCondition, "condition_at_issuance", changes["condition_at_issuance"]
            ).value
        else:
            condition = changes.get("condition_at_issuance", entry.condition_at_issuance)

        with self.session.begin_nested():
            if new_asset is not old_asset:
                entry.asset = new_asset
            if new_employee is not None:
                self._snapshot_employee(entry, new_employee)
            entry.assignment_type = assignment_type.value
            entry.expiry_date = expiry_date
            entry.condition_at_issuance = condition
            if "issuance_condition_notes" in changes:
                entry.issuance_condition_notes = changes["issuance_condition_notes"]
            if "notes" in changes:
                entry.notes = changes["notes"]
            entry.updated_by_id = scope.principal_id

            state = LogEntryStatus.ACTIVE if entry.is_active else LogEntryStatus.RETURNED
            action = LogAction.TRANSFERRED if new_employee is not None else LogAction.UPDATED
            self._write_log(
                entry,
                action,
                state,
                scope.principal_id,
                previous_status=state,
                previous_employee_id=previous_employee_id,
                condition=entry.condition_at_issuance,
                condition_notes=entry.issuance_condition_notes,
                notes=changes.get("notes"),
            )
            if new_asset is not old_asset:
                self._sync_status(old_asset)
                self._sync_status(new_asset)
            self.session.flush()

        logger.info(
            "assignment_updated",
            extra={
                "assignment_id": str(entry.id),
                "action": action.value,
                "fields": sorted(changes),
            },
        )
        return self._to_dto(entry)

    def delete_assignment(self, scope: AccessScope, assignment_id: UUID) -> None:
        """
        Remove an entry entirely (administrative correction).

        The log keeps its history and gains a ``deleted`` row; complaints
        raised against the entry lose their link but survive, while its
        condition images are removed with it.  The asset's status is
        re-derived exactly as for a return.
        """
        entry = self._get_entry(assignment_id)
        asset = entry.asset
        scope.require_asset_management(virtual_machine=asset.is_virtual_machine)
        was_active = entry.is_active

        with self.session.begin_nested():
            self._write_log(
                entry,
                LogAction.DELETED,
                LogEntryStatus.RETURNED,
                scope.principal_id,
                previous_status=LogEntryStatus.ACTIVE if was_active else LogEntryStatus.RETURNED,
            )
            self.session.execute(
                update(AssetComplaint)
                .where(AssetComplaint.assignment_id == entry.id)
                .values(assignment_id=None),
                execution_options={"synchronize_session": "fetch"},
            )
            self.session.execute(
                delete(AssetConditionImage).where(AssetConditionImage.assignment_id == entry.id),
                execution_options={"synchronize_session": "fetch"},
            )
            self.session.delete(entry)
            self.session.flush()
            self._sync_status(asset)
            self.session.flush()

        logger.warning(
            "assignment_deleted",
            extra={
                "assignment_id": str(assignment_id),
                "asset_id": str(asset.id),
                "was_active": was_active,
                "status": asset.status,
            },
        )

    def record_condition_image(
        self,
        scope: AccessScope,
        assignment_id: UUID,
        image_url: str,
        image_filename: str,
        image_size_bytes: int | None = None,
    ) -> ConditionImageInfo:
        """
        Record a quarterly condition photo against the caller's own entry.

        The image counts toward the calendar quarter of the clock's
        ``today()``, which also becomes the asset's ``hardware_image_date``.
        The entry row is locked while the quarter's images are counted.

        Raises:
            OutOfScopeError: If the entry belongs to someone else.
            AssignmentInactiveError: If the entry was returned.
            NotHardwareAssetError: For virtual machines and software,
                license or subscription categories.
            MissingFieldError / InvalidFieldValueError: On a blank URL or
                filename, or a non-positive size.
            ConditionImageLimitError: If the quarter's images are used up.
            DuplicateConditionImageError: If the URL is already on the entry.
        """
        entry = self._lock_entry(assignment_id)
        if entry.employee_id != scope.principal_id:
            raise OutOfScopeError(
                str(scope.principal_id), str(entry.employee_id), "condition images come from the holder"
            )
        if not entry.is_active:
            raise AssignmentInactiveError(str(entry.id))
        asset = entry.asset
        if not is_hardware_category(asset.category.name, asset.category.kind):
            raise NotHardwareAssetError(str(asset.id), asset.category.name)

        url = (image_url or "").strip()
        if not url:
            raise MissingFieldError("image_url", "condition_image")
        filename = (image_filename or "").strip()
        if not filename:
            raise MissingFieldError("image_filename", "condition_image")
        if image_size_bytes is not None and image_size_bytes <= 0:
            raise InvalidFieldValueError("image_size_bytes", image_size_bytes, "must be positive")

        today = self.clock.today()
        period = Quarter.of(today)
        uploaded = count_condition_images(self.session, entry.id, period)
        if not can_upload_more(uploaded, self.max_images_per_quarter):
            raise ConditionImageLimitError(
                str(entry.id), period.year, period.quarter, self.max_images_per_quarter
            )
        duplicate = select(func.count(AssetConditionImage.id)).where(
            AssetConditionImage.assignment_id == entry.id,
            AssetConditionImage.image_url == url,
        )
        if self.session.execute(duplicate).scalar_one():
            raise DuplicateConditionImageError(str(entry.id), url)

        image = AssetConditionImage(
            assignment_id=entry.id,
            asset_id=asset.id,
            employee_id=entry.employee_id,
            image_url=url,
            image_filename=filename,
            image_size_bytes=image_size_bytes,
            upload_year=period.year,
            upload_quarter=period.quarter,
            uploaded_at=self.clock.now(),
            created_by_id=scope.principal_id,
        )
        self.session.add(image)
        asset.hardware_image_date = today
        self.session.flush()

        logger.info(
            "condition_image_recorded",
            extra={
                "assignment_id": str(entry.id),
                "asset_id": str(asset.id),
                "period": str(period),
                "images_uploaded": uploaded + 1,
            },
        )
        return condition_image_to_info(image)

    def expire_overdue(self, scope: AccessScope, as_of: date | None = None) -> list[AssignmentInfo]:
        """
        Close every active temporary entry whose expiry date is before ``as_of``.

        Nothing expires on its own; this sweep is the only path that closes
        entries for being overdue.  Runs as one SAVEPOINT.

        Args:
            as_of: Cut-off date; defaults to today per the injected clock.
        """
        scope.require_full_visibility("the expiry sweep covers every employee")
        as_of = as_of or self.clock.today()

        stmt = select(AssetAssignment).where(
            AssetAssignment.is_active == True,  # noqa: E712
            AssetAssignment.assignment_type == AssignmentType.TEMPORARY.value,
            AssetAssignment.expiry_date < as_of,
        )
        entries = self.session.execute(stmt).unique().scalars().all()
        if not entries:
            return []

        with self.session.begin_nested():
            touched: dict[UUID, Asset] = {}
            for entry in entries:
                self._close(
                    entry,
                    scope.principal_id,
                    LogAction.EXPIRED,
                    None,
                    f"Expired on {entry.expiry_date.isoformat()}",
                )
                touched[entry.asset_id] = entry.asset
            for asset in touched.values():
                self._sync_status(asset)
            self.session.flush()

        logger.info(
            "assignments_expired",
            extra={"as_of": as_of, "expired_count": len(entries)},
        )
        return [self._to_dto(e) for e in entries]
