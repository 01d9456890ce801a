"""
Typed Exception Hierarchy for the Asset Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The HR console maps every failure onto a response the operator can act on.
Generic exceptions like ValueError or RuntimeError force callers to parse
error messages, which breaks the moment a message is reworded.

Every error in this module:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)
  4. Belongs to one of four CATEGORIES, each with an ``http_status``

Example - RIGHT way to handle errors:
    try:
        ledger.assign(scope, asset_id, [employee_id], details)
    except DuplicateActiveAssignmentError as e:
        api_response(code=e.code, employee=e.employee_id)
    except ConflictError as e:
        api_response(status=e.http_status, code=e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from AssetKernelError:

    AssetKernelError (base)
    |
    +-- ValidationError                       (400)
    |   +-- MissingFieldError
    |   +-- InvalidFieldValueError
    |   +-- ExpiryDateRequiredError
    |   +-- CategoryKindMismatchError
    |   +-- NotHardwareAssetError
    |
    +-- AuthorizationError                    (403)
    |   +-- MissingCapabilityError
    |   +-- OutOfScopeError
    |
    +-- NotFoundError                         (404)
    |   +-- AssetNotFoundError
    |   +-- CategoryNotFoundError
    |   +-- AssignmentNotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- RequestNotFoundError
    |   +-- ComplaintNotFoundError
    |
    +-- ConflictError                         (409)
    |   +-- DuplicateAssetTagError
    |   +-- DuplicateVmNumberError
    |   +-- AssetNotAssignableError
    |   +-- DuplicateActiveAssignmentError
    |   +-- AssignmentInactiveError
    |   +-- InvalidStatusTransitionError
    |   +-- InvalidRequestTransitionError
    |   +-- RequestNotPendingError
    |   +-- InvalidComplaintTransitionError
    |   +-- ConditionImageLimitError
    |   +-- DuplicateConditionImageError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|----------------------------------------
Validation      | MISSING_FIELD                 | Required field absent or blank
                | INVALID_FIELD_VALUE           | Field present but not acceptable
                | EXPIRY_DATE_REQUIRED          | Temporary assignment without expiry
                | CATEGORY_KIND_MISMATCH        | VM intent on a regular category (or
                |                               | the reverse)
                | NOT_HARDWARE_ASSET            | Condition image for software or a VM
----------------|-------------------------------|----------------------------------------
Authorization   | MISSING_CAPABILITY            | Principal lacks a required capability
                | OUT_OF_SCOPE                  | Target employee outside the team filter
----------------|-------------------------------|----------------------------------------
Not found       | ASSET_NOT_FOUND               | Asset id doesn't exist
                | CATEGORY_NOT_FOUND            | Category id doesn't exist
                | ASSIGNMENT_NOT_FOUND          | Assignment id doesn't exist
                | EMPLOYEE_NOT_FOUND            | Directory has no such employee
                | REQUEST_NOT_FOUND             | Request id doesn't exist
                | COMPLAINT_NOT_FOUND           | Complaint id doesn't exist
----------------|-------------------------------|----------------------------------------
Conflict        | DUPLICATE_ASSET_TAG           | Tag already used by another asset
                | DUPLICATE_VM_NUMBER           | VM number used by another machine
                | ASSET_NOT_ASSIGNABLE          | Asset is retired, lost or archived
                | DUPLICATE_ACTIVE_ASSIGNMENT   | Employee already holds the asset
                | ASSIGNMENT_INACTIVE           | Operation needs an active entry
                | INVALID_STATUS_TRANSITION     | Illegal asset status move
                | INVALID_REQUEST_TRANSITION    | Illegal request status move
                | REQUEST_NOT_PENDING           | Edit of a request already decided
                | INVALID_COMPLAINT_TRANSITION  | Illegal complaint status move
                | CONDITION_IMAGE_LIMIT         | Quarterly condition image cap reached
                | DUPLICATE_CONDITION_IMAGE     | Image URL already recorded on the entry
----------------|-------------------------------|----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION        | Update/delete of an assignment log row

===============================================================================
"""


class AssetKernelError(Exception):
    """
    Base exception for all asset kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ASSET_KERNEL_ERROR"
    http_status: int = 500


# Validation exceptions


class ValidationError(AssetKernelError):
    """Base exception for rejected input. Raised before any mutation."""

    code: str = "VALIDATION_ERROR"
    http_status: int = 400


class MissingFieldError(ValidationError):
    """A required field is absent or blank."""

    code: str = "MISSING_FIELD"

    def __init__(self, field_name: str, entity_type: str = "asset"):
        self.field_name = field_name
        self.entity_type = entity_type
        super().__init__(f"Missing required field '{field_name}' on {entity_type}")


class InvalidFieldValueError(ValidationError):
    """A field is present but its value is not acceptable."""

    code: str = "INVALID_FIELD_VALUE"

    def __init__(self, field_name: str, value: object, reason: str):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for '{field_name}' ({value!r}): {reason}")


class ExpiryDateRequiredError(ValidationError):
    """Temporary assignments must carry an expiry date in the future."""

    code: str = "EXPIRY_DATE_REQUIRED"

    def __init__(self, assignment_type: str = "temporary"):
        self.assignment_type = assignment_type
        super().__init__(f"An expiry date is required for {assignment_type} assignments")


class CategoryKindMismatchError(ValidationError):
    """
    The creation intent does not match the kind of the chosen category.

    A virtual-machine intent needs a virtual-machine category and a regular
    intent needs a regular one.
    """

    code: str = "CATEGORY_KIND_MISMATCH"

    def __init__(self, category_id: str, category_kind: str, intent_kind: str):
        self.category_id = category_id
        self.category_kind = category_kind
        self.intent_kind = intent_kind
        super().__init__(
            f"Category {category_id} is of kind '{category_kind}', "
            f"cannot create a '{intent_kind}' asset in it"
        )



class NotHardwareAssetError(ValidationError):
    """Condition images are collected for physical hardware only."""

    code: str = "NOT_HARDWARE_ASSET"

    def __init__(self, asset_id: str, category_name: str):
        self.asset_id = asset_id
        self.category_name = category_name
        super().__init__(
            f"Asset {asset_id} in category '{category_name}' does not take condition images"
        )

# Authorization exceptions


class AuthorizationError(AssetKernelError):
    """Base exception for scope and capability violations. Never a silent no-op."""

    code: str = "AUTHORIZATION_ERROR"
    http_status: int = 403


class MissingCapabilityError(AuthorizationError):
    """The principal lacks a capability the operation requires."""

    code: str = "MISSING_CAPABILITY"

    def __init__(self, principal_id: str, capability: str):
        self.principal_id = principal_id
        self.capability = capability
        super().__init__(
            f"Principal {principal_id} lacks capability '{capability}'"
        )


class OutOfScopeError(AuthorizationError):
    """The target record falls outside the principal's visibility."""

    code: str = "OUT_OF_SCOPE"

    def __init__(self, principal_id: str, employee_id: str, reason: str = ""):
        self.principal_id = principal_id
        self.employee_id = employee_id
        self.reason = reason
        msg = f"Employee {employee_id} is outside the scope of principal {principal_id}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


# Not-found exceptions


class NotFoundError(AssetKernelError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"
    http_status: int = 404


class AssetNotFoundError(NotFoundError):
    """Asset with given ID was not found."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"Asset not found: {asset_id}")


class CategoryNotFoundError(NotFoundError):
    """Asset category with given ID was not found."""

    code: str = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Asset category not found: {category_id}")


class AssignmentNotFoundError(NotFoundError):
    """Assignment with given ID was not found."""

    code: str = "ASSIGNMENT_NOT_FOUND"

    def __init__(self, assignment_id: str):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment not found: {assignment_id}")


class EmployeeNotFoundError(NotFoundError):
    """The employee directory has no record for the given ID."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class RequestNotFoundError(NotFoundError):
    """Asset request with given ID was not found."""

    code: str = "REQUEST_NOT_FOUND"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Asset request not found: {request_id}")


class ComplaintNotFoundError(NotFoundError):
    """Asset complaint with given ID was not found."""

    code: str = "COMPLAINT_NOT_FOUND"

    def __init__(self, complaint_id: str):
        self.complaint_id = complaint_id
        super().__init__(f"Asset complaint not found: {complaint_id}")


# Conflict exceptions


class ConflictError(AssetKernelError):
    """Base exception for requests that clash with the current state."""

    code: str = "CONFLICT"
    http_status: int = 409


class DuplicateAssetTagError(ConflictError):
    """Another asset already carries this tag."""

    code: str = "DUPLICATE_ASSET_TAG"

    def __init__(self, asset_tag: str):
        self.asset_tag = asset_tag
        super().__init__(f"Asset tag already in use: {asset_tag}")


class DuplicateVmNumberError(ConflictError):
    """Another virtual machine already carries this VM number."""

    code: str = "DUPLICATE_VM_NUMBER"

    def __init__(self, vm_number: str):
        self.vm_number = vm_number
        super().__init__(f"VM number already in use: {vm_number}")


class AssetNotAssignableError(ConflictError):
    """Retired, lost and archived assets cannot receive new assignments."""

    code: str = "ASSET_NOT_ASSIGNABLE"

    def __init__(self, asset_id: str, status: str):
        self.asset_id = asset_id
        self.status = status
        super().__init__(f"Asset {asset_id} cannot be assigned while '{status}'")


class DuplicateActiveAssignmentError(ConflictError):
    """The employee already holds an active assignment on this asset."""

    code: str = "DUPLICATE_ACTIVE_ASSIGNMENT"

    def __init__(self, asset_id: str, employee_id: str):
        self.asset_id = asset_id
        self.employee_id = employee_id
        super().__init__(
            f"Employee {employee_id} already has an active assignment on asset {asset_id}"
        )


class AssignmentInactiveError(ConflictError):
    """The operation needs an active assignment but the entry was returned."""

    code: str = "ASSIGNMENT_INACTIVE"

    def __init__(self, assignment_id: str):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment {assignment_id} is no longer active")


class InvalidStatusTransitionError(ConflictError):
    """Asset status cannot move from its current value to the target."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, asset_id: str, from_status: str, to_status: str):
        self.asset_id = asset_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Asset {asset_id} cannot move from '{from_status}' to '{to_status}'"
        )


class InvalidRequestTransitionError(ConflictError):
    """Asset request status cannot move from its current value to the target."""

    code: str = "INVALID_REQUEST_TRANSITION"

    def __init__(self, request_id: str, from_status: str, to_status: str):
        self.request_id = request_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Asset request {request_id} cannot move from '{from_status}' to '{to_status}'"
        )


class RequestNotPendingError(ConflictError):
    """Only pending requests can be edited by the requester."""

    code: str = "REQUEST_NOT_PENDING"

    def __init__(self, request_id: str, status: str):
        self.request_id = request_id
        self.status = status
        super().__init__(f"Asset request {request_id} is '{status}', not pending")


class InvalidComplaintTransitionError(ConflictError):
    """Complaint status cannot move from its current value to the target."""

    code: str = "INVALID_COMPLAINT_TRANSITION"

    def __init__(self, complaint_id: str, from_status: str, to_status: str):
        self.complaint_id = complaint_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Complaint {complaint_id} cannot move from '{from_status}' to '{to_status}'"
        )



class ConditionImageLimitError(ConflictError):
    """The entry already has the maximum number of images for the quarter."""

    code: str = "CONDITION_IMAGE_LIMIT"

    def __init__(self, assignment_id: str, year: int, quarter: int, limit: int):
        self.assignment_id = assignment_id
        self.year = year
        self.quarter = quarter
        self.limit = limit
        super().__init__(
            f"Assignment {assignment_id} already has {limit} condition images for {year} Q{quarter}"
        )


class DuplicateConditionImageError(ConflictError):
    code: str = "DUPLICATE_CONDITION_IMAGE"

    def __init__(self, assignment_id: str, image_url: str):
        self.assignment_id = assignment_id
        self.image_url = image_url
        super().__init__(f"Image {image_url} is already recorded on assignment {assignment_id}")

# Immutability exceptions


class ImmutabilityViolationError(AssetKernelError):
    """
    Attempted to modify or delete an append-only record.

    Assignment log entries are written once and never changed.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
