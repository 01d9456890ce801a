"""Services for the asset kernel (write side)."""

from asset_kernel.services.access_service import AccessResolver
from asset_kernel.services.complaint_service import ComplaintService
from asset_kernel.services.ledger_service import LedgerService
from asset_kernel.services.registry_service import RegistryService
from asset_kernel.services.request_service import RequestService
from asset_kernel.services.sequence_service import SequenceService

__all__ = [
    "AccessResolver",
    "ComplaintService",
    "LedgerService",
    "RegistryService",
    "RequestService",
    "SequenceService",
]
