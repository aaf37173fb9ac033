# Business Logic Services
from portfolio_api.services.data_deletion import (
    DeletionAbortedError,
    DeletionOrchestrator,
    record_blocked_attempt,
)
from portfolio_api.services.section_registry import (
    SECTION_REGISTRY,
    PlanRegistryError,
    SectionRegistry,
    UnknownSectionError,
)
from portfolio_api.services.storage_client import (
    StorageClient,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    "DeletionAbortedError",
    "DeletionOrchestrator",
    "record_blocked_attempt",
    "SECTION_REGISTRY",
    "PlanRegistryError",
    "SectionRegistry",
    "UnknownSectionError",
    "StorageClient",
    "StorageError",
    "StorageUnavailableError",
]
