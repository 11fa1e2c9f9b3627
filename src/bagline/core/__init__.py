"""Core package.

Pure domain logic: entity models, validation, the aggregation engine, report
summaries and the stop lifecycle. Nothing here touches the database or the UI.
"""

from bagline.core.errors import StoreError, ValidationError
from bagline.core.models import Collections, PackagingRecord, Product, ProductionRecord, StopRecord, TeamMember

__all__ = [
    "Collections",
    "PackagingRecord",
    "Product",
    "ProductionRecord",
    "StopRecord",
    "StoreError",
    "TeamMember",
    "ValidationError",
]
