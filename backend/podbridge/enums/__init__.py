"""
PodBridge Enumeration Module

This module defines all enumeration types used throughout the pipeline.
"""

from podbridge.enums.federation_status import FederationStatus
from podbridge.enums.ingestion_state import IngestionState
from podbridge.enums.import_status import ImportStatus

__all__ = [
    "FederationStatus",
    "IngestionState",
    "ImportStatus",
]
