"""
Import Status Enumeration

Per-URL outcome of a manual feed import.
"""
from enum import Enum


class ImportStatus(str, Enum):
    """
    Manual import outcome for one feed URL.

    - success: New subscription registered and ingested
    - skipped: Caller already tracks this URL (feed was still refreshed)
    - failed: The URL could not be imported; a reason accompanies it
    """

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
