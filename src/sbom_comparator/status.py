"""
Status vocabulary of the HTML report and the colours attached to it.

Both tables are plain data: a (background, text) colour pair per status.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

Colors = Tuple[str, str]

GREEN = "#03AC13"


class DiffStatus(Enum):
    ADDED = "Added"
    REMOVED = "Removed"
    MODIFIED = "Modified"


class EfossStatus(Enum):
    """Review status of a component, read from its efossStatus property."""

    APPROVAL_RECOMMENDED = "APPROVAL_RECOMMENDED"
    APPROVED = "APPROVED"
    UNDER_REVIEW = "UNDER_REVIEW"
    LEGAL_REVIEW_HOLD = "LEGAL_REVIEW_HOLD"
    DENIED = "DENIED"
    UNSPECIFIED = ""

    @classmethod
    def parse(cls, value: Optional[str]) -> "EfossStatus":
        """Map a raw property value to a member; unknown values are UNSPECIFIED."""
        try:
            return cls(value or "")
        except ValueError:
            return cls.UNSPECIFIED


STATUS_COLORS: Dict[DiffStatus, Colors] = {
    DiffStatus.ADDED: (GREEN, "black"),
    DiffStatus.REMOVED: ("red", "white"),
    DiffStatus.MODIFIED: ("white", "black"),
}

EFOSS_COLORS: Dict[EfossStatus, Colors] = {
    EfossStatus.APPROVAL_RECOMMENDED: (GREEN, "black"),
    EfossStatus.APPROVED: (GREEN, "black"),
    EfossStatus.UNDER_REVIEW: ("yellow", "black"),
    EfossStatus.LEGAL_REVIEW_HOLD: ("yellow", "black"),
    EfossStatus.DENIED: ("red", "white"),
    EfossStatus.UNSPECIFIED: ("white", "black"),
}

EFOSS_PROPERTY_NAMES = ("efossStatus", "efoss status")
