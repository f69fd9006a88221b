"""
Typed data models for the maps directory pipeline.
All record-level data structures used throughout the codebase are defined here.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Record:
    """One point of interest loaded from a category dataset.

    ``None`` marks a field that is absent from the source. A text cell that is
    present but empty is kept as ``""``.
    """
    name: Optional[str] = None
    phone: Optional[str] = None
    hours: Optional[str] = None
    rating: Optional[float] = None
    address: Optional[str] = None
    location_link: Optional[str] = None  # Map URL, passed through as-is

    @property
    def has_location(self) -> bool:
        """Whether a "view location" action can be offered for this record."""
        return bool(self.location_link)

    @property
    def rating_display(self) -> str:
        if self.rating is None:
            return "N/A"
        return f"{self.rating:.1f}"


@dataclass(frozen=True)
class RowWarning:
    """A malformed source row that was skipped during parsing."""
    line: int
    reason: str
    raw: str = ""
