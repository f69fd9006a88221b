"""
Exception hierarchy for dataset loading.

Row-level problems never raise; they are reported as ``RowWarning`` values by
the parser. Everything here is category-level or configuration-level.
"""
from typing import Optional, Union


class MapsDirectoryError(Exception):
    """Base class for all maps directory errors."""


class UnknownCategory(MapsDirectoryError):
    """Raised when a category id is not part of the configured set."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Unknown category '{category_id}'")


class TransportFailure(MapsDirectoryError):
    """The raw dataset could not be fetched."""

    def __init__(
        self,
        locator: str,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        self.locator = locator
        self.status = status
        self.cause = cause
        if status is not None:
            message = f"HTTP error! status: {status}"
        else:
            message = f"Transport error: {cause}"
        super().__init__(message)


class ParseFailure(MapsDirectoryError):
    """The dataset text is not tabular text at all."""


class LoadFailure(MapsDirectoryError):
    """A category could not be loaded.

    Args:
        category (str): Category id whose load failed.
        cause (TransportFailure | ParseFailure): Underlying failure.
    """

    def __init__(self, category: str, cause: Union[TransportFailure, ParseFailure]):
        self.category = category
        self.cause = cause
        super().__init__(f"Failed to load '{category}': {cause}")

    @property
    def status_or_cause(self) -> Union[int, str]:
        """HTTP status when the server answered, otherwise the cause message."""
        if isinstance(self.cause, TransportFailure) and self.cause.status is not None:
            return self.cause.status
        return str(self.cause)

    @property
    def user_message(self) -> str:
        if isinstance(self.cause, ParseFailure):
            return "Error parsing data"
        return "Error loading data"
