"""
Search index connector exceptions.
"""


class SearchIndexError(Exception):
    """Raised when the search cluster cannot be reached or rejects a call."""

    def __init__(self, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
