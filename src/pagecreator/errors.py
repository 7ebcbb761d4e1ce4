"""Exceptions raised by pagecreator."""


class PageCreatorError(Exception):
    """Base class for pagecreator errors."""


class QueryShapeError(PageCreatorError):
    """Query result data does not have the expected single-list shape."""

    def __init__(self, message: str, data: object = None) -> None:
        super().__init__(message)
        self.data = data
