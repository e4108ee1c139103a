"""Exceptions raised by prodmatch."""


class ProdmatchError(Exception):
    """Base class for prodmatch errors."""


class InputFormatError(ProdmatchError, ValueError):
    """A catalog or mentions file could not be parsed."""

    def __init__(self, path: str, line: int, message: str) -> None:
        super().__init__(f"{path}:{line}: {message}")
        self.path = path
        self.line = line
