"""Exception hierarchy for dynparam."""

from __future__ import annotations


class DynParamError(Exception):
    """Base class for every fatal dynparam error."""


class MissingParamBlockError(DynParamError):
    """The input specification carries no parameter block.

    This is a structural failure: emission is aborted and no partial source is
    produced.
    """

    def __init__(self, message: str = "input specification has no param() block"):
        super().__init__(message)


class ParseError(DynParamError):
    def __init__(self, message: str, *, line: int, column: int):
        super().__init__(f"{message} (line {line}, column {column})")
        self.reason = message
        self.line = line
        self.column = column


class PayloadError(DynParamError):
    """A JSON AST payload failed validation."""


class ConfigError(DynParamError):
    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key
        self.message = message
