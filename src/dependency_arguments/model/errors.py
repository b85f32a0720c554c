from __future__ import annotations

from typing import Any


class ArgumentsError(Exception):
    """
    Base class for every error raised by an argument container.
    """

    pass


class ArgumentNotFoundError(ArgumentsError, KeyError):
    """
    Raised by a direct lookup when no entry matches the normalized key.

    Subclasses KeyError so the usual mapping idioms (``get``, ``in``,
    ``setdefault``) keep working against an Arguments instance.
    """

    def __init__(self, key: Any) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"no argument registered for {self.key!r}"


class ReadOnlyArgumentsError(ArgumentsError, TypeError):
    def __init__(self, message: str = "Arguments collection is read-only") -> None:
        super().__init__(message)


class InvalidArgumentKeyError(ArgumentsError, TypeError):
    """
    Raised when a key is neither a name (str) nor a type identity (type).
    """

    def __init__(self, key: Any) -> None:
        super().__init__(
            f"The argument {key!r} should be of type str or type, "
            f"got {type(key).__name__}"
        )
        self.key = key
