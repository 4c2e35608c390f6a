"""
Error Taxonomy

Every failure in snapkv is one of the exceptions below. Each carries the
structured context (path, key, offending token) needed to render a message,
so callers can branch on the class and tests can assert on fields.

Exception hierarchy:
- KVError (base)
  - SnapshotError: snapshot file failures (carry path + cause)
    - SnapshotIOError: file-system level failure
    - SnapshotParseError: file readable but not a valid snapshot
    - SnapshotSerializeError: store could not be encoded
  - KeyNotFoundError: requested key is absent
  - InvalidCommandError: malformed command line
    - EmptyCommandError: blank input
    - UnknownCommandError: unrecognised verb
    - WrongArityError: wrong number of arguments
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

PathLike = Union[str, Path]


class KVError(Exception):
    """Base exception for all snapkv errors."""

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.details = details or {}
        super().__init__(message)


# --- Snapshot ---


class SnapshotError(KVError):
    """Raised when a snapshot file cannot be read or written."""

    kind = "snapshot"

    def __init__(
        self,
        message: str,
        *,
        path: PathLike,
        cause: Optional[BaseException] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.path = Path(path)
        self.cause = cause
        details = details or {}
        details["path"] = str(self.path)
        super().__init__(message, details=details)


class SnapshotIOError(SnapshotError):
    """Raised for permission, missing-directory or device failures."""

    kind = "io"

    def __init__(self, path: PathLike, cause: Optional[BaseException] = None) -> None:
        reason = cause.strerror if isinstance(cause, OSError) and cause.strerror else cause
        message = f"I/O error on snapshot {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path=path, cause=cause)


class SnapshotParseError(SnapshotError):
    """Raised when an existing snapshot does not decode as a key/value map."""

    kind = "parse"

    def __init__(
        self,
        path: PathLike,
        reason: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            f"invalid snapshot {path}: {reason}",
            path=path,
            cause=cause,
            details={"reason": reason},
        )


class SnapshotSerializeError(SnapshotError):
    """Raised when the in-memory store cannot be encoded."""

    kind = "serialize"

    def __init__(
        self,
        path: PathLike,
        reason: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            f"cannot serialize snapshot for {path}: {reason}",
            path=path,
            cause=cause,
            details={"reason": reason},
        )


# --- Store ---


class KeyNotFoundError(KVError):
    """Raised when a requested key does not exist in the store."""

    kind = "not_found"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"key not found: {key}", details={"key": key})


# --- Commands ---


class InvalidCommandError(KVError):
    """Raised when a command line cannot be parsed."""

    kind = "invalid_command"

    def __init__(
        self,
        message: str,
        *,
        raw: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.raw = raw
        super().__init__(message, details=details)


class EmptyCommandError(InvalidCommandError):
    """Raised for blank or whitespace-only input."""

    kind = "empty"

    def __init__(self, raw: str = "") -> None:
        super().__init__("empty command", raw=raw)


class UnknownCommandError(InvalidCommandError):
    """Raised when the verb is not a known command family."""

    kind = "unknown_command"

    def __init__(self, token: str, raw: str = "") -> None:
        self.token = token
        super().__init__(
            f"unknown command: {token}",
            raw=raw,
            details={"token": token},
        )


class WrongArityError(InvalidCommandError):
    """Raised when a command gets the wrong number of arguments."""

    kind = "wrong_arity"

    def __init__(self, command: str, expected: int, found: int, raw: str = "") -> None:
        self.command = command
        self.expected = expected
        self.found = found
        plural = "" if expected == 1 else "s"
        super().__init__(
            f"{command} expects {expected} argument{plural}, got {found}",
            raw=raw,
            details={"command": command, "expected": expected, "found": found},
        )
