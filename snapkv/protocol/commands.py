"""
Protocol Command and Response Definitions

This module defines the data structures for parsed commands and the
responses produced by applying them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class CommandType(Enum):
    """Enumeration of supported command families."""
    GET = "get"
    SET = "set"
    DELETE = "delete"
    LIST = "list"
    EXIT = "exit"

    @property
    def mutates(self) -> bool:
        """Whether applying this command can change the store."""
        return self in (CommandType.SET, CommandType.DELETE)


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Command:
    """
    Represents a parsed command.

    Attributes:
        type: The command family (GET, SET, DELETE, LIST, EXIT)
        key: The key for GET, SET and DELETE (empty otherwise)
        value: The value for SET (empty otherwise)
        raw: The input line the command was parsed from
    """
    type: CommandType
    key: str = ""
    value: str = ""
    raw: str = ""

    @classmethod
    def get(cls, key: str, raw: str = "") -> "Command":
        return cls(type=CommandType.GET, key=key, raw=raw)

    @classmethod
    def set(cls, key: str, value: str, raw: str = "") -> "Command":
        return cls(type=CommandType.SET, key=key, value=value, raw=raw)

    @classmethod
    def delete(cls, key: str, raw: str = "") -> "Command":
        return cls(type=CommandType.DELETE, key=key, raw=raw)

    @classmethod
    def list(cls, raw: str = "") -> "Command":
        return cls(type=CommandType.LIST, raw=raw)

    @classmethod
    def exit(cls, raw: str = "") -> "Command":
        return cls(type=CommandType.EXIT, raw=raw)


@dataclass(frozen=True)
class Response:
    """
    Represents the outcome of a command.

    Attributes:
        status: OK or ERROR
        message: Response message or error description
        value: The value returned (for GET operations)
        previous: Value replaced by SET or removed by DELETE (None = was absent)
        items: (key, value) pairs returned by LIST
        terminate: True when the front end should stop reading commands
        error_kind: The error's kind for ERROR responses
    """
    status: ResponseStatus
    message: str = ""
    value: Optional[str] = None
    previous: Optional[str] = None
    items: Tuple[Tuple[str, str], ...] = ()
    terminate: bool = False
    error_kind: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == ResponseStatus.OK

    @property
    def was_absent(self) -> bool:
        """True when a SET created a new key."""
        return self.previous is None

    @classmethod
    def ok(cls, message: str = "", value: Optional[str] = None) -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK, message=message, value=value)

    @classmethod
    def error(cls, message: str, kind: Optional[str] = None) -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=message, error_kind=kind)

    @classmethod
    def from_error(cls, exc) -> "Response":
        """Create an error response from a KVError."""
        return cls.error(str(exc), kind=exc.kind)

    @classmethod
    def stored(cls, previous: Optional[str] = None) -> "Response":
        """Create a response for SET, recording any replaced value."""
        message = "stored" if previous is None else "updated"
        return cls(status=ResponseStatus.OK, message=message, previous=previous)

    @classmethod
    def deleted(cls, removed: str) -> "Response":
        """Create a response for DELETE carrying the removed value."""
        return cls(status=ResponseStatus.OK, message="deleted", previous=removed)

    @classmethod
    def value_response(cls, value: str) -> "Response":
        """Create a GET response with a value."""
        return cls.ok(value=value)

    @classmethod
    def listing(cls, items) -> "Response":
        """Create a LIST response from (key, value) pairs."""
        items = tuple(items)
        return cls(status=ResponseStatus.OK, message=str(len(items)), items=items)

    @classmethod
    def goodbye(cls) -> "Response":
        """Create an EXIT response."""
        return cls(status=ResponseStatus.OK, message="bye", terminate=True)
