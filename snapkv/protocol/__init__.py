"""Protocol module for snapkv."""

from .commands import Command, CommandType, Response, ResponseStatus
from .parser import ARITY, ProtocolParser, parse, quote_token

__all__ = [
    "ARITY",
    "Command",
    "CommandType",
    "Response",
    "ResponseStatus",
    "ProtocolParser",
    "parse",
    "quote_token",
]
