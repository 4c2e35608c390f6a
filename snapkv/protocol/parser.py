"""
Protocol Parser Module

This module turns raw command lines into Command objects and renders
responses and errors back into text.
"""

import json
from typing import Dict, List

from .commands import Command, CommandType, Response
from ..errors import EmptyCommandError, KVError, UnknownCommandError, WrongArityError

# Number of arguments each command family takes after the verb
ARITY: Dict[CommandType, int] = {
    CommandType.GET: 1,
    CommandType.SET: 2,
    CommandType.DELETE: 1,
    CommandType.LIST: 0,
    CommandType.EXIT: 0,
}


def quote_token(token: str) -> str:
    """
    Render a key or value as a single whitespace-free token.

    Examples:
        >>> quote_token("plain")
        'plain'
        >>> quote_token("two words")
        '"two words"'
    """
    if token and not token.startswith('"') and not any(ch.isspace() for ch in token):
        return token
    return json.dumps(token, ensure_ascii=False)


class ProtocolParser:
    """
    Parser for the snapkv line protocol.

    Protocol Format:
        Request:  <COMMAND> [ARGS...]\n
        Response: <STATUS> [DATA]\n

    Commands:
        GET <key>            -> OK <value> | ERROR not_found: ...
        SET <key> <value>    -> OK stored | OK updated
        DELETE <key>         -> OK deleted | ERROR not_found: ...
        LIST                 -> OK <count> followed by "<key> <value>" lines
        EXIT                 -> OK bye

    Command names are case-insensitive. Keys and values are taken verbatim
    and cannot contain whitespace. Entries loaded from a snapshot or set
    through the library API can; LIST renders such tokens (and empty or
    double-quoted ones) as JSON strings so each pair stays on one line.
    """

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object representing the parsed request.

        Raises:
            EmptyCommandError: The line has no tokens.
            UnknownCommandError: The verb is not a known command.
            WrongArityError: The verb got the wrong number of arguments.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("SET mykey myvalue")
            >>> cmd.type == CommandType.SET
            True
            >>> cmd.key, cmd.value
            ('mykey', 'myvalue')
        """
        raw = data.strip()
        parts = raw.split()
        if not parts:
            raise EmptyCommandError(raw=raw)

        verb = parts[0].lower()
        try:
            command_type = CommandType(verb)
        except ValueError:
            raise UnknownCommandError(verb, raw=raw) from None

        args = parts[1:]
        self._check_arity(command_type, args, raw)
        return self._build(command_type, args, raw)

    def _check_arity(self, command_type: CommandType, args: List[str], raw: str) -> None:
        expected = ARITY[command_type]
        if len(args) != expected:
            raise WrongArityError(command_type.value, expected, len(args), raw=raw)

    def _build(self, command_type: CommandType, args: List[str], raw: str) -> Command:
        if command_type == CommandType.GET:
            return Command.get(args[0], raw=raw)
        if command_type == CommandType.SET:
            return Command.set(args[0], args[1], raw=raw)
        if command_type == CommandType.DELETE:
            return Command.delete(args[0], raw=raw)
        if command_type == CommandType.LIST:
            return Command.list(raw=raw)
        return Command.exit(raw=raw)

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a protocol string.

        Args:
            response: Response object to format

        Returns:
            Formatted response string WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.stored())
            'OK stored\\n'
            >>> parser.format_response(Response.value_response("hello"))
            'OK hello\\n'
            >>> parser.format_response(Response.listing([("a", "1")]))
            'OK 1\\na 1\\n'
        """
        prefix = response.status.value

        # If value is provided (GET), prefer it; otherwise use message
        if response.value is not None:
            body = response.value
        else:
            body = response.message

        header = f"{prefix} {body}\n" if body else f"{prefix}\n"
        lines = [f"{quote_token(key)} {quote_token(value)}\n" for key, value in response.items]
        return header + "".join(lines)

    def format_error(self, error: KVError) -> str:
        """
        Format an error as a protocol string.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_error(UnknownCommandError("foo"))
            'ERROR unknown_command: unknown command: foo\\n'
        """
        return f"ERROR {error.kind}: {error}\n"


_default_parser = ProtocolParser()


def parse(line: str) -> Command:
    """Parse a single command line with a shared parser instance."""
    return _default_parser.parse_request(line)
