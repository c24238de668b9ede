"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    ConnectCommand,
    DownloadAllCommand,
    DownloadCommand,
    ListCommand,
    RefreshCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Connect/List/Refresh/Download/DownloadAll)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "connect":
        return _parse_connect(tokens[1:])
    elif command_name == "ls":
        return _parse_no_args(tokens[1:], "ls", ListCommand)
    elif command_name == "refresh":
        return _parse_no_args(tokens[1:], "refresh", RefreshCommand)
    elif command_name == "download":
        return _parse_download(tokens[1:])
    elif command_name == "download-all":
        return _parse_download_all(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_connect(args: list[str]) -> ConnectCommand:
    """Parse 'connect <ip|url> [port]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("connect requires 1 or 2 arguments: <ip|url> [port]")

    port = None
    if len(args) == 2:
        try:
            port = int(args[1])
        except ValueError:
            raise ParseError(f"Invalid port: {args[1]}")
        if not 0 < port <= 65535:
            raise ParseError(f"Invalid port: {args[1]}")

    return ConnectCommand(target=args[0], port=port)


def _parse_no_args(args: list[str], name: str, command_type):
    if args:
        raise ParseError(f"{name} takes no arguments")
    return command_type()


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <filename> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("download requires 1 or 2 arguments: <filename> [output_path]")

    filename = args[0]
    output_path = args[1] if len(args) > 1 else None

    return DownloadCommand(filename=filename, output_path=output_path)


def _parse_download_all(args: list[str]) -> DownloadAllCommand:
    """Parse 'download-all [output_path]' command."""
    if len(args) > 1:
        raise ParseError("download-all takes at most 1 argument: [output_path]")

    return DownloadAllCommand(output_path=args[0] if args else None)
