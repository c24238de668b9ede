"""Custom completer for the PyShare CLI with remote file name completion."""

import shlex
from typing import Callable, Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS


class PyShareCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Remote file name completion for the 'download' command
    """

    def __init__(self, file_names: Callable[[], List[str]]):
        """
        Args:
            file_names: Returns the names in the current peer's manifest
        """
        self._file_names = file_names

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "download":
            return

        # Only the first argument names a remote file.
        argument_count = len(tokens) - 1 if not is_typing_new_token else len(tokens)
        if argument_count > 1:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_file_names(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_file_names(self, partial: str) -> Iterable[Completion]:
        names = self._file_names()
        if not names:
            yield Completion(
                "",
                start_position=0,
                display="(no files - connect to a device first)",
            )
            return

        partial_lower = partial.lower().lstrip("\"'")
        for name in sorted(names):
            if name.lower().startswith(partial_lower):
                yield Completion(shlex.quote(name), start_position=-len(partial), display=name)
