"""Tests for PyShareCompleter."""

import pytest
from prompt_toolkit.document import Document

from cli.completer import PyShareCompleter
from cli.constants import COMMANDS


@pytest.fixture
def completer():
    """Completer over a fixed remote manifest."""
    return PyShareCompleter(lambda: ['song.mp3', 'notes.txt', 'my file.txt'])


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


def get_completions_display(completer, text):
    """Helper to get list of completion display texts from completer."""
    doc = Document(text, len(text))
    return [c.display_text for c in completer.get_completions(doc, None)]


class TestCommandCompletion:
    """Tests for command name completion."""

    def test_empty_input_shows_all_commands(self, completer):
        completions = get_completions_list(completer, "")
        for cmd in COMMANDS:
            assert cmd in completions

    def test_partial_command_filters(self, completer):
        completions = get_completions_list(completer, "down")
        assert "download" in completions
        assert "download-all" in completions
        assert "connect" not in completions

    def test_command_completion_case_insensitive(self, completer):
        completions = get_completions_list(completer, "CON")
        assert completions == ["connect"]


class TestRemoteFileCompletion:
    """Tests for remote file name completion in the download command."""

    def test_download_shows_remote_files(self, completer):
        completions = get_completions_list(completer, "download ")
        assert "song.mp3" in completions
        assert "notes.txt" in completions

    def test_names_with_spaces_are_quoted(self, completer):
        completions = get_completions_list(completer, "download my")
        assert completions == ["'my file.txt'"]

    def test_partial_name_filters(self, completer):
        completions = get_completions_list(completer, "download so")
        assert completions == ["song.mp3"]

    def test_output_path_is_not_completed(self, completer):
        assert get_completions_list(completer, "download song.mp3 ") == []

    def test_other_commands_do_not_complete_files(self, completer):
        assert get_completions_list(completer, "connect ") == []
        assert get_completions_list(completer, "download-all ") == []

    def test_not_connected_shows_message(self):
        completer = PyShareCompleter(lambda: [])
        displays = get_completions_display(completer, "download ")
        assert any("connect to a device first" in d for d in displays)
