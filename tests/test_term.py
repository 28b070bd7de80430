"""Tests for the y/n prompt and raw terminal mode."""

import io

import pytest

from page import term


class FakeTTY(io.StringIO):
    def isatty(self):
        return True

    def fileno(self):
        return 99


@pytest.mark.parametrize("answer,expected", [
    ("y\n", True),
    ("Y\n", True),
    ("yes\n", True),
    ("n\n", False),
    ("\n", False),
    ("", False),
    ("maybe\n", False),
])
def test_ask_reads_a_line_when_not_a_tty(answer, expected):
    stderr = io.StringIO()
    assert term.ask("remove entry x?", stdin=io.StringIO(answer), stderr=stderr) is expected
    assert stderr.getvalue() == "remove entry x? [y/N] "


@pytest.fixture
def fake_terminal(monkeypatch):
    """Record raw-mode transitions instead of touching a real terminal."""
    calls = []
    monkeypatch.setattr(term.termios, "tcgetattr", lambda fd: ["saved", fd])
    monkeypatch.setattr(term.termios, "tcsetattr", lambda fd, when, attrs: calls.append(("restore", attrs)))
    monkeypatch.setattr(term.tty, "setraw", lambda fd: calls.append(("raw", fd)))
    return calls


def test_ask_single_key_on_tty(monkeypatch, fake_terminal):
    monkeypatch.setattr(term.os, "read", lambda fd, n: b"y")
    assert term.ask("sure?", stdin=FakeTTY(), stderr=io.StringIO())
    assert fake_terminal == [("raw", 99), ("restore", ["saved", 99])]


def test_ctrl_c_restores_terminal_then_interrupts(monkeypatch, fake_terminal):
    monkeypatch.setattr(term.os, "read", lambda fd, n: term.CTRL_C)
    with pytest.raises(KeyboardInterrupt):
        term.ask("sure?", stdin=FakeTTY(), stderr=io.StringIO())
    assert fake_terminal[-1] == ("restore", ["saved", 99])


def test_raw_mode_restored_on_error(fake_terminal):
    with pytest.raises(RuntimeError):
        with term.raw_mode(5):
            raise RuntimeError("boom")
    assert fake_terminal == [("raw", 5), ("restore", ["saved", 5])]


def test_read_secret_uses_getpass(monkeypatch):
    monkeypatch.setattr(term.getpass, "getpass", lambda prompt: f"typed at {prompt}")
    assert term.read_secret("pw: ") == "typed at pw: "
