"""Tests for clipboard selection."""

import subprocess

import pytest

from page import clipboard
from page.errors import ClipboardError


def test_pyperclip_outside_wsl(monkeypatch):
    copied = []
    monkeypatch.setattr(clipboard, "is_wsl", lambda: False)
    monkeypatch.setattr(clipboard.pyperclip, "copy", copied.append)
    clipboard.copy("secret\n")
    assert copied == ["secret\n"]


def test_pyperclip_failure(monkeypatch):
    def broken(text):
        raise clipboard.pyperclip.PyperclipException("no clipboard")

    monkeypatch.setattr(clipboard, "is_wsl", lambda: False)
    monkeypatch.setattr(clipboard.pyperclip, "copy", broken)
    with pytest.raises(ClipboardError, match="no clipboard"):
        clipboard.copy("x")


def test_clip_exe_under_wsl(monkeypatch):
    runs = []

    def fake_run(cmd, input=None, check=False):
        runs.append((cmd, input, check))
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(clipboard, "is_wsl", lambda: True)
    monkeypatch.setattr(clipboard.subprocess, "run", fake_run)
    clipboard.copy("secret")
    assert runs == [([clipboard.WSL_CLIP_PATH], b"secret", True)]


def test_clip_exe_missing(monkeypatch):
    def fake_run(cmd, input=None, check=False):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(clipboard, "is_wsl", lambda: True)
    monkeypatch.setattr(clipboard.subprocess, "run", fake_run)
    with pytest.raises(ClipboardError):
        clipboard.copy("x")


def test_is_wsl_reads_osrelease(monkeypatch, tmp_path):
    release = tmp_path / "osrelease"
    release.write_text("5.15.90.1-microsoft-standard-WSL2\n")
    monkeypatch.setattr(clipboard, "OSRELEASE_PATH", release)
    assert clipboard.is_wsl()

    release.write_text("6.8.0-generic\n")
    assert not clipboard.is_wsl()

    monkeypatch.setattr(clipboard, "OSRELEASE_PATH", tmp_path / "missing")
    assert not clipboard.is_wsl()
