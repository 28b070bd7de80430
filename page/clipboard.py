"""
Clipboard
Copy text to the system clipboard. Under WSL the Windows clip.exe is
used directly; everywhere else pyperclip picks the platform mechanism.
"""

import subprocess
from pathlib import Path

import pyperclip

from page.errors import ClipboardError

WSL_CLIP_PATH = "/mnt/c/Windows/system32/clip.exe"
OSRELEASE_PATH = Path("/proc/sys/kernel/osrelease")


def is_wsl() -> bool:
    try:
        release = OSRELEASE_PATH.read_text()
    except OSError:
        return False
    return "microsoft" in release.lower()


def copy(text: str) -> None:
    """
    Put text on the clipboard.

    Raises:
        ClipboardError: No clipboard is available or copying failed.
    """
    if is_wsl():
        try:
            subprocess.run([WSL_CLIP_PATH], input=text.encode("utf-8"), check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise ClipboardError(f"clip.exe failed: {exc}") from exc
        return

    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        raise ClipboardError(str(exc)) from exc
