"""
External editor
Hand plaintext to the user's editor through a private temporary file
and read the result back. The temporary file is removed on every path.
"""

import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from page.errors import EditorError

TMP_PREFIX = "page-"


def edit_bytes(editor: str, initial: bytes = b"") -> bytes:
    """
    Run editor on a temporary file holding initial and return what the
    user saved.

    Args:
        editor: Command line of the editor, e.g. "vi" or "code --wait".
        initial: Starting content.

    Raises:
        EditorError: The editor could not be started or exited non-zero.
    """
    command = shlex.split(editor)
    if not command:
        raise EditorError("no editor configured")

    # mkstemp creates the file with mode 0600
    fd, path = tempfile.mkstemp(prefix=TMP_PREFIX)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(initial)

        try:
            result = subprocess.run(command + [path])
        except OSError as exc:
            raise EditorError(f"cannot run editor {editor!r}: {exc}") from exc
        if result.returncode != 0:
            raise EditorError(f"editor {editor!r} exited with status {result.returncode}")

        return Path(path).read_bytes()
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
