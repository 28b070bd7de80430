"""
Store — Encrypted Entry Storage
A directory of secrets, one armored envelope per file.

Each entry is an individual file named after the entry. Its content is
an envelope sealed to the store's recipient; only the matching identity
can read it back.

  store/
    example.com        # -----BEGIN AGE ENCRYPTED FILE----- ...
    mail/              # not an entry: subdirectories are skipped

The store is a handle, not state: it holds a path plus the keys it was
given, and every operation goes straight to disk. Reading needs an
identity, writing needs a recipient; listing and removing need neither.

Writes go to a temporary file in the same directory which is renamed
over the entry, so a crash never leaves a truncated envelope behind.
Entry files are always mode 0600, whatever the umask.
"""

import logging
import os
import tempfile
from pathlib import Path

from page import envelope
from page.config import Config
from page.errors import (
    EntryExists,
    EntryNotFound,
    InvalidEntryName,
    MissingIdentity,
    MissingRecipient,
    StoreUnavailable,
)
from page.keys import Identity, Recipient

logger = logging.getLogger(__name__)

ENTRY_MODE = 0o600
STORE_DIR_MODE = 0o700
TMP_PREFIX = ".page-tmp-"


def validate_entry_name(entry: str) -> None:
    """
    Reject identifiers that would escape the store directory or collide
    with in-flight temporary files.
    """
    if not entry:
        raise InvalidEntryName(entry, "empty name")
    if entry in (".", ".."):
        raise InvalidEntryName(entry, "reserved name")
    if "/" in entry or os.sep in entry or (os.altsep and os.altsep in entry):
        raise InvalidEntryName(entry, "contains a path separator")
    if "\x00" in entry:
        raise InvalidEntryName(entry, "contains a NUL byte")
    if entry.startswith(TMP_PREFIX):
        raise InvalidEntryName(entry, f"names starting with {TMP_PREFIX!r} are reserved")


class Store:
    """
    Flat collection of encrypted entries inside one directory.

    Args:
        path: The store directory.
        identity: Private key for reading entries. Optional.
        recipient: Public key for writing entries. Optional.
    """

    def __init__(self, path: str | Path, identity: Identity = None, recipient: Recipient = None):
        self.path = Path(path)
        self.identity = identity
        self.recipient = recipient

    @classmethod
    def from_config(cls, config: Config, identity: Identity = None, recipient: Recipient = None) -> "Store":
        return cls(config.store_path, identity=identity, recipient=recipient)

    def __repr__(self) -> str:
        return (
            f"Store({str(self.path)!r}, identity={self.identity is not None}, "
            f"recipient={self.recipient is not None})"
        )

    def _entry_path(self, entry: str) -> Path:
        validate_entry_name(entry)
        return self.path / entry

    def init(self) -> None:
        """Create the store directory (owner-only) if it is missing."""
        try:
            self.path.mkdir(mode=STORE_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(self.path, f"cannot create directory: {exc.strerror or exc}") from exc

    def list(self) -> list[str]:
        """
        List entry names in directory order (unsorted).

        Only regular files are entries. Subdirectories and other
        non-regular files are skipped with a warning.

        Raises:
            StoreUnavailable: The directory is missing or unreadable.
        """
        entries = []
        try:
            with os.scandir(self.path) as it:
                for child in it:
                    if child.name.startswith(TMP_PREFIX):
                        logger.debug("skipping leftover temporary file %s", child.name)
                        continue
                    if not child.is_file():
                        logger.warning("skipping %s: not a regular file", child.path)
                        continue
                    entries.append(child.name)
        except OSError as exc:
            raise StoreUnavailable(self.path, exc.strerror or str(exc)) from exc
        return entries

    def exists(self, entry: str) -> bool:
        """True if entry is one of list()."""
        return entry in self.list()

    def read(self, entry: str) -> bytes:
        """
        Decrypt and return the content of an entry.

        Raises:
            EntryNotFound: No such entry.
            MissingIdentity: The store was opened without an identity.
            DecryptionError: The entry is corrupt or sealed to another key.
        """
        path = self._entry_path(entry)
        if not self.exists(entry):
            raise EntryNotFound(entry)
        if self.identity is None:
            raise MissingIdentity("read")

        try:
            sealed = path.read_bytes()
        except FileNotFoundError as exc:
            raise EntryNotFound(entry) from exc
        except OSError as exc:
            raise StoreUnavailable(self.path, f"cannot read {entry}: {exc.strerror}") from exc

        logger.debug("opening entry %s (%d bytes)", entry, len(sealed))
        return envelope.open(sealed, self.identity)

    def write(self, entry: str, content: bytes) -> None:
        """
        Encrypt content and store it as entry, replacing any previous
        content entirely.

        Raises:
            MissingRecipient: The store was opened without a recipient.
            EncryptionError: Sealing failed.
            StoreUnavailable: The file could not be written.
        """
        path = self._entry_path(entry)
        if self.recipient is None:
            raise MissingRecipient("write")

        sealed = envelope.seal(content, self.recipient)
        self._write_atomic(path, sealed)
        logger.debug("wrote entry %s (%d bytes sealed)", entry, len(sealed))

    def create(self, entry: str, content: bytes) -> None:
        """Like write(), but refuse to replace an existing entry."""
        self._entry_path(entry)
        if self.exists(entry):
            raise EntryExists(entry)
        self.write(entry, content)

    def remove(self, entry: str) -> None:
        """
        Delete an entry. Immediate and irreversible.

        Raises:
            EntryNotFound: No such entry.
        """
        path = self._entry_path(entry)
        if not self.exists(entry):
            raise EntryNotFound(entry)

        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise EntryNotFound(entry) from exc
        except OSError as exc:
            raise StoreUnavailable(self.path, f"cannot remove {entry}: {exc.strerror}") from exc
        logger.debug("removed entry %s", entry)

    def _write_atomic(self, path: Path, data: bytes) -> None:
        try:
            fd, tmp = tempfile.mkstemp(prefix=TMP_PREFIX, dir=self.path)
        except OSError as exc:
            raise StoreUnavailable(self.path, exc.strerror or str(exc)) from exc

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp, ENTRY_MODE)
            os.replace(tmp, path)
        except OSError as exc:
            _discard(tmp)
            raise StoreUnavailable(self.path, f"cannot write {path.name}: {exc.strerror}") from exc
        except BaseException:
            _discard(tmp)
            raise


def _discard(tmp: str) -> None:
    try:
        os.unlink(tmp)
    except FileNotFoundError:
        pass
