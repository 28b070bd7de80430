"""
Keys — X25519 identities and recipients
One keypair protects every entry in the store.

An Identity is the private half: it opens envelopes.
A Recipient is the public half: it seals envelopes.
The recipient is always derivable from the identity.

Text encodings are Bech32, compatible with age-keygen:
  identity   AGE-SECRET-KEY-1...   (upper case)
  recipient  age1...               (lower case)

Key files:
  privkey     age-keygen style; '#' comments and blank lines are ignored,
              the last remaining line is the key. Mode 0600.
  recipients  one line holding the public key. Mode 0644.
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path

import bech32
from cryptography.hazmat.primitives.asymmetric import x25519

from page.errors import KeyFileError, KeyFileExists, KeyParseError, MissingKeyFile


IDENTITY_HRP = "age-secret-key-"
RECIPIENT_HRP = "age"
KEY_SIZE = 32

IDENTITY_FILE_MODE = 0o600
RECIPIENT_FILE_MODE = 0o644
KEY_DIR_MODE = 0o700


def _encode(hrp: str, raw: bytes) -> str:
    data = bech32.convertbits(raw, 8, 5)
    return bech32.bech32_encode(hrp, data)


def _decode(expected_hrp: str, text: str) -> bytes:
    hrp, data = bech32.bech32_decode(text)
    if hrp is None:
        raise KeyParseError("malformed key: invalid Bech32 encoding")
    if hrp != expected_hrp:
        raise KeyParseError(f"malformed key: unexpected type {hrp!r}")
    raw = bech32.convertbits(data, 5, 8, False)
    if raw is None or len(raw) != KEY_SIZE:
        raise KeyParseError("malformed key: wrong key length")
    return bytes(raw)


@dataclass(frozen=True)
class Recipient:
    """Public X25519 key that envelopes are sealed to."""
    public_bytes: bytes

    def __post_init__(self):
        if len(self.public_bytes) != KEY_SIZE:
            raise KeyParseError(f"recipient must be {KEY_SIZE} bytes, got {len(self.public_bytes)}")

    def public_key(self) -> x25519.X25519PublicKey:
        return x25519.X25519PublicKey.from_public_bytes(self.public_bytes)

    def encode(self) -> str:
        return _encode(RECIPIENT_HRP, self.public_bytes)

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True, repr=False)
class Identity:
    """Private X25519 key that opens envelopes."""
    private_bytes: bytes

    def __post_init__(self):
        if len(self.private_bytes) != KEY_SIZE:
            raise KeyParseError(f"identity must be {KEY_SIZE} bytes, got {len(self.private_bytes)}")

    def __repr__(self) -> str:
        # Never leak the scalar into logs or tracebacks
        return f"Identity(recipient={self.recipient().encode()!r})"

    def private_key(self) -> x25519.X25519PrivateKey:
        return x25519.X25519PrivateKey.from_private_bytes(self.private_bytes)

    def recipient(self) -> Recipient:
        """Derive the matching public recipient."""
        return Recipient(self.private_key().public_key().public_bytes_raw())

    def encode(self) -> str:
        return _encode(IDENTITY_HRP, self.private_bytes).upper()


def generate_identity() -> Identity:
    """Generate a fresh random identity."""
    return Identity(x25519.X25519PrivateKey.generate().private_bytes_raw())


def parse_identity(text: str) -> Identity:
    """Parse an AGE-SECRET-KEY-1... string."""
    text = text.strip()
    if not text.upper().startswith(IDENTITY_HRP.upper()):
        raise KeyParseError("malformed secret key: unknown type")
    return Identity(_decode(IDENTITY_HRP, text))


def parse_recipient(text: str) -> Recipient:
    """Parse an age1... string."""
    text = text.strip()
    if not text.startswith(RECIPIENT_HRP + "1"):
        raise KeyParseError("malformed recipient: unknown type")
    return Recipient(_decode(RECIPIENT_HRP, text))


def _last_key_line(content: str) -> str:
    """Return the last line that is neither blank nor a '#' comment."""
    key = ""
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key = line
    return key


def _read_key_file(path: Path, kind: str) -> str:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise MissingKeyFile(path, kind) from exc
    except UnicodeDecodeError as exc:
        raise KeyParseError(f"{kind} file {path} is not valid UTF-8") from exc
    except OSError as exc:
        raise KeyFileError(path, kind, exc.strerror or str(exc)) from exc

    key = _last_key_line(content)
    if not key:
        raise KeyParseError(f"{kind} file {path} contains no key")
    return key


def load_identity(path: str | Path) -> Identity:
    """
    Load the identity from a private key file.

    Raises:
        MissingKeyFile: The file does not exist.
        KeyFileError: The file exists but cannot be read.
        KeyParseError: The file holds no valid identity.
    """
    path = Path(path)
    key = _read_key_file(path, "private key")
    try:
        return parse_identity(key)
    except KeyParseError as exc:
        raise KeyParseError(f"error parsing private key file {path}: {exc}") from exc


def load_recipient(path: str | Path) -> Recipient:
    """
    Load the recipient from a public key file.

    Raises:
        MissingKeyFile: The file does not exist.
        KeyFileError: The file exists but cannot be read.
        KeyParseError: The file holds no valid recipient.
    """
    path = Path(path)
    key = _read_key_file(path, "recipients")
    try:
        return parse_recipient(key)
    except KeyParseError as exc:
        raise KeyParseError(f"error parsing recipients file {path}: {exc}") from exc


def _write_exclusive(path: Path, content: str, mode: int) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
    except BaseException:
        path.unlink(missing_ok=True)
        raise


def write_keypair(identity: Identity, identity_path: str | Path, recipient_path: str | Path) -> Recipient:
    """
    Persist a keypair as two files. Neither file may already exist.

    The identity file is written age-keygen style with a creation
    timestamp and the public key as comments.

    Returns:
        The recipient that was written.

    Raises:
        KeyFileExists: Either key file is already present.
        KeyFileError: A key file could not be written. Nothing is left behind.
    """
    identity_path = Path(identity_path)
    recipient_path = Path(recipient_path)
    for path in (identity_path, recipient_path):
        if path.exists():
            raise KeyFileExists(path)

    recipient = identity.recipient()
    created = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

    _write_key_file(
        identity_path,
        "private key",
        f"# created: {created}\n"
        f"# public key: {recipient.encode()}\n"
        f"{identity.encode()}\n",
        IDENTITY_FILE_MODE,
    )
    try:
        _write_key_file(recipient_path, "recipients", f"{recipient.encode()}\n", RECIPIENT_FILE_MODE)
    except BaseException:
        # Never leave half a keypair on disk
        identity_path.unlink(missing_ok=True)
        raise

    return recipient


def _write_key_file(path: Path, kind: str, content: str, mode: int) -> None:
    try:
        path.parent.mkdir(mode=KEY_DIR_MODE, parents=True, exist_ok=True)
        _write_exclusive(path, content, mode)
    except FileExistsError as exc:
        raise KeyFileExists(path) from exc
    except OSError as exc:
        raise KeyFileError(path, kind, exc.strerror or str(exc)) from exc
