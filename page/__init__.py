"""
page — an age-encrypted secret store
Every secret is its own armored age file inside one directory; a single
X25519 keypair protects them all.

Layers, leaves first:
1. Keys — X25519 identity/recipient, Bech32 text form, key files
2. Envelope — seal/open in the age v1 format with ASCII armor
3. Store — list/exists/read/write/remove over a directory of envelopes

Usage:
    from page import Store, generate_identity
    identity = generate_identity()
    store = Store("~/secrets", identity=identity, recipient=identity.recipient())
    store.write("example.com", b"user\\npass123\\n")
"""

from page.config import Config
from page.envelope import seal, open as open_envelope
from page.errors import (
    PageError,
    StoreError,
    StoreUnavailable,
    EntryNotFound,
    EntryExists,
    InvalidEntryName,
    KeyMaterialError,
    MissingIdentity,
    MissingRecipient,
    MissingKeyFile,
    KeyFileExists,
    KeyFileError,
    KeyParseError,
    CryptoError,
    EncryptionError,
    DecryptionError,
    ArmorError,
    NoIdentityMatchError,
    IntegrityError,
)
from page.keys import (
    Identity,
    Recipient,
    generate_identity,
    parse_identity,
    parse_recipient,
    load_identity,
    load_recipient,
    write_keypair,
)
from page.store import Store

__version__ = "0.4.0"
__all__ = [
    "Config",
    "Store",
    "Identity",
    "Recipient",
    "generate_identity",
    "parse_identity",
    "parse_recipient",
    "load_identity",
    "load_recipient",
    "write_keypair",
    "seal",
    "open_envelope",
    "PageError",
    "StoreError",
    "StoreUnavailable",
    "EntryNotFound",
    "EntryExists",
    "InvalidEntryName",
    "KeyMaterialError",
    "MissingIdentity",
    "MissingRecipient",
    "MissingKeyFile",
    "KeyFileExists",
    "KeyFileError",
    "KeyParseError",
    "CryptoError",
    "EncryptionError",
    "DecryptionError",
    "ArmorError",
    "NoIdentityMatchError",
    "IntegrityError",
]
