"""
Errors
Every failure page can report, grouped by what the user has to do about it.

  PageError
  ├── ConfigError            environment does not say where things live
  ├── StoreError
  │   ├── StoreUnavailable   store directory missing or unreadable
  │   ├── EntryNotFound
  │   ├── EntryExists
  │   └── InvalidEntryName
  ├── KeyMaterialError       fix with `page init`
  │   ├── MissingIdentity
  │   ├── MissingRecipient
  │   ├── MissingKeyFile
  │   ├── KeyFileExists
  │   ├── KeyFileError      key file unreadable or unwritable
  │   └── KeyParseError
  ├── CryptoError
  │   ├── EncryptionError
  │   └── DecryptionError
  │       ├── ArmorError
  │       ├── NoIdentityMatchError
  │       └── IntegrityError
  ├── EditorError
  └── ClipboardError
"""


class PageError(Exception):
    """Base class for all page errors."""


class ConfigError(PageError):
    """The environment does not define where the store and keys live."""


# --------- Store ----------

class StoreError(PageError):
    """Base class for entry store errors."""


class StoreUnavailable(StoreError):
    """The store directory cannot be read."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        message = f"store {path} is unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class EntryNotFound(StoreError):
    def __init__(self, entry: str):
        self.entry = entry
        super().__init__(f"entry {entry} does not exist")


class EntryExists(StoreError):
    def __init__(self, entry: str):
        self.entry = entry
        super().__init__(f"entry {entry} already exists")


class InvalidEntryName(StoreError):
    def __init__(self, entry: str, reason: str):
        self.entry = entry
        super().__init__(f"invalid entry name {entry!r}: {reason}")


# --------- Key material ----------

class KeyMaterialError(PageError):
    """Base class for missing or unusable keys. Remedy is usually `page init`."""


class MissingIdentity(KeyMaterialError):
    def __init__(self, operation: str = "read"):
        super().__init__(f"cannot {operation} entry: store has no identity")


class MissingRecipient(KeyMaterialError):
    def __init__(self, operation: str = "write"):
        super().__init__(f"cannot {operation} entry: store has no recipient")


class MissingKeyFile(KeyMaterialError):
    def __init__(self, path, kind: str):
        self.path = path
        self.kind = kind
        super().__init__(f"{kind} file {path} does not exist")


class KeyFileExists(KeyMaterialError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"key file {path} already exists")


class KeyFileError(KeyMaterialError):
    def __init__(self, path, kind: str, reason: str):
        self.path = path
        self.kind = kind
        super().__init__(f"cannot access {kind} file {path}: {reason}")


class KeyParseError(KeyMaterialError):
    """Key text is not a valid encoded identity or recipient."""


# --------- Crypto ----------

class CryptoError(PageError):
    """Base class for envelope errors."""


class EncryptionError(CryptoError):
    """Sealing failed: bad recipient key or cipher failure."""


class DecryptionError(CryptoError):
    """Opening failed. Subclasses say why."""


class ArmorError(DecryptionError):
    """The armor wrapper is malformed."""


class NoIdentityMatchError(DecryptionError):
    """The envelope was not sealed for this identity."""

    def __init__(self, message: str = "no identity matched any of the recipients"):
        super().__init__(message)


class IntegrityError(DecryptionError):
    """Header or payload failed authentication, or is malformed."""


# --------- Collaborators ----------

class EditorError(PageError):
    """The external editor could not be run or exited with an error."""


class ClipboardError(PageError):
    """Nothing is available to copy to the clipboard."""
