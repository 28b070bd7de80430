"""
Envelope — seal and open entries
Authenticated public-key encryption of a byte string, in the age v1
format with a single X25519 recipient, wrapped in ASCII armor.

Sealing:
  File key    16 random bytes, one per envelope
  Stanza      ephemeral X25519 share + file key wrapped with
              ChaCha20-Poly1305 under HKDF(shared secret)
  Header MAC  HMAC-SHA256 over the header, keyed by HKDF(file key)
  Payload     16-byte nonce, then 64 KiB chunks sealed with
              ChaCha20-Poly1305 under HKDF(file key, nonce)

Opening distinguishes three failures so callers can tell "wrong key"
apart from "corrupted file":
  ArmorError            the armor is malformed
  NoIdentityMatchError  the envelope was sealed for another identity
  IntegrityError        header or payload fails authentication
"""

import base64
import binascii
import os

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.asymmetric import x25519
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from page.armor import armor, dearmor
from page.errors import EncryptionError, IntegrityError, NoIdentityMatchError
from page.keys import Identity, Recipient


VERSION_LINE = b"age-encryption.org/v1"
STANZA_PREFIX = b"-> "
MAC_PREFIX = b"---"
X25519_TYPE = b"X25519"

FILE_KEY_SIZE = 16
PAYLOAD_NONCE_SIZE = 16
CHUNK_SIZE = 64 * 1024
TAG_SIZE = 16
COLUMNS = 64

_X25519_LABEL = b"age-encryption.org/v1/X25519"
_ZERO_NONCE = bytes(12)


def _b64encode(data: bytes) -> bytes:
    """Unpadded standard base64, as used inside the header."""
    return base64.b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    """Strict inverse of _b64encode. Rejects padding and non-canonical input."""
    if b"=" in data or len(data) % 4 == 1:
        raise IntegrityError("malformed header: invalid base64")
    try:
        decoded = base64.b64decode(data + b"=" * (-len(data) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise IntegrityError("malformed header: invalid base64") from exc
    if _b64encode(decoded) != data:
        raise IntegrityError("malformed header: non-canonical base64")
    return decoded


def _hkdf(ikm: bytes, salt: bytes | None, info: bytes) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=32, salt=salt, info=info).derive(ikm)


def _header_mac(file_key: bytes, header: bytes) -> hmac.HMAC:
    h = hmac.HMAC(_hkdf(file_key, None, b"header"), hashes.SHA256())
    h.update(header)
    return h


def _chunk_nonce(counter: int, last: bool) -> bytes:
    return counter.to_bytes(11, "big") + (b"\x01" if last else b"\x00")


# --------- Stanzas ----------

def _wrap_file_key(file_key: bytes, recipient: Recipient) -> tuple[list[bytes], bytes]:
    """Return (stanza args, stanza body) wrapping file_key for recipient."""
    ephemeral = x25519.X25519PrivateKey.generate()
    ephemeral_share = ephemeral.public_key().public_bytes_raw()
    shared = ephemeral.exchange(recipient.public_key())

    salt = ephemeral_share + recipient.public_bytes
    wrap_key = _hkdf(shared, salt, _X25519_LABEL)
    body = ChaCha20Poly1305(wrap_key).encrypt(_ZERO_NONCE, file_key, None)
    return [X25519_TYPE, _b64encode(ephemeral_share)], body


def _unwrap_file_key(args: list[bytes], body: bytes, identity: Identity) -> bytes | None:
    """Return the file key if this stanza was made for identity, else None."""
    if len(args) != 2:
        raise IntegrityError("malformed X25519 stanza: wrong argument count")
    ephemeral_share = _b64decode(args[1])
    if len(ephemeral_share) != 32:
        raise IntegrityError("malformed X25519 stanza: bad share length")
    if len(body) != FILE_KEY_SIZE + TAG_SIZE:
        raise IntegrityError("malformed X25519 stanza: bad body length")

    try:
        shared = identity.private_key().exchange(
            x25519.X25519PublicKey.from_public_bytes(ephemeral_share)
        )
    except ValueError:
        # Low-order share: the exchange yields the all-zero secret
        return None

    salt = ephemeral_share + identity.recipient().public_bytes
    wrap_key = _hkdf(shared, salt, _X25519_LABEL)
    try:
        return ChaCha20Poly1305(wrap_key).decrypt(_ZERO_NONCE, body, None)
    except InvalidTag:
        return None


# --------- Header ----------

def _encode_header(stanzas: list[tuple[list[bytes], bytes]]) -> bytes:
    """Serialize the header up to and including '---' (no MAC)."""
    lines = [VERSION_LINE]
    for args, body in stanzas:
        lines.append(STANZA_PREFIX + b" ".join(args))
        encoded = _b64encode(body)
        for i in range(0, len(encoded), COLUMNS):
            lines.append(encoded[i:i + COLUMNS])
        if len(encoded) % COLUMNS == 0:
            # The final body line must be shorter than a full line
            lines.append(b"")
    lines.append(MAC_PREFIX)
    return b"\n".join(lines)


def _next_line(data: bytes, pos: int) -> tuple[bytes, int]:
    end = data.find(b"\n", pos)
    if end < 0:
        raise IntegrityError("malformed header: unexpected end of header")
    return data[pos:end], end + 1


def _parse_header(data: bytes) -> tuple[list[tuple[list[bytes], bytes]], bytes, bytes, bytes]:
    """
    Split an envelope into its header parts and payload.

    Returns:
        (stanzas, mac, header bytes covered by the MAC, payload)
    """
    line, pos = _next_line(data, 0)
    if line != VERSION_LINE:
        raise IntegrityError("malformed header: unsupported version")

    stanzas = []
    while True:
        line_start = pos
        line, pos = _next_line(data, pos)

        if line.startswith(STANZA_PREFIX):
            args = line[len(STANZA_PREFIX):].split(b" ")
            if not args or not all(args):
                raise IntegrityError("malformed header: empty stanza argument")
            body = b""
            while True:
                body_line, pos = _next_line(data, pos)
                if len(body_line) > COLUMNS:
                    raise IntegrityError("malformed header: stanza body line too long")
                body += body_line
                if len(body_line) < COLUMNS:
                    break
            stanzas.append((args, _b64decode(body)))

        elif line.startswith(MAC_PREFIX + b" "):
            mac = _b64decode(line[len(MAC_PREFIX) + 1:])
            if len(mac) != 32:
                raise IntegrityError("malformed header: bad MAC length")
            covered = data[:line_start + len(MAC_PREFIX)]
            return stanzas, mac, covered, data[pos:]

        else:
            raise IntegrityError("malformed header: unexpected line")


# --------- Payload ----------

def _seal_payload(file_key: bytes, plaintext: bytes) -> bytes:
    nonce = os.urandom(PAYLOAD_NONCE_SIZE)
    aead = ChaCha20Poly1305(_hkdf(file_key, nonce, b"payload"))

    chunks = [plaintext[i:i + CHUNK_SIZE] for i in range(0, len(plaintext), CHUNK_SIZE)] or [b""]
    out = [nonce]
    for counter, chunk in enumerate(chunks):
        last = counter == len(chunks) - 1
        out.append(aead.encrypt(_chunk_nonce(counter, last), chunk, None))
    return b"".join(out)


def _open_payload(file_key: bytes, payload: bytes) -> bytes:
    if len(payload) < PAYLOAD_NONCE_SIZE:
        raise IntegrityError("truncated payload: missing nonce")
    nonce, ciphertext = payload[:PAYLOAD_NONCE_SIZE], payload[PAYLOAD_NONCE_SIZE:]
    aead = ChaCha20Poly1305(_hkdf(file_key, nonce, b"payload"))

    out = []
    counter = 0
    pos = 0
    while True:
        chunk = ciphertext[pos:pos + CHUNK_SIZE + TAG_SIZE]
        pos += len(chunk)
        last = pos >= len(ciphertext)
        if len(chunk) < TAG_SIZE:
            raise IntegrityError("truncated payload")
        try:
            plain = aead.decrypt(_chunk_nonce(counter, last), chunk, None)
        except InvalidTag as exc:
            raise IntegrityError(f"payload chunk {counter} failed authentication") from exc
        if last and not plain and counter > 0:
            raise IntegrityError("payload ends with an empty chunk")
        out.append(plain)
        if last:
            return b"".join(out)
        counter += 1


# --------- Public API ----------

def seal(plaintext: bytes, recipient: Recipient) -> bytes:
    """
    Encrypt plaintext to recipient and armor the result.

    Args:
        plaintext: Any bytes, including empty.
        recipient: The public key to seal to.

    Returns:
        Armored envelope bytes (printable ASCII).

    Raises:
        EncryptionError: The recipient is invalid or encryption failed.
    """
    if not isinstance(recipient, Recipient):
        raise EncryptionError(f"invalid recipient: {type(recipient).__name__}")

    file_key = os.urandom(FILE_KEY_SIZE)
    try:
        stanza = _wrap_file_key(file_key, recipient)
    except ValueError as exc:
        raise EncryptionError(f"invalid recipient {recipient.encode()}: {exc}") from exc

    header = _encode_header([stanza])
    mac = _header_mac(file_key, header).finalize()
    envelope = header + b" " + _b64encode(mac) + b"\n" + _seal_payload(file_key, plaintext)
    return armor(envelope)


def open(envelope: bytes, identity: Identity) -> bytes:
    """
    Reverse seal(): dearmor, unwrap the file key and decrypt.

    Raises:
        ArmorError: The armor is malformed.
        NoIdentityMatchError: No stanza was sealed for identity.
        IntegrityError: The header or payload is malformed or tampered with.
    """
    data = dearmor(envelope)
    stanzas, mac, covered, payload = _parse_header(data)

    file_key = None
    for args, body in stanzas:
        if args[0] != X25519_TYPE:
            continue
        file_key = _unwrap_file_key(args, body, identity)
        if file_key is not None:
            break
    if file_key is None:
        raise NoIdentityMatchError()

    try:
        _header_mac(file_key, covered).verify(mac)
    except InvalidSignature as exc:
        raise IntegrityError("header MAC mismatch") from exc

    return _open_payload(file_key, payload)
