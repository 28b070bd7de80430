"""
Tests for sealing and opening envelopes.
Round trips, wrong-key rejection, tamper detection.
"""

import os

import pytest

from page import envelope
from page.armor import armor, dearmor
from page.errors import (
    ArmorError,
    DecryptionError,
    EncryptionError,
    IntegrityError,
    NoIdentityMatchError,
)
from page.keys import Recipient


@pytest.mark.parametrize("size", [
    0,
    1,
    100,
    envelope.CHUNK_SIZE - 1,
    envelope.CHUNK_SIZE,
    envelope.CHUNK_SIZE + 1,
    3 * envelope.CHUNK_SIZE + 17,
])
def test_round_trip(identity, recipient, size):
    """open(seal(P)) == P across chunk boundaries."""
    plaintext = os.urandom(size)
    sealed = envelope.seal(plaintext, recipient)
    assert envelope.open(sealed, identity) == plaintext


def test_sealed_envelope_is_armored_text(recipient):
    sealed = envelope.seal(b"user\npass123\n", recipient)
    assert sealed.startswith(b"-----BEGIN AGE ENCRYPTED FILE-----\n")
    assert sealed.endswith(b"-----END AGE ENCRYPTED FILE-----\n")
    sealed.decode("ascii")
    assert b"pass123" not in sealed


def test_binary_envelope_layout(recipient):
    """age v1 header: version line, one X25519 stanza, MAC line."""
    data = dearmor(envelope.seal(b"secret", recipient))
    lines = data.split(b"\n")
    assert lines[0] == b"age-encryption.org/v1"
    assert lines[1].startswith(b"-> X25519 ")
    assert len(lines[2]) == 43
    assert lines[3].startswith(b"--- ")


def test_sealing_is_randomized(recipient):
    assert envelope.seal(b"same", recipient) != envelope.seal(b"same", recipient)


def test_wrong_identity_rejected(recipient, other_identity):
    sealed = envelope.seal(b"for someone else", recipient)
    with pytest.raises(NoIdentityMatchError):
        envelope.open(sealed, other_identity)


def test_wrong_identity_is_a_decryption_error(recipient, other_identity):
    sealed = envelope.seal(b"x", recipient)
    with pytest.raises(DecryptionError):
        envelope.open(sealed, other_identity)


def test_every_flipped_byte_is_detected(identity, recipient):
    """No single-byte change yields plaintext, altered or not."""
    sealed = envelope.seal(b"user\npass123\n", recipient)
    for i in range(len(sealed)):
        tampered = bytearray(sealed)
        tampered[i] ^= 0x01
        with pytest.raises(DecryptionError):
            envelope.open(bytes(tampered), identity)


def test_payload_tamper_is_integrity_error(identity, recipient):
    data = bytearray(dearmor(envelope.seal(b"a" * 1000, recipient)))
    data[-5] ^= 0xFF
    with pytest.raises(IntegrityError):
        envelope.open(armor(bytes(data)), identity)


def test_header_mac_tamper_is_integrity_error(identity, recipient):
    data = dearmor(envelope.seal(b"abc", recipient))
    header, _, rest = data.partition(b"\n--- ")
    mac_line, _, payload = rest.partition(b"\n")
    other_mac = envelope._b64encode(bytes(32))
    forged = header + b"\n--- " + other_mac + b"\n" + payload
    with pytest.raises(IntegrityError, match="MAC"):
        envelope.open(armor(forged), identity)


def test_truncated_payload(identity, recipient):
    data = dearmor(envelope.seal(os.urandom(envelope.CHUNK_SIZE + 10), recipient))
    with pytest.raises(IntegrityError):
        envelope.open(armor(data[:-20]), identity)


def test_dropped_final_chunk(identity, recipient):
    """Cutting at a chunk boundary must not pass as a shorter message."""
    data = dearmor(envelope.seal(os.urandom(envelope.CHUNK_SIZE + 10), recipient))
    cut = len(data) - (10 + envelope.TAG_SIZE)
    with pytest.raises(IntegrityError):
        envelope.open(armor(data[:cut]), identity)


def test_malformed_armor(identity):
    with pytest.raises(ArmorError):
        envelope.open(b"not an envelope", identity)


def test_unarmored_envelope_rejected(identity, recipient):
    data = dearmor(envelope.seal(b"abc", recipient))
    with pytest.raises(ArmorError):
        envelope.open(data, identity)


def test_unknown_version(identity, recipient):
    data = dearmor(envelope.seal(b"abc", recipient))
    data = data.replace(b"age-encryption.org/v1", b"age-encryption.org/v2", 1)
    with pytest.raises(IntegrityError, match="version"):
        envelope.open(armor(data), identity)


def test_unknown_stanza_type_means_no_match(identity, recipient):
    data = dearmor(envelope.seal(b"abc", recipient))
    data = data.replace(b"-> X25519 ", b"-> scrypt ", 1)
    with pytest.raises(NoIdentityMatchError):
        envelope.open(armor(data), identity)


def test_seal_rejects_non_recipient():
    with pytest.raises(EncryptionError):
        envelope.seal(b"abc", "age1notarecipient")


def test_seal_rejects_low_order_recipient():
    """The all-zero point gives an all-zero shared secret."""
    with pytest.raises(EncryptionError):
        envelope.seal(b"abc", Recipient(bytes(32)))
