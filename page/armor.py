"""
Armor
Printable wrapping for binary envelopes, the age ASCII armor:

    -----BEGIN AGE ENCRYPTED FILE-----
    <standard base64, padded, 64 columns per line>
    -----END AGE ENCRYPTED FILE-----

Decoding is strict so that every altered byte is detected: lines must be
exactly 64 columns except the last, the base64 must be canonical, and
nothing but a single newline may follow the footer.
"""

import base64
import binascii

from page.errors import ArmorError


HEADER = b"-----BEGIN AGE ENCRYPTED FILE-----"
FOOTER = b"-----END AGE ENCRYPTED FILE-----"
COLUMNS = 64


def armor(data: bytes) -> bytes:
    """Wrap binary data in the text armor."""
    encoded = base64.b64encode(data)
    lines = [HEADER]
    for i in range(0, len(encoded), COLUMNS):
        lines.append(encoded[i:i + COLUMNS])
    lines.append(FOOTER)
    return b"\n".join(lines) + b"\n"


def is_armored(data: bytes) -> bool:
    return data.startswith(HEADER)


def dearmor(text: bytes) -> bytes:
    """
    Remove the text armor and return the binary payload.

    Raises:
        ArmorError: Missing header or footer, bad line lengths,
            invalid or non-canonical base64, or trailing data.
    """
    if not text.startswith(HEADER + b"\n"):
        raise ArmorError("invalid armor: missing header")

    if text.endswith(FOOTER + b"\n"):
        body = text[len(HEADER) + 1:-(len(FOOTER) + 1)]
    elif text.endswith(FOOTER):
        body = text[len(HEADER) + 1:-len(FOOTER)]
    else:
        raise ArmorError("invalid armor: missing footer or trailing data")

    if not body.endswith(b"\n"):
        raise ArmorError("invalid armor: footer is not on its own line")
    lines = body[:-1].split(b"\n")

    for i, line in enumerate(lines):
        last = i == len(lines) - 1
        if not line:
            raise ArmorError("invalid armor: empty line")
        if len(line) > COLUMNS or (not last and len(line) != COLUMNS):
            raise ArmorError(f"invalid armor: line {i + 2} has wrong length")

    encoded = b"".join(lines)
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ArmorError(f"invalid armor: {exc}") from exc

    if base64.b64encode(data) != encoded:
        raise ArmorError("invalid armor: non-canonical base64")
    return data
