# ─────────────────────────────────────────────────────────────────────────────
# Encoding Utilities — data URLs, base64, image verification
# ─────────────────────────────────────────────────────────────────────────────


import base64
import binascii
import io
import re
from dataclasses import dataclass

import PIL.Image

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


@dataclass(frozen=True)
class InlineImage:
    """Decoded image attached to a generation request."""

    mime_type: str
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def parse_data_url(value: str) -> InlineImage:
    """Split ``data:<mime>;base64,<data>`` into MIME type and raw bytes.

    Raises:
        ValueError: if the string is not a base64 data URL.
    """
    match = _DATA_URL_RE.match(value.strip())
    if match is None:
        raise ValueError("must be a data URL of the form data:<mime>;base64,<data>")
    try:
        raw = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise ValueError("contains invalid base64 data") from e
    return InlineImage(mime_type=match.group("mime").lower(), data=raw)


def to_data_url(data: bytes | str, mime_type: str = "image/png") -> str:
    """Build a data URL from raw bytes or an already-encoded base64 string."""
    encoded = data if isinstance(data, str) else encode_bytes(data)
    return f"data:{mime_type};base64,{encoded}"


def encode_bytes(data: bytes) -> str:
    """Encode raw bytes to an ASCII base64 string."""
    return base64.b64encode(data).decode("ascii")


def decode_base64(data: str) -> bytes:
    """Decode a base64 string, rejecting non-alphabet characters."""
    return base64.b64decode(data, validate=True)


def verify_image(data: bytes) -> str:
    """Check that bytes decode as an image and return its format (e.g. 'PNG').

    Raises:
        ValueError: if Pillow cannot identify or verify the image.
    """
    try:
        with PIL.Image.open(io.BytesIO(data)) as img:
            img.verify()
            return str(img.format)
    except (PIL.UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError("is not a readable image") from e
