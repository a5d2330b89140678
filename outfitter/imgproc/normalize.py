"""Image decoding and normalisation helpers."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from outfitter.services.errors import ValidationError

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.-]+)*;base64,(?P<data>.*)$", re.S)


@dataclass(slots=True)
class DecodedImage:
    """Raw image bytes with their declared content type."""

    data: bytes
    content_type: str

    @property
    def extension(self) -> str:
        return self.content_type.split("/")[-1] or "png"


def decode_data_uri(data_uri: str, default_type: str = "image/png") -> DecodedImage:
    """Split a ``data:<mime>;base64,<payload>`` URI into bytes and content type."""

    match = _DATA_URI_RE.match(data_uri or "")
    if not match:
        raise ValidationError("Invalid data URI for upload.")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid data URI for upload.") from exc
    if not data:
        raise ValidationError("Invalid data URI for upload.")
    return DecodedImage(data=data, content_type=match.group("mime") or default_type)


def to_data_uri(data: bytes, content_type: str) -> str:
    """Encode bytes as a base64 data URI."""

    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def image_as_png(data: bytes) -> bytes:
    """Re-encode arbitrary image bytes as RGBA PNG."""

    try:
        with Image.open(BytesIO(data)) as img:
            img = img.convert("RGBA")
            buffer = BytesIO()
            img.save(buffer, format="PNG")
    except UnidentifiedImageError as exc:
        raise ValidationError("Unsupported image format.") from exc
    return buffer.getvalue()
