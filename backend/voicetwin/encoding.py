"""
Answer payloads for the client speech renderer.

The server never synthesizes audio. The answer text travels as a base64 data
URL whose media type says it is plain text; the client decodes it and speaks
it locally. The response field is still called `audioUrl` for wire
compatibility with existing clients.
"""

from __future__ import annotations

import base64
import binascii

from voicetwin.errors import EncodingError

MEDIA_TYPE = "text/plain;charset=utf-8"
_PREFIX = f"data:{MEDIA_TYPE};base64,"


def encode(answer: str) -> str:
    if not isinstance(answer, str):
        raise EncodingError(f"Answer must be text, got {type(answer).__name__}")
    try:
        raw = answer.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError() from exc
    return _PREFIX + base64.b64encode(raw).decode("ascii")


def decode(payload: str) -> str:
    value = str(payload or "")
    if not value.startswith("data:"):
        raise EncodingError("Payload is not a data URL")

    header, sep, data = value.partition(",")
    if not sep:
        raise EncodingError("Payload has no data section")

    params = [part.strip().lower() for part in header[len("data:"):].split(";")]
    media_type = params[0] if params else ""
    if not media_type.startswith("text/"):
        raise EncodingError(f"Payload media type is not text: {media_type or 'unknown'}")
    if "base64" not in params[1:]:
        raise EncodingError("Payload is not base64 encoded")

    try:
        return base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise EncodingError("Payload is not valid base64 UTF-8 text") from exc
