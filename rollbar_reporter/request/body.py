from __future__ import annotations

import json
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from starlette.datastructures import Headers
from starlette.formparsers import FormParser, MultiPartParser

JSON_MEDIA_TYPE = "application/json"
URLENCODED_MEDIA_TYPE = "application/x-www-form-urlencoded"
MULTIPART_MEDIA_TYPE = "multipart/form-data"


@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class ParsedBody:
    value: Any


DecodedBody = TextBody | ParsedBody


def media_type(content_type: str | None) -> str | None:
    """Return the primary media type of a Content-Type header, lower-cased."""
    if not content_type:
        return None
    primary = content_type.split(";", 1)[0].strip().lower()
    return primary or None


async def _read_all(stream: AsyncIterator[bytes]) -> bytes:
    chunks = [chunk async for chunk in stream]
    return b"".join(chunks)


async def _terminated(stream: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    # FormParser only flushes its last field when it sees an empty chunk.
    async for chunk in stream:
        yield chunk
    yield b""


async def _parse_form(stream: AsyncIterator[bytes], content_type: str | None, kind: str | None) -> dict[str, str]:
    # The full header is passed on so multipart keeps its boundary parameter.
    headers = Headers({"content-type": content_type or ""})
    parser: FormParser | MultiPartParser
    if kind == MULTIPART_MEDIA_TYPE:
        parser = MultiPartParser(headers, _terminated(stream))
    else:
        parser = FormParser(headers, _terminated(stream))

    form = await parser.parse()
    try:
        # Uploaded files are dropped; only plain string fields are reported.
        return {key: value for key, value in form.multi_items() if isinstance(value, str)}
    finally:
        await form.close()


async def decode_body(stream: AsyncIterator[bytes], content_type: str | None) -> DecodedBody:
    """
    Drain a request body stream and decode it according to its content type.

    JSON bodies are parsed (malformed JSON raises), url-encoded and multipart
    forms become a field mapping, and anything else is returned as text.
    The stream is consumed exactly once.
    """
    kind = media_type(content_type)

    if kind == JSON_MEDIA_TYPE:
        return ParsedBody(json.loads(await _read_all(stream)))

    if kind in {URLENCODED_MEDIA_TYPE, MULTIPART_MEDIA_TYPE}:
        return ParsedBody(await _parse_form(stream, content_type, kind))

    raw = await _read_all(stream)
    return TextBody(raw.decode("utf-8", errors="replace"))
