"""Lenient decoding of job payload and result blobs.

The backend stores payloads as raw bytes, so they usually arrive base64
encoded, but older producers push plain JSON text or already structured
objects. Decoding never fails: anything that cannot be interpreted comes
back as the raw value.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

import orjson


class PayloadCodec:
    @staticmethod
    def decode(blob: Any) -> Any:
        if blob is None:
            return None
        if isinstance(blob, (bytes, bytearray)):
            blob = bytes(blob).decode("utf-8", errors="replace")
        if isinstance(blob, str):
            decoded = PayloadCodec._from_base64_json(blob)
            if decoded is not _UNDECODABLE:
                return decoded
            try:
                return _loads(blob)
            except ValueError:
                return blob
        try:
            # already structured, make sure it survives a JSON round trip
            return _loads(_dumps(blob))
        except (TypeError, ValueError):
            return str(blob)

    @staticmethod
    def render(blob: Any) -> str:
        if blob is None or blob == "":
            return "No data"
        value = PayloadCodec.decode(blob)
        if isinstance(value, str) and value == blob:
            return value
        try:
            return _dumps(value, pretty=True)
        except (TypeError, ValueError):
            return str(value)

    @staticmethod
    def _from_base64_json(text: str) -> Any:
        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError):
            return _UNDECODABLE
        try:
            return _loads(raw)
        except ValueError:
            return _UNDECODABLE


_UNDECODABLE = object()


def _loads(data: str | bytes) -> Any:
    # orjson reads integers beyond 64 bits as floats; json keeps them exact
    try:
        value = orjson.loads(data)
    except orjson.JSONDecodeError:
        return json.loads(data)
    if _has_float(value):
        return json.loads(data)
    return value


def _dumps(value: Any, pretty: bool = False) -> str:
    try:
        return orjson.dumps(value, option=orjson.OPT_INDENT_2 if pretty else None).decode()
    except TypeError:
        # orjson rejects integers beyond 64 bits
        return json.dumps(value, indent=2 if pretty else None)


def _has_float(value: Any) -> bool:
    if isinstance(value, float):
        return True
    if isinstance(value, dict):
        return any(_has_float(item) for item in value.values())
    if isinstance(value, list):
        return any(_has_float(item) for item in value)
    return False
