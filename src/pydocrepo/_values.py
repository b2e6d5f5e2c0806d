"""Typed value codec for REST documents.

The REST API wraps every field value in a single-key object naming its
type (``{"integerValue": "42"}``). :func:`decode_value` turns those into
plain Python values; :func:`decode_document` does the same for a whole
document resource.
"""

from __future__ import annotations

import base64
from datetime import datetime
from typing import Any

from pydocrepo.models.document import Document


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp (``2026-01-01T00:00:00.123456Z``)."""
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # datetime.fromisoformat accepts at most microsecond precision.
    if "." in text:
        head, _, tail = text.partition(".")
        digits = ""
        rest = ""
        for index, char in enumerate(tail):
            if not char.isdigit():
                rest = tail[index:]
                break
            digits += char
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    return datetime.fromisoformat(text)


def decode_value(value: dict[str, Any]) -> Any:
    """Decode one typed value object."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return str(value["stringValue"])
    if "timestampValue" in value:
        return parse_timestamp(value["timestampValue"])
    if "bytesValue" in value:
        return base64.b64decode(value["bytesValue"])
    if "referenceValue" in value:
        return str(value["referenceValue"])
    if "geoPointValue" in value:
        point = value["geoPointValue"] or {}
        return {"latitude": float(point.get("latitude", 0.0)), "longitude": float(point.get("longitude", 0.0))}
    if "arrayValue" in value:
        items = (value["arrayValue"] or {}).get("values", [])
        return [decode_value(item) for item in items]
    if "mapValue" in value:
        return decode_fields((value["mapValue"] or {}).get("fields", {}))
    raise ValueError(f"unsupported value type: {sorted(value)}")


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(item) for key, item in fields.items()}


def document_id_from_name(name: str) -> str:
    """Last path segment of a document resource name."""
    return name.rstrip("/").rsplit("/", 1)[-1]


def decode_document(resource: dict[str, Any]) -> Document:
    """Convert a REST document resource into a :class:`Document`."""
    return Document(
        id=document_id_from_name(str(resource.get("name", ""))),
        data=decode_fields(resource.get("fields") or {}),
        create_time=parse_timestamp(resource.get("createTime")),
        update_time=parse_timestamp(resource.get("updateTime")),
    )
