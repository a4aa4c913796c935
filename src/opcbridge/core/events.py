"""Normalized change events handed from the crawler to a publisher.

Events follow the dataclass pattern and are immutable once created. The
publisher owns serialization; to_json_bytes() renders the wire document
using the downstream consumer's field names.
"""

import base64
import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to integer milliseconds since the Unix epoch.

    Naive datetimes are interpreted as UTC, which is how OPC-UA
    timestamps are transmitted.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _MILLISECOND


def _json_default(obj: Any) -> Any:
    """Fallback encoder for values json cannot represent natively."""
    if isinstance(obj, datetime):
        return to_epoch_millis(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    return str(obj)


def _finite(obj: Any) -> Any:
    """Replace NaN and infinities with None, recursing into lists and dicts."""
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if isinstance(obj, dict):
        return {key: _finite(item) for key, item in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_finite(item) for item in obj]
    return obj


@dataclass(frozen=True)
class ValueType:
    """Descriptor of a normalized value.

    Attributes:
        name: Generic label for the value (not the node's name)
        unit: Unit hint ("" or "Date")
        type: One of "String", "Number", "Boolean", "Object"
    """

    name: str
    unit: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "unit": self.unit, "type": self.type}


@dataclass(frozen=True)
class NormalizedEvent:
    """One value change of one node, ready for publishing.

    Attributes:
        id: Configured id prefix + node id string
        name: Configured name prefix + node display name
        source: Logical source tag stamped on every event
        value_type: Normalized value descriptor
        timestamp: Server timestamp in epoch milliseconds, 0 if none was supplied
        value: Single-element list holding the mapped scalar
        meta: Raw protocol value envelope for diagnostics
    """

    id: str
    name: str
    source: str
    value_type: ValueType
    timestamp: int
    value: list[Any]
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire document as a plain dict."""
        return {
            "id": self.id,
            "name": self.name,
            "user": self.source,
            "meta": self.meta,
            "valueTypes": [self.value_type.to_dict()],
            "values": [{"date": self.timestamp, "value": list(self.value)}],
        }

    def to_json_bytes(self) -> bytes:
        """Serialize the event to one UTF-8 JSON document.

        Non-finite floats are written as null.
        """
        doc = _finite(self.to_dict())
        return json.dumps(doc, default=_json_default, allow_nan=False).encode("utf-8")
