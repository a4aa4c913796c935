"""Translation of OPC-UA variants into normalized value descriptors.

Pure functions, no state. Unrecognized data kinds never raise; they
resolve to the opaque "Object" type and the raw value still flows through.
"""

from datetime import datetime
from typing import Any

from asyncua import ua

from opcbridge.core.events import ValueType, to_epoch_millis

# Generic label for every descriptor; deliberately not the node's name
VALUE_TYPE_NAME = "Wert"

_STRING_TYPES = frozenset({ua.VariantType.String})
_NUMBER_TYPES = frozenset(
    {
        ua.VariantType.Int16,
        ua.VariantType.UInt16,
        ua.VariantType.Int32,
        ua.VariantType.UInt32,
        ua.VariantType.Int64,
        ua.VariantType.UInt64,
        ua.VariantType.Float,
        ua.VariantType.Double,
    }
)
_BOOLEAN_TYPES = frozenset({ua.VariantType.Boolean, ua.VariantType.Byte})


def is_scalar(variant: ua.Variant) -> bool:
    """Check whether a variant holds a single value rather than an array."""
    return not variant.is_array and variant.Dimensions is None


def map_value_type(variant: ua.Variant) -> ValueType:
    """Return the normalized descriptor for a variant.

    Args:
        variant: Value carried by an OPC-UA DataValue

    Returns:
        ValueType with one of "String", "Number", "Boolean", "Object"
    """
    if is_scalar(variant):
        kind = variant.VariantType
        if kind in _STRING_TYPES:
            return ValueType(name=VALUE_TYPE_NAME, unit="", type="String")
        if kind in _NUMBER_TYPES:
            return ValueType(name=VALUE_TYPE_NAME, unit="", type="Number")
        if kind == ua.VariantType.DateTime:
            return ValueType(name=VALUE_TYPE_NAME, unit="Date", type="Number")
        if kind in _BOOLEAN_TYPES:
            return ValueType(name=VALUE_TYPE_NAME, unit="", type="Boolean")

    return ValueType(name=VALUE_TYPE_NAME, unit="", type="Object")


def map_value(variant: ua.Variant) -> Any:
    """Return the untransformed native value of a variant."""
    return variant.Value


def variant_to_json(variant: ua.Variant) -> dict[str, Any]:
    """Describe a variant as a raw envelope for event metadata."""
    if variant.Dimensions is not None:
        array_type = "Matrix"
    elif variant.is_array:
        array_type = "Array"
    else:
        array_type = "Scalar"

    return {
        "dataType": variant.VariantType.name,
        "arrayType": array_type,
        "value": variant.Value,
    }


def timestamp_to_millis(timestamp: datetime | None) -> int:
    """Convert a server timestamp to epoch milliseconds, 0 when absent."""
    if timestamp is None:
        return 0
    return to_epoch_millis(timestamp)
