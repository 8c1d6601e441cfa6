"""Typed key/value metadata attached to log records and sessions."""

from datetime import date, datetime
from typing import Any, Mapping

MetadataValue = str | int | float | bool | datetime
Metadata = dict[str, MetadataValue]


def coerce_metadata_value(value: Any) -> MetadataValue:
    """Narrow an arbitrary value to one of the allowed metadata variants."""
    if isinstance(value, (bool, int, float, str, datetime)):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return str(value)


def coerce_metadata(data: Mapping[str, Any] | None) -> Metadata:
    """Build a metadata map; None values are dropped, keys are stringified."""
    if not data:
        return {}
    return {str(key): coerce_metadata_value(value) for key, value in data.items() if value is not None}


def metadata_to_json(data: Metadata) -> dict[str, Any]:
    """JSON-safe copy (datetimes as ISO strings) for JSON columns."""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value for key, value in data.items()
    }
