"""Decode Firestore REST query results into invoice records.

The document store returns every field wrapped in a typed value, for example
``{"amount": {"doubleValue": 12.5}}`` or ``{"date": {"timestampValue": "..."}}``.
This module unwraps those values and validates the result as an
``InvoiceRecord``. It performs no network I/O; fetching and authentication
are the caller's concern.

Reference: https://firebase.google.com/docs/firestore/reference/rest/v1/Value
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from services.ledger.schema import InvoiceRecord

logger = logging.getLogger(__name__)


def decode_value(value: Mapping[str, Any]) -> Any:
    """Unwrap a single typed Firestore value.

    Args:
        value: Typed value such as {"stringValue": "abc"}

    Returns:
        Plain Python value (str, int, float, bool, None, dict, list)

    Raises:
        ValueError: If the value type is not recognised
    """
    if "nullValue" in value:
        return None
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        # int64 values are transported as strings
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    for passthrough in ("referenceValue", "bytesValue", "geoPointValue"):
        if passthrough in value:
            return value[passthrough]
    raise ValueError(f"Unsupported Firestore value: {sorted(value)}")


def decode_fields(fields: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Unwrap every typed value of a document's ``fields`` map."""
    return {name: decode_value(value) for name, value in fields.items()}


def document_id(name: str) -> str:
    """Return the document id from a full resource name (last path segment)."""
    return name.rsplit("/", 1)[-1]


def record_from_document(document: Mapping[str, Any]) -> InvoiceRecord:
    """Convert one Firestore document to an InvoiceRecord.

    Raises:
        pydantic.ValidationError: If required invoice fields are missing
    """
    data = decode_fields(document.get("fields", {}))
    data["id"] = document_id(document["name"])
    return InvoiceRecord.model_validate(data)


def records_from_query(results: Iterable[Mapping[str, Any]]) -> list[InvoiceRecord]:
    """Convert a ``runQuery`` response into records.

    Entries without a ``document`` (read-time markers, empty results) are skipped.

    Args:
        results: Parsed JSON array returned by the runQuery endpoint

    Returns:
        Records in response order
    """
    records = [
        record_from_document(item["document"]) for item in results if item.get("document")
    ]
    logger.info(f"Decoded {len(records)} invoices from store query")
    return records
