"""
Record Projection
=================

Narrows schema records down to the fields shown in reports. The field order
here is the column order of every tabular output.
"""

from typing import Any, Mapping

ATTRIBUTE_FIELDS = [
    "Name",
    "CommonName",
    "OID",
    "Syntax",
    "Mandatory",
    "Constructed",
    "IsSingleValued",
    "IsInAnr",
    "RangeLower",
    "RangeUpper",
    "Link",
    "LinkId",
]

CLASS_FIELDS = ["Name", "CommonName", "SubClassOf"]


def _as_mapping(record: Any) -> Mapping:
    if hasattr(record, "to_dict"):
        return record.to_dict()
    return record


def _project(record: Any, fields: list) -> dict:
    data = _as_mapping(record)
    return {name: data.get(name) for name in fields}


def project_attribute(record: Any) -> dict:
    """Project an AttributeRecord (or an already projected mapping)."""
    return _project(record, ATTRIBUTE_FIELDS)


def project_class(record: Any) -> dict:
    """Project a SchemaClass (or an already projected mapping)."""
    return _project(record, CLASS_FIELDS)


def sort_by_name(records: list) -> list:
    """Sort projected records by Name (ordinal, stable)."""
    return sorted(records, key=lambda r: r["Name"])
