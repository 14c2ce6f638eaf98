"""
Simple Schema Reporter Model Module
===================================

Contains the data models for schema elements and reports.

Key Components:
- schemas.py: Typed dataclasses (AttributeDefinition, SchemaClass, AttributeRecord, Report)
- projection.py: Field narrowing and ordering for report output

Design Philosophy:
- Directory snapshots are immutable
- Derived per-class flags are carried by a separate record type
"""

from .schemas import (
    ReportType,
    AttributeDefinition,
    SchemaClass,
    AttributeRecord,
    Report
)
from .projection import (
    ATTRIBUTE_FIELDS,
    CLASS_FIELDS,
    project_attribute,
    project_class,
    sort_by_name
)
