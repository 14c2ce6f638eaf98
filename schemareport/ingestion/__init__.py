"""
Simple Schema Reporter Ingestion Module
=======================================

Loaders for Active Directory schema data.

Supported Sources:
- LDAP live queries against the schema naming context (using ldap3)

Design Philosophy:
- One read-only connection per run
- Directory failures surface as exceptions; nothing here retries
"""

from .ldap_loader import (
    SchemaAccessor,
    SchemaUnavailableError,
    ClassNotFoundError,
    ConstructedAttributeLookupError,
    get_current_schema
)
