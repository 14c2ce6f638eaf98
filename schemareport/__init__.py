"""
Simple Schema Reporter - Active Directory Schema Reporting Tool
===============================================================

Connects to an Active Directory schema over LDAP, retrieves the metadata of
one or more object classes (or the list of all classes) and renders it as
HTML, XML or CSV reports.

Architecture Overview:
----------------------
- ingestion/: LDAP access to the schema naming context (ldap3)
- model/: Typed data models and record projections
- analysis/: Mandatory/constructed flag extraction for class properties
- reporting/: HTML/XML/CSV/clipboard rendering (pandas)
- runner.py: The reporting pipeline driven by the CLI

Design Decisions:
-----------------
1. ldap3 is used for cross-platform, read-only schema queries
2. All data models use Python dataclasses; derived flags live in their own record type
3. pandas handles every tabular serialization so all formats share one column order
4. One connection per run, no caching, no retries
"""

__version__ = "1.0.0"
__author__ = "Simple Schema Reporter Team"

from .config import SchemaReportConfig
