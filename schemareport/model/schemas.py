"""
Simple Schema Reporter Data Schemas
===================================

Typed dataclasses representing Active Directory schema elements and reports.

Design Decisions:
-----------------
1. Schema elements are frozen snapshots of the directory at query time
2. The derived Mandatory/Constructed flags live on AttributeRecord, never on
   the AttributeDefinition read from the directory
3. ReportType provides type safety and easy parsing from CLI strings
4. Report is the unit handed to the renderer; it is built and rendered once

Schema Hierarchy:
- AttributeDefinition: one attributeSchema entry
- SchemaClass: one classSchema entry with its (inherited) attribute sets
- AttributeRecord: AttributeDefinition + per-class derived flags
- Report: projected records + format + base file name
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any


REPORT_TITLE = "Simple Schema Reporter"


class ReportType(Enum):
    """Output formats a report can be rendered to."""
    HTML_FILE = "HTMLFile"
    HTML_CLIPBOARD = "HTMLClipboard"
    XML_FILE = "XMLFile"
    CSV_FILE = "CSVFile"

    @property
    def extension(self) -> Optional[str]:
        """File extension for file-based formats, None for the clipboard."""
        return {
            ReportType.HTML_FILE: "html",
            ReportType.XML_FILE: "xml",
            ReportType.CSV_FILE: "csv",
        }.get(self)

    @classmethod
    def from_string(cls, s: Any) -> "ReportType":
        """Convert string to ReportType, handling various formats.

        Raises:
            ValueError: If the string names no known format
        """
        if isinstance(s, cls):
            return s

        normalized = str(s).strip().lower()

        for report_type in cls:
            if report_type.value.lower() == normalized:
                return report_type

        aliases = {
            "html": cls.HTML_FILE,
            "htmlfile": cls.HTML_FILE,
            "clipboard": cls.HTML_CLIPBOARD,
            "htmlclipboard": cls.HTML_CLIPBOARD,
            "xml": cls.XML_FILE,
            "csv": cls.CSV_FILE,
        }

        if normalized in aliases:
            return aliases[normalized]

        choices = ", ".join(t.value for t in cls)
        raise ValueError(f"Unknown report type '{s}' (expected one of: {choices})")


@dataclass(frozen=True)
class AttributeDefinition:
    """An attributeSchema entry.

    Attributes:
        name: lDAPDisplayName
        common_name: cn
        oid: attributeID
        syntax: ActiveDirectorySyntax name (e.g. DirectoryString, DN)
        is_single_valued: isSingleValued
        is_in_anr: Whether searchFlags has the ANR bit set
        range_lower: rangeLower, if any
        range_upper: rangeUpper, if any
        link: lDAPDisplayName of the partner attribute for linked attributes
        link_id: linkID, if any
        properties: Any other fields the directory returned
    """
    name: str
    common_name: str = ""
    oid: str = ""
    syntax: str = ""
    is_single_valued: bool = False
    is_in_anr: bool = False
    range_lower: Optional[int] = None
    range_upper: Optional[int] = None
    link: Optional[str] = None
    link_id: Optional[int] = None
    properties: dict = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> dict:
        """Display-named view, including the extra directory properties."""
        data = dict(self.properties)
        data.update({
            "Name": self.name,
            "CommonName": self.common_name,
            "OID": self.oid,
            "Syntax": self.syntax,
            "IsSingleValued": self.is_single_valued,
            "IsInAnr": self.is_in_anr,
            "RangeLower": self.range_lower,
            "RangeUpper": self.range_upper,
            "Link": self.link,
            "LinkId": self.link_id,
        })
        return data


@dataclass(frozen=True)
class SchemaClass:
    """A classSchema entry.

    Mandatory and optional properties include everything inherited through
    subClassOf and the auxiliary classes, as the directory would enforce it.
    list_all_classes() only fills name, common_name and sub_class_of.
    """
    name: str
    common_name: str = ""
    sub_class_of: str = ""
    mandatory_properties: tuple = ()
    optional_properties: tuple = ()
    auxiliary_classes: tuple = ()
    properties: dict = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> dict:
        data = dict(self.properties)
        data.update({
            "Name": self.name,
            "CommonName": self.common_name,
            "SubClassOf": self.sub_class_of,
        })
        return data


@dataclass(frozen=True)
class AttributeRecord:
    """An attribute of one class, with the flags derived for that class."""
    attribute: AttributeDefinition
    mandatory: bool
    constructed: bool

    @property
    def name(self) -> str:
        return self.attribute.name

    def to_dict(self) -> dict:
        data = self.attribute.to_dict()
        data["Mandatory"] = self.mandatory
        data["Constructed"] = self.constructed
        return data


@dataclass
class Report:
    """A rendered-once report.

    Attributes:
        records: Projected, sorted records (dicts keyed by column name)
        report_type: Output format
        base_name: File name without extension
        heading: Subject shown in the <h1> of HTML output
        columns: Column order for tabular output
        title: Page title of HTML output
    """
    records: list
    report_type: ReportType
    base_name: str
    heading: str
    columns: list = field(default_factory=list)
    title: str = REPORT_TITLE
