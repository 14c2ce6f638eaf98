"""
Report Runner Module
====================

High-level interface that drives a reporting run.

Pipeline:
1. Obtain the schema accessor (fatal if unavailable)
2. List mode: enumerate all classes
   Per-class mode: find constructed attributes once, then resolve each class
3. Project and sort the records
4. Render every requested format for every subject

Design Decisions:
-----------------
1. Single entry point (run) used by the CLI
2. Per-item failures (unknown class, unwritable file, clipboard) are logged
   and recorded in the RunSummary; the run continues
3. Schema and constructed-attribute failures propagate and end the run
4. Progress updates via optional callback, mirroring the log
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Callable

from ldap3.core.exceptions import LDAPException
from pandas.errors import PyperclipException

from .config import SchemaReportConfig
from .ingestion.ldap_loader import SchemaAccessor, ClassNotFoundError, get_current_schema
from .analysis.property_extractor import extract_properties
from .model.projection import (
    ATTRIBUTE_FIELDS,
    CLASS_FIELDS,
    project_attribute,
    project_class,
    sort_by_name
)
from .model.schemas import Report
from .reporting.report_builder import ReportBuilder

logger = logging.getLogger(__name__)

REPORT_PREFIX = "SchemaReport"
CLASS_LIST_SUBJECT = "Class-List"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


@dataclass
class RunSummary:
    """Outcome of a run.

    Attributes:
        artifacts: Written file paths, or "clipboard" for HTMLClipboard
        failures: (subject, report type value or None, message) per failed item
    """
    artifacts: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures


def build_report_name(
    subject: str,
    report_name: Optional[str] = None,
    now: Optional[datetime] = None
) -> str:
    """Base file name for a subject (class name or Class-List).

    A custom report name is suffixed with the subject so that several
    classes in one run produce distinct files.
    """
    if report_name:
        return f"{report_name}-{subject}"
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{REPORT_PREFIX}-{subject}-{stamp}"


def _dedupe(names: list) -> list:
    """Drop case-insensitive duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for name in names:
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


class ReportRunner:
    """Drives list mode or per-class mode for one configuration.

    Usage:
        runner = ReportRunner(config, accessor, builder)
        summary = runner.run()
    """

    def __init__(
        self,
        config: SchemaReportConfig,
        accessor: SchemaAccessor,
        builder: ReportBuilder,
        progress_callback: Optional[Callable[[str], None]] = None
    ):
        self.config = config
        self.accessor = accessor
        self.builder = builder
        self.progress_callback = progress_callback
        self.summary = RunSummary()

    def _log(self, message: str) -> None:
        """Log a progress message and forward it to the callback."""
        logger.debug(message)
        if self.progress_callback:
            self.progress_callback(message)

    def _render_all(self, subject: str, records: list, columns: list, heading: str) -> None:
        """Render one subject in every requested format."""
        for report_type in self.config.report.report_types:
            report = Report(
                records=records,
                report_type=report_type,
                base_name=build_report_name(subject, self.config.report.report_name),
                heading=heading,
                columns=columns
            )
            self._log(f"[*] Rendering {subject} as {report_type.value}")
            try:
                path = self.builder.render(report)
            except (OSError, PyperclipException, ValueError) as e:
                logger.warning("[!] %s (%s) failed: %s", subject, report_type.value, e)
                self.summary.failures.append((subject, report_type.value, str(e)))
                continue

            self.summary.artifacts.append(path or "clipboard")
            self._log(f"[+] {subject} ({report_type.value}) -> {path or 'clipboard'}")

    def run_class_list(self) -> RunSummary:
        """Report every class in the schema."""
        self._log("[*] Enumerating schema classes...")
        classes = self.accessor.list_all_classes()
        records = sort_by_name([project_class(c) for c in classes])
        self._log(f"[+] Found {len(records)} classes")

        self._render_all(CLASS_LIST_SUBJECT, records, CLASS_FIELDS, "Schema Class List")
        return self.summary

    def run_classes(self, class_names: list) -> RunSummary:
        """Report the attributes of each named class."""
        self._log("[*] Finding constructed attributes...")
        constructed = self.accessor.find_constructed_attribute_names()
        self._log(f"[+] Found {len(constructed)} constructed attributes")

        for class_name in _dedupe(class_names):
            self._log(f"[*] Resolving class {class_name}...")
            try:
                schema_class = self.accessor.find_class(class_name)
            except (ClassNotFoundError, LDAPException) as e:
                logger.warning("[!] %s: %s", class_name, e)
                self.summary.failures.append((class_name, None, str(e)))
                continue

            records = sort_by_name([
                project_attribute(record)
                for record in extract_properties(schema_class, constructed)
            ])
            self._log(f"[+] {class_name}: {len(records)} attributes")

            self._render_all(class_name, records, ATTRIBUTE_FIELDS, f"{class_name} Class Attributes")

        return self.summary

    def run(self) -> RunSummary:
        if self.config.report.list_classes:
            return self.run_class_list()
        return self.run_classes(self.config.report.class_names)


def run(
    config: SchemaReportConfig,
    accessor: Optional[SchemaAccessor] = None,
    builder: Optional[ReportBuilder] = None,
    progress_callback: Optional[Callable[[str], None]] = None
) -> RunSummary:
    """Main entry point for a reporting run.

    Args:
        config: Run configuration
        accessor: Schema accessor (connects using config.ldap if omitted)
        builder: Report renderer (built from config.report if omitted)
        progress_callback: Optional callback for progress updates

    Returns:
        RunSummary of written artifacts and per-item failures

    Raises:
        SchemaUnavailableError: If the schema cannot be reached
        ConstructedAttributeLookupError: If the constructed search fails
    """
    owns_accessor = accessor is None
    if owns_accessor:
        accessor = get_current_schema(config.ldap)

    if builder is None:
        builder = ReportBuilder(
            output_dir=config.report.output_dir,
            view_output=config.report.view_output
        )

    try:
        summary = ReportRunner(config, accessor, builder, progress_callback).run()
    finally:
        if owns_accessor:
            accessor.disconnect()

    logger.info(
        "[+] Generated %d report(s), %d failure(s)",
        len(summary.artifacts),
        len(summary.failures)
    )
    return summary
