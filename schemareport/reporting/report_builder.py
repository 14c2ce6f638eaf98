"""
Report Builder Module
=====================

Renders a Report to its output format and writes or displays it.

Supported formats:
- HTMLFile: full HTML document written to <name>.html
- HTMLClipboard: HTML table fragment copied to the system clipboard
- XMLFile: <Objects><Object>...</Object></Objects> written to <name>.xml
- CSVFile: header row plus one line per record written to <name>.csv

Design Decisions:
-----------------
1. Every format renders the same DataFrame, so column order is shared
2. Missing values become empty cells rather than "None"/"NaN"
3. Opening a viewer is best-effort and only applies to written files
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional, Callable

import pandas as pd
from pandas.io.clipboard import clipboard_set

from ..model.schemas import Report, ReportType
from .export_html import HTMLExporter

logger = logging.getLogger(__name__)


def open_in_viewer(path: str) -> bool:
    """Open a file with the OS default handler.

    Returns:
        True if a viewer was launched, False if launching failed
    """
    try:
        if sys.platform.startswith("win"):
            os.startfile(path)
        elif sys.platform == "darwin":
            subprocess.Popen(["open", path])
        else:
            subprocess.Popen(
                ["xdg-open", path],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL
            )
    except OSError as e:
        logger.warning("[!] Could not open %s in the default viewer: %s", path, e)
        return False
    return True


class ReportBuilder:
    """Renders reports to files or the clipboard.

    Usage:
        builder = ReportBuilder(output_dir="reports", view_output=True)

        path = builder.render(report)  # None for HTMLClipboard
    """

    def __init__(
        self,
        output_dir: str = ".",
        view_output: bool = False,
        opener: Optional[Callable[[str], bool]] = None,
        clipboard: Optional[Callable[[str], None]] = None
    ):
        """Initialize the report builder.

        Args:
            output_dir: Directory for output files, created on first write
            view_output: Open written files in the OS default viewer
            opener: Viewer launcher (defaults to open_in_viewer)
            clipboard: Clipboard writer (defaults to pandas' clipboard backend)
        """
        self.output_dir = Path(output_dir)
        self.view_output = view_output
        self.opener = opener or open_in_viewer
        self.clipboard = clipboard or clipboard_set
        self.html = HTMLExporter()

    @staticmethod
    def to_frame(report: Report) -> pd.DataFrame:
        """Load the report's records into a DataFrame in column order."""
        columns = report.columns or (list(report.records[0]) if report.records else [])
        rows = [
            ["" if record.get(column) is None else record.get(column) for column in columns]
            for record in report.records
        ]
        return pd.DataFrame(rows, columns=columns, dtype=object)

    def render(self, report: Report) -> Optional[str]:
        """Render a report.

        Args:
            report: Report to render

        Returns:
            Path of the written file, or None when copied to the clipboard

        Raises:
            OSError: If the output directory or file cannot be written
        """
        frame = self.to_frame(report)

        if report.report_type is ReportType.HTML_CLIPBOARD:
            self.clipboard(self.html.fragment(frame))
            logger.debug("[+] Copied %s (%d rows) to the clipboard", report.heading, len(frame))
            return None

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"{report.base_name}.{report.report_type.extension}"

        if report.report_type is ReportType.HTML_FILE:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self.html.document(frame, report.heading, report.title))
        elif report.report_type is ReportType.XML_FILE:
            frame.to_xml(
                output_path,
                index=False,
                root_name="Objects",
                row_name="Object",
                parser="etree",
                encoding="utf-8"
            )
        elif report.report_type is ReportType.CSV_FILE:
            frame.to_csv(output_path, index=False, encoding="utf-8")
        else:
            raise ValueError(f"Unsupported report type: {report.report_type}")

        logger.debug("[+] Wrote %s (%d rows)", output_path, len(frame))

        if self.view_output:
            self.opener(str(output_path))

        return str(output_path)
