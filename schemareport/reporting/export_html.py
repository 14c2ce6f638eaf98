"""
HTML Export Module
==================

Renders schema reports as HTML tables.

Features:
- Full documents with an inline stylesheet and client-side column sorting
- Bare table fragments for pasting into other documents
- Print-friendly styling

Design Decisions:
-----------------
1. pandas builds the table, so <thead>/<tbody> are right from the start
2. Every piece of caller-supplied text is escaped before it reaches markup
3. The sort script targets the table by its fixed id/class
"""

import html

import pandas as pd

from ..model.schemas import REPORT_TITLE


PAGE_TITLE = REPORT_TITLE
FOOTER_TEXT = "Generated by Simple Schema Reporter."
TABLE_ID = "schema-report"
TABLE_CLASS = "sortable"
SORT_SCRIPT_URL = "https://www.kryogenix.org/code/browser/sorttable/sorttable.js"


class HTMLExporter:
    """Renders a DataFrame of projected records to HTML.

    Usage:
        exporter = HTMLExporter()

        page = exporter.document(frame, "User")
        fragment = exporter.fragment(frame)
    """

    # CSS styles for the report
    CSS = """
    body {
        font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
        color: #1a202c;
        line-height: 1.4;
        padding: 1rem 2rem;
    }

    h1 {
        color: #2d3748;
        font-size: 1.8rem;
        border-bottom: 2px solid #4299e1;
        padding-bottom: 0.5rem;
    }

    table {
        border-collapse: collapse;
        width: 100%;
        font-size: 0.9rem;
    }

    th, td {
        padding: 0.4rem 0.75rem;
        text-align: left;
        border: 1px solid #cbd5e0;
    }

    thead th {
        background: #2d3748;
        color: #e2e8f0;
        cursor: pointer;
    }

    tbody tr:nth-child(even) {
        background: #edf2f7;
    }

    .footer {
        margin-top: 2rem;
        color: #718096;
        font-size: 0.85rem;
    }

    @media print {
        thead th {
            background: white;
            color: black;
        }
    }
    """

    def fragment(self, frame: pd.DataFrame) -> str:
        """Bare <table> markup, without document or id/class tagging."""
        return frame.to_html(index=False, border=0, na_rep="")

    def table(self, frame: pd.DataFrame) -> str:
        """<table> markup tagged for the sort script."""
        return frame.to_html(
            index=False,
            border=0,
            na_rep="",
            table_id=TABLE_ID,
            classes=TABLE_CLASS
        )

    def document(self, frame: pd.DataFrame, heading: str, title: str = PAGE_TITLE) -> str:
        """Generate a complete HTML document.

        Args:
            frame: Records to render, columns in display order
            heading: Subject of the report (class name or "Class List")
            title: Page title

        Returns:
            HTML string
        """
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <script src="{html.escape(SORT_SCRIPT_URL, quote=True)}"></script>
    <style>
    {self.CSS}
    </style>
</head>
<body>
    <h1>{html.escape(heading)}</h1>
    {self.table(frame)}
    <div class="footer">
        <p>{html.escape(FOOTER_TEXT)}</p>
    </div>
</body>
</html>"""
