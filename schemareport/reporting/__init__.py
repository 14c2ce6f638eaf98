"""
Simple Schema Reporter Reporting Module
=======================================

Report rendering for schema data.

Components:
- export_html.py: HTML documents and table fragments
- report_builder.py: Format dispatch, file output, clipboard and viewer

Design Philosophy:
- Reports are projected records that can be rendered multiple ways
- All formats share one column order
"""

from .export_html import HTMLExporter
from .report_builder import ReportBuilder, open_in_viewer
