#!/usr/bin/env python3
"""
Simple Schema Reporter - Active Directory Schema Reporting Tool
===============================================================

Command-line interface for reporting on AD schema classes.

Usage:
    # Attributes of the User class as an HTML file
    schemareport -d corp.local -u admin -p Password123

    # Several classes, CSV and XML, custom base name
    schemareport -d corp.local --class-name User,Computer --report-type CSVFile XMLFile --report-name corp

    # All classes, copied to the clipboard
    schemareport -d corp.local --list-classes --report-type HTMLClipboard

Options:
    --list-classes, -ListClasses    Report the list of all schema classes
    --class-name, -ClassName        Classes to report on (default: User)
    --report-type, -ReportType      HTMLFile, HTMLClipboard, XMLFile, CSVFile (default: HTMLFile)
    --report-name, -ReportName      Base file name for generated reports
    --view-output, -ViewOutput      Open generated files in the default viewer
    --output, -o                    Output directory (default: current directory)
    --server, -s                    Domain controller (default: the domain name)
    --domain, -d                    Domain name (e.g., corp.local)
    --username, -u                  Username for NTLM bind
    --password, -p                  Password for NTLM bind
    --kerberos                      Bind with the current Kerberos ticket
    --verbose, -v                   Verbose output
"""

import argparse
import logging
import sys
import traceback

from ldap3.core.exceptions import LDAPException

from . import __version__
from .config import SchemaReportConfig
from .ingestion.ldap_loader import SchemaUnavailableError, ConstructedAttributeLookupError
from .model.schemas import ReportType
from .runner import run


def _split_list(values) -> list:
    """Flatten space- and comma-separated CLI values."""
    items = []
    for value in values or []:
        items += [part.strip() for part in value.split(",") if part.strip()]
    return items


def _report_types(values) -> list:
    return [ReportType.from_string(v) for v in _split_list(values)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemareport",
        description="Simple Schema Reporter - Active Directory schema class reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Examples:
  # User class attributes as HTML, opened in the browser
  %(prog)s -d corp.local -u admin -p Password123 --view-output

  # Two classes as CSV
  %(prog)s -d corp.local --class-name User,Computer --report-type CSVFile

  # All classes as XML using the current Kerberos ticket
  %(prog)s -d corp.local --kerberos --list-classes --report-type XMLFile
        """
    )

    # Report selection
    selection = parser.add_argument_group("Report Selection")
    mode = selection.add_mutually_exclusive_group()
    mode.add_argument(
        "--list-classes", "-ListClasses",
        dest="list_classes",
        action="store_true",
        help="Report the list of all schema classes"
    )
    mode.add_argument(
        "--class-name", "-ClassName",
        dest="class_name",
        nargs="+",
        metavar="NAME",
        help="Class name(s) to report on, space or comma separated (default: User)"
    )

    # Output options
    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--report-type", "-ReportType",
        dest="report_type",
        nargs="+",
        metavar="TYPE",
        default=[ReportType.HTML_FILE.value],
        help="Output format(s): HTMLFile, HTMLClipboard, XMLFile, CSVFile (default: HTMLFile)"
    )
    output_group.add_argument(
        "--report-name", "-ReportName",
        dest="report_name",
        help="Base file name; the class name (or Class-List) is appended"
    )
    output_group.add_argument(
        "--view-output", "-ViewOutput",
        dest="view_output",
        action="store_true",
        help="Open generated files in the OS default viewer"
    )
    output_group.add_argument(
        "-o", "--output",
        default=".",
        help="Output directory for reports (default: current directory)"
    )

    # LDAP options
    ldap_group = parser.add_argument_group("LDAP Connection")
    ldap_group.add_argument(
        "-s", "--server",
        help="Domain controller hostname or IP (default: the domain name)"
    )
    ldap_group.add_argument(
        "-d", "--domain",
        help="Domain name (e.g., corp.local)"
    )
    ldap_group.add_argument(
        "-u", "--username",
        help="Domain username for NTLM authentication"
    )
    ldap_group.add_argument(
        "-p", "--password",
        help="Domain password for NTLM authentication"
    )
    ldap_group.add_argument(
        "--kerberos",
        action="store_true",
        help="Authenticate with the current Kerberos ticket cache"
    )
    ldap_group.add_argument(
        "--ssl",
        action="store_true",
        help="Use LDAPS (port 636)"
    )
    ldap_group.add_argument(
        "--page-size",
        type=int,
        default=1000,
        help="LDAP page size (default: 1000)"
    )
    ldap_group.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Connection timeout in seconds (default: 30)"
    )

    # General options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"schemareport {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> SchemaReportConfig:
    """Build the run configuration from parsed arguments."""
    return SchemaReportConfig.from_dict({
        "ldap": {
            "server": args.server,
            "domain": args.domain,
            "username": args.username,
            "password": args.password,
            "use_ssl": args.ssl,
            "use_kerberos": args.kerberos,
            "page_size": args.page_size,
            "timeout": args.timeout,
        },
        "report": {
            "list_classes": args.list_classes,
            "class_names": _split_list(args.class_name) or ["User"],
            "report_types": _report_types(args.report_type),
            "report_name": args.report_name,
            "output_dir": args.output,
            "view_output": args.view_output,
        },
        "verbose": args.verbose,
    })


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        report_types = _report_types(args.report_type)
    except ValueError as e:
        parser.error(str(e))
    if not report_types:
        parser.error("at least one report type is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logging.getLogger("ldap3").setLevel(logging.WARNING)

    config = config_from_args(args)

    try:
        run(config)
    except (SchemaUnavailableError, ConstructedAttributeLookupError, LDAPException) as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return 1

    # Per-item failures were already logged as warnings by the runner
    return 0


if __name__ == "__main__":
    sys.exit(main())
