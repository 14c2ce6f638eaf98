"""
Simple Schema Reporter Configuration Module
===========================================

Centralized configuration for a reporting run.

Design Decision:
- Configuration is a dataclass tree that is passed through the pipeline
- Connection settings and report settings are kept apart so the runner can
  be driven without a live directory (tests inject an accessor)
- Report types are normalized to ReportType once, here
"""

from dataclasses import dataclass, field
from typing import Optional

from .model.schemas import ReportType


@dataclass
class LDAPConfig:
    """Configuration for the schema connection.

    Attributes:
        server: Domain controller hostname or IP (falls back to domain)
        domain: DNS domain name (e.g., corp.local)
        username: Username for NTLM bind (domain\\user or user@domain)
        password: Password for NTLM bind
        use_ssl: Whether to use LDAPS (port 636) vs LDAP (port 389)
        use_kerberos: Bind with SASL/GSSAPI using the current ticket cache
        page_size: Page size for LDAP queries
        timeout: Connection timeout in seconds
    """
    server: Optional[str] = None
    domain: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    use_ssl: bool = False
    use_kerberos: bool = False
    port: Optional[int] = None  # Auto-detect based on use_ssl
    page_size: int = 1000
    timeout: int = 30

    def __post_init__(self):
        if self.port is None:
            self.port = 636 if self.use_ssl else 389

    @property
    def host(self) -> Optional[str]:
        """Host to connect to; the domain name resolves to a DC via DNS."""
        return self.server or self.domain


@dataclass
class ReportConfig:
    """Configuration for report selection and output.

    Attributes:
        list_classes: Report the class list instead of per-class attributes
        class_names: Classes to report on (per-class mode)
        report_types: Output formats, each rendered for every subject
        report_name: Base file name override
        output_dir: Directory for generated files
        view_output: Open generated files in the OS default viewer
    """
    list_classes: bool = False
    class_names: list = field(default_factory=lambda: ["User"])
    report_types: list = field(default_factory=lambda: [ReportType.HTML_FILE])
    report_name: Optional[str] = None
    output_dir: str = "."
    view_output: bool = False

    def __post_init__(self):
        """Normalize report types."""
        self.report_types = [ReportType.from_string(t) for t in self.report_types]


@dataclass
class SchemaReportConfig:
    """Main configuration container.

    Usage:
        config = SchemaReportConfig()  # Report the User class as HTML
        config = SchemaReportConfig(report=ReportConfig(list_classes=True))
    """
    ldap: LDAPConfig = field(default_factory=LDAPConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    verbose: bool = False
    debug: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict) -> "SchemaReportConfig":
        """Create configuration from a dictionary (e.g. parsed CLI arguments)."""
        return cls(
            ldap=LDAPConfig(**config_dict.get("ldap", {})),
            report=ReportConfig(**config_dict.get("report", {})),
            verbose=config_dict.get("verbose", False),
            debug=config_dict.get("debug", False)
        )

    def to_dict(self) -> dict:
        """Convert configuration to dictionary for serialization."""
        from dataclasses import asdict
        data = asdict(self)
        data["report"]["report_types"] = [t.value for t in self.report.report_types]
        return data

