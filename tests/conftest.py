"""Global fixtures for Simple Schema Reporter tests."""

import re
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from ldap3.core.exceptions import LDAPException

from schemareport.ingestion.ldap_loader import SchemaAccessor
from schemareport.model.schemas import AttributeDefinition, SchemaClass
from schemareport.reporting.report_builder import ReportBuilder


SCHEMA_DN = "CN=Schema,CN=Configuration,DC=corp,DC=local"

DN_OM_CLASS = bytes.fromhex("2B0C0287731C00854A")


def _class(name, cn, parent, **values):
    attrs = {"lDAPDisplayName": [name], "cn": [cn], "subClassOf": [parent]}
    attrs.update(values)
    return attrs


def _attr(name, cn, oid, syntax, om_syntax, single=True, search_flags=0,
          system_flags=0, link_id=None, range_lower=None, range_upper=None, om_class=None):
    # Values come back as lists, as ldap3 returns them without server schema info
    attrs = {
        "lDAPDisplayName": [name],
        "cn": [cn],
        "attributeID": [oid],
        "attributeSyntax": [syntax],
        "oMSyntax": [str(om_syntax)],
        "isSingleValued": ["TRUE" if single else "FALSE"],
        "searchFlags": [str(search_flags)],
        "systemFlags": [str(system_flags)],
    }
    if link_id is not None:
        attrs["linkID"] = [str(link_id)]
    if range_lower is not None:
        attrs["rangeLower"] = [str(range_lower)]
    if range_upper is not None:
        attrs["rangeUpper"] = [str(range_upper)]
    if om_class is not None:
        attrs["oMObjectClass"] = [om_class]
    return attrs


SCHEMA_CLASSES = [
    _class("top", "Top", "top",
           systemMustContain=["objectClass", "instanceType", "nTSecurityDescriptor", "objectCategory"],
           systemMayContain=["description", "canonicalName"]),
    _class("person", "Person", "top",
           systemMustContain=["cn"],
           systemMayContain=["sn"],
           mayContain=["telephoneNumber"]),
    _class("organizationalPerson", "Organizational-Person", "person",
           systemMayContain=["title", "manager", "directReports"]),
    _class("securityPrincipal", "Security-Principal", "top",
           systemMustContain=["objectSid", "sAMAccountName"],
           systemMayContain=["tokenGroups"]),
    _class("user", "User", "organizationalPerson",
           systemAuxiliaryClass=["securityPrincipal"],
           systemMayContain=["sAMAccountName", "memberOf", "userAccountControl"]),
    _class("computer", "Computer", "user",
           systemMayContain=["dNSHostName"]),
]

SCHEMA_ATTRIBUTES = [
    _attr("objectClass", "Object-Class", "2.5.4.0", "2.5.5.2", 6, single=False),
    _attr("instanceType", "Instance-Type", "1.2.840.113556.1.2.1", "2.5.5.9", 2),
    _attr("nTSecurityDescriptor", "NT-Security-Descriptor", "1.2.840.113556.1.2.281", "2.5.5.15", 66,
          range_lower=0, range_upper=132096),
    _attr("objectCategory", "Object-Category", "1.2.840.113556.1.4.782", "2.5.5.1", 127,
          om_class=DN_OM_CLASS),
    _attr("cn", "Common-Name", "2.5.4.3", "2.5.5.12", 64, range_lower=1, range_upper=64),
    _attr("description", "Description", "2.5.4.13", "2.5.5.12", 64, single=False,
          range_lower=0, range_upper=1024),
    _attr("canonicalName", "Canonical-Name", "1.2.840.113556.1.4.916", "2.5.5.12", 64, single=False,
          system_flags=20),
    _attr("sn", "Surname", "2.5.4.4", "2.5.5.12", 64, search_flags=5, range_lower=1, range_upper=64),
    _attr("telephoneNumber", "Telephone-Number", "2.5.4.20", "2.5.5.12", 64,
          range_lower=1, range_upper=64),
    _attr("title", "Title", "2.5.4.12", "2.5.5.12", 64, range_lower=1, range_upper=128),
    _attr("manager", "Manager", "0.9.2342.19200300.100.1.10", "2.5.5.1", 127,
          link_id=42, om_class=DN_OM_CLASS),
    _attr("directReports", "Reports", "1.2.840.113556.1.2.436", "2.5.5.1", 127, single=False,
          system_flags=1, link_id=43, om_class=DN_OM_CLASS),
    _attr("objectSid", "Object-Sid", "1.2.840.113556.1.4.146", "2.5.5.17", 4, search_flags=9,
          range_lower=0, range_upper=28),
    _attr("sAMAccountName", "SAM-Account-Name", "1.2.840.113556.1.4.221", "2.5.5.12", 64,
          search_flags=13, range_lower=0, range_upper=256),
    _attr("tokenGroups", "Token-Groups", "1.2.840.113556.1.4.1301", "2.5.5.17", 4, single=False,
          system_flags=20),
    _attr("memberOf", "Is-Member-Of-DL", "1.2.840.113556.1.2.102", "2.5.5.1", 127, single=False,
          system_flags=17, link_id=3, om_class=DN_OM_CLASS),
    _attr("member", "Member", "2.5.4.31", "2.5.5.1", 127, single=False, link_id=2,
          om_class=DN_OM_CLASS),
    _attr("userAccountControl", "User-Account-Control", "1.2.840.113556.1.4.8", "2.5.5.9", 2),
    _attr("dNSHostName", "DNS-Host-Name", "1.2.840.113556.1.4.619", "2.5.5.12", 64,
          range_lower=0, range_upper=2048),
]

USER_MANDATORY = {
    "objectClass", "instanceType", "nTSecurityDescriptor", "objectCategory",
    "cn", "objectSid", "sAMAccountName",
}

USER_OPTIONAL = {
    "description", "canonicalName", "sn", "telephoneNumber", "title", "manager",
    "directReports", "tokenGroups", "memberOf", "userAccountControl",
}


class FakeSchemaConnection:
    """In-memory stand-in for a bound ldap3 connection to the schema.

    Answers paged searches by inspecting the filter the same way the
    directory would for the handful of filter shapes the accessor issues.
    """

    def __init__(self, classes=None, attributes=None, fail_on=None):
        self.classes = {c["lDAPDisplayName"][0].lower(): c for c in (classes or SCHEMA_CLASSES)}
        self.attributes = {a["lDAPDisplayName"][0].lower(): a for a in (attributes or SCHEMA_ATTRIBUTES)}
        self.fail_on = fail_on
        self.searches = []
        self.extend = SimpleNamespace(standard=SimpleNamespace(paged_search=self.paged_search))
        self.unbind = MagicMock()

    def _entries(self, search_filter):
        if "systemFlags:1.2.840.113556.1.4.803:=4" in search_filter:
            return [a for a in self.attributes.values() if int(a["systemFlags"][0]) & 4]

        names = [n.lower() for n in re.findall(r"lDAPDisplayName=([^)]*)", search_filter)]

        if "objectClass=classSchema" in search_filter:
            if not names:
                return list(self.classes.values())
            return [self.classes[n] for n in names if n in self.classes]

        if "linkID=" in search_filter:
            link_ids = re.findall(r"linkID=(\d+)", search_filter)
            return [a for a in self.attributes.values() if a.get("linkID", [None])[0] in link_ids]

        return [self.attributes[n] for n in names if n in self.attributes]

    def paged_search(self, search_base, search_filter, search_scope=None, attributes=None,
                     paged_size=None, generator=True):
        self.searches.append(search_filter)
        if self.fail_on and self.fail_on in search_filter:
            raise LDAPException("server unavailable")
        return [
            {"type": "searchResEntry", "dn": f"CN={e['cn'][0]},{search_base}", "attributes": e}
            for e in self._entries(search_filter)
        ]


@pytest.fixture
def schema_connection():
    return FakeSchemaConnection()


@pytest.fixture
def accessor(schema_connection):
    return SchemaAccessor(schema_connection, SCHEMA_DN)


@pytest.fixture
def clipboard():
    return MagicMock()


@pytest.fixture
def opener():
    return MagicMock(return_value=True)


@pytest.fixture
def builder(tmp_path, clipboard, opener):
    return ReportBuilder(output_dir=str(tmp_path), clipboard=clipboard, opener=opener)


@pytest.fixture
def sample_class():
    """A class with 2 mandatory and 3 optional attributes, one of them constructed."""
    def attribute(name, **kwargs):
        return AttributeDefinition(
            name=name,
            common_name=name.upper(),
            oid=f"1.2.3.{len(name)}",
            syntax="DirectoryString",
            properties={"searchFlags": 0, "systemFlags": 0},
            **kwargs
        )

    return SchemaClass(
        name="widget",
        common_name="Widget",
        sub_class_of="top",
        mandatory_properties=(attribute("objectClass"), attribute("widgetId", is_single_valued=True)),
        optional_properties=(
            attribute("description"),
            attribute("widgetPath"),
            attribute("allowedChildClasses"),
        ),
    )
