"""
LDAP Schema Loader Module
=========================

Read-only access to the Active Directory schema naming context via LDAP.

Features:
- Resolves classSchema entries with their inherited mandatory/optional attributes
- Enumerates all classes in the schema
- Finds constructed attributes (systemFlags bit FLAG_ATTR_IS_CONSTRUCTED)
- Supports LDAP (389) and LDAPS (636), NTLM, Kerberos and anonymous binds

Design Decisions:
-----------------
1. Uses ldap3 library for cross-platform LDAP support
2. Connections raise on failure; nothing here retries
3. Attribute syntaxes are reported by their ActiveDirectorySyntax names
4. Attribute definitions are fetched in batched OR filters, one class at a time

Security Consideration:
This module performs read-only operations. No modifications are made to the AD.
"""

import logging
from dataclasses import replace
from typing import Optional, Iterable

from ldap3 import Server, Connection, DSA, SUBTREE, NTLM, SASL, KERBEROS
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from ..model.schemas import AttributeDefinition, SchemaClass
from ..config import LDAPConfig

logger = logging.getLogger(__name__)


# systemFlags bit 4 = FLAG_ATTR_IS_CONSTRUCTED, matched with LDAP_MATCHING_RULE_BIT_AND
CONSTRUCTED_ATTRIBUTE_FILTER = (
    "(&(objectClass=attributeSchema)(systemFlags:1.2.840.113556.1.4.803:=4))"
)

# searchFlags bit for Ambiguous Name Resolution
SEARCH_FLAG_ANR = 0x4

CLASS_ATTRIBUTES = [
    'lDAPDisplayName', 'cn', 'governsID', 'subClassOf',
    'mustContain', 'systemMustContain', 'mayContain', 'systemMayContain',
    'auxiliaryClass', 'systemAuxiliaryClass', 'objectClassCategory',
]

ATTRIBUTE_ATTRIBUTES = [
    'lDAPDisplayName', 'cn', 'attributeID', 'attributeSyntax', 'oMSyntax',
    'oMObjectClass', 'isSingleValued', 'searchFlags', 'rangeLower',
    'rangeUpper', 'linkID', 'systemFlags',
]

# Names per OR filter when fetching attribute definitions
FILTER_BATCH_SIZE = 100

# (attributeSyntax, oMSyntax, oMObjectClass hex) -> ActiveDirectorySyntax
SYNTAX_NAMES = {
    ('2.5.5.1', 127, '2B0C0287731C00854A'): 'DN',
    ('2.5.5.2', 6, None): 'Oid',
    ('2.5.5.3', 27, None): 'CaseExactString',
    ('2.5.5.4', 20, None): 'CaseIgnoreString',
    ('2.5.5.5', 19, None): 'PrintableString',
    ('2.5.5.5', 22, None): 'IA5String',
    ('2.5.5.6', 18, None): 'NumericString',
    ('2.5.5.7', 127, '2A864886F7140101010B'): 'DNWithBinary',
    ('2.5.5.7', 127, '56060102050B1D'): 'ORName',
    ('2.5.5.8', 1, None): 'Bool',
    ('2.5.5.9', 2, None): 'Int',
    ('2.5.5.9', 10, None): 'Enumeration',
    ('2.5.5.10', 4, None): 'OctetString',
    ('2.5.5.10', 127, '2A864886F71401010106'): 'ReplicaLink',
    ('2.5.5.11', 23, None): 'UtcTime',
    ('2.5.5.11', 24, None): 'GeneralizedTime',
    ('2.5.5.12', 64, None): 'DirectoryString',
    ('2.5.5.13', 127, '2B0C0287731C00855C'): 'PresentationAddress',
    ('2.5.5.14', 127, '2A864886F7140101010C'): 'DNWithString',
    ('2.5.5.14', 127, '2B0C0287731C00853E'): 'AccessPointDN',
    ('2.5.5.15', 66, None): 'SecurityDescriptor',
    ('2.5.5.16', 65, None): 'Int64',
    ('2.5.5.17', 4, None): 'Sid',
}


class SchemaUnavailableError(ConnectionError):
    """No directory schema could be reached."""


class ClassNotFoundError(LookupError):
    """The requested class does not exist in the schema."""


class ConstructedAttributeLookupError(RuntimeError):
    """The constructed-attribute search failed."""


def _values(attrs: dict, name: str) -> list:
    """Return an attribute's values as a list, whatever ldap3 handed back."""
    value = attrs.get(name)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _first(attrs: dict, name: str, default=None):
    values = _values(attrs, name)
    return values[0] if values else default


def _to_int(value) -> Optional[int]:
    if value is None or value == '':
        return None
    if isinstance(value, bytes):
        value = value.decode('utf-8')
    return int(value)


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, bytes):
        value = value.decode('utf-8')
    return str(value).strip().upper() == 'TRUE'


def _to_str(value) -> str:
    if value is None:
        return ''
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    return str(value)


def resolve_syntax(attribute_syntax: str, om_syntax: Optional[int], om_object_class=None) -> str:
    """Map attributeSyntax/oMSyntax/oMObjectClass to an ActiveDirectorySyntax name.

    Unknown combinations fall back to the raw attributeSyntax OID.
    """
    if isinstance(om_object_class, str):
        # Without a loaded server schema ldap3 decodes UTF-8-clean binary values
        om_object_class = om_object_class.encode('utf-8')
    if isinstance(om_object_class, bytes):
        om_object_class = om_object_class.hex().upper()

    for key in ((attribute_syntax, om_syntax, om_object_class or None),
                (attribute_syntax, om_syntax, None)):
        if key in SYNTAX_NAMES:
            return SYNTAX_NAMES[key]

    for (syntax, _, _), name in SYNTAX_NAMES.items():
        if syntax == attribute_syntax:
            return name

    return attribute_syntax or ''


def _partner_link_id(link_id: int) -> int:
    """Forward links have even IDs; the back link is the next odd ID."""
    return link_id + 1 if link_id % 2 == 0 else link_id - 1


def _batched(items: list, size: int) -> Iterable[list]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _or_filter(object_class: str, attribute: str, values: Iterable) -> str:
    terms = "".join(f"({attribute}={escape_filter_chars(str(v))})" for v in values)
    return f"(&(objectClass={object_class})(|{terms}))"


def _unique(names: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for name in names:
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


class SchemaAccessor:
    """Read-only handle on the forest schema.

    Usage:
        accessor = get_current_schema(LDAPConfig(domain="corp.local"))
        user = accessor.find_class("User")
        constructed = accessor.find_constructed_attribute_names()

    The accessor holds one bound connection and the schema naming context;
    every query runs against that context.
    """

    def __init__(
        self,
        connection: Connection,
        schema_dn: str,
        config: Optional[LDAPConfig] = None
    ):
        """Initialize the accessor.

        Args:
            connection: Bound ldap3 connection
            schema_dn: Distinguished name of the schema naming context
            config: LDAPConfig for search settings
        """
        self.connection = connection
        self.schema_dn = schema_dn
        self.config = config or LDAPConfig()

    @classmethod
    def connect(cls, config: LDAPConfig) -> "SchemaAccessor":
        """Bind to the directory and locate the schema naming context.

        Raises:
            SchemaUnavailableError: If no schema can be reached
        """
        host = config.host
        if not host:
            raise SchemaUnavailableError(
                "No directory context: specify a server (-s) or domain (-d)"
            )

        try:
            server = Server(
                host,
                port=config.port,
                use_ssl=config.use_ssl,
                get_info=DSA,
                connect_timeout=config.timeout
            )

            if config.username and config.password:
                if '\\' not in config.username and '@' not in config.username and config.domain:
                    ntlm_user = f"{config.domain.split('.')[0].upper()}\\{config.username}"
                else:
                    ntlm_user = config.username
                logger.info("[*] Connecting to %s:%s as %s", host, config.port, ntlm_user)
                connection = Connection(
                    server,
                    user=ntlm_user,
                    password=config.password,
                    authentication=NTLM,
                    auto_bind=True,
                    raise_exceptions=True,
                    receive_timeout=config.timeout
                )
            elif config.use_kerberos:
                logger.info("[*] Connecting to %s:%s with Kerberos", host, config.port)
                connection = Connection(
                    server,
                    authentication=SASL,
                    sasl_mechanism=KERBEROS,
                    auto_bind=True,
                    raise_exceptions=True,
                    receive_timeout=config.timeout
                )
            else:
                logger.info("[*] Connecting anonymously to %s:%s", host, config.port)
                connection = Connection(
                    server,
                    auto_bind=True,
                    raise_exceptions=True,
                    receive_timeout=config.timeout
                )
        except LDAPException as e:
            raise SchemaUnavailableError(f"Could not connect to {host}: {e}") from e

        info = connection.server.info
        contexts = info.other.get('schemaNamingContext') if info else None
        if not contexts:
            connection.unbind()
            raise SchemaUnavailableError(f"{host} did not advertise a schemaNamingContext")

        schema_dn = str(contexts[0])
        logger.info("[+] Connected to %s, schema at %s", host, schema_dn)
        return cls(connection, schema_dn, config)

    def _search(self, search_filter: str, attributes: list) -> list[dict]:
        """Paged search under the schema naming context.

        Returns:
            The attribute dicts of the matched entries
        """
        logger.debug("[*] Searching %s for %s", self.schema_dn, search_filter)
        response = self.connection.extend.standard.paged_search(
            search_base=self.schema_dn,
            search_filter=search_filter,
            search_scope=SUBTREE,
            attributes=attributes,
            paged_size=self.config.page_size,
            generator=False
        )
        return [
            entry['attributes'] for entry in response or []
            if entry.get('type') == 'searchResEntry'
        ]

    def _find_class_entry(self, name: str) -> Optional[dict]:
        entries = self._search(_or_filter('classSchema', 'lDAPDisplayName', [name]), CLASS_ATTRIBUTES)
        return entries[0] if entries else None

    def _parse_class(self, attrs: dict, mandatory=(), optional=()) -> SchemaClass:
        name = _to_str(_first(attrs, 'lDAPDisplayName'))
        return SchemaClass(
            name=name,
            common_name=_to_str(_first(attrs, 'cn')),
            sub_class_of=_to_str(_first(attrs, 'subClassOf')),
            mandatory_properties=tuple(mandatory),
            optional_properties=tuple(optional),
            auxiliary_classes=tuple(
                _to_str(v) for v in
                _values(attrs, 'auxiliaryClass') + _values(attrs, 'systemAuxiliaryClass')
            ),
            properties={
                'governsID': _to_str(_first(attrs, 'governsID')),
                'objectClassCategory': _to_int(_first(attrs, 'objectClassCategory')),
            }
        )

    def _parse_attribute(self, attrs: dict) -> AttributeDefinition:
        attribute_syntax = _to_str(_first(attrs, 'attributeSyntax'))
        om_syntax = _to_int(_first(attrs, 'oMSyntax'))
        search_flags = _to_int(_first(attrs, 'searchFlags')) or 0

        return AttributeDefinition(
            name=_to_str(_first(attrs, 'lDAPDisplayName')),
            common_name=_to_str(_first(attrs, 'cn')),
            oid=_to_str(_first(attrs, 'attributeID')),
            syntax=resolve_syntax(attribute_syntax, om_syntax, _first(attrs, 'oMObjectClass')),
            is_single_valued=_to_bool(_first(attrs, 'isSingleValued', False)),
            is_in_anr=bool(search_flags & SEARCH_FLAG_ANR),
            range_lower=_to_int(_first(attrs, 'rangeLower')),
            range_upper=_to_int(_first(attrs, 'rangeUpper')),
            link_id=_to_int(_first(attrs, 'linkID')),
            properties={
                'attributeSyntax': attribute_syntax,
                'oMSyntax': om_syntax,
                'searchFlags': search_flags,
                'systemFlags': _to_int(_first(attrs, 'systemFlags')),
            }
        )

    def _load_attributes(self, names: list[str]) -> dict[str, AttributeDefinition]:
        """Fetch attribute definitions by name, keyed by lowercased name."""
        definitions = {}
        for batch in _batched(names, FILTER_BATCH_SIZE):
            search_filter = _or_filter('attributeSchema', 'lDAPDisplayName', batch)
            for attrs in self._search(search_filter, ATTRIBUTE_ATTRIBUTES):
                definition = self._parse_attribute(attrs)
                definitions[definition.name.lower()] = definition

        linked = [d for d in definitions.values() if d.link_id is not None]
        if linked:
            partners = self._load_link_partners(
                _unique(str(_partner_link_id(d.link_id)) for d in linked)
            )
            for definition in linked:
                partner = partners.get(_partner_link_id(definition.link_id))
                if partner:
                    definitions[definition.name.lower()] = replace(definition, link=partner)

        return definitions

    def _load_link_partners(self, link_ids: list[str]) -> dict[int, str]:
        partners = {}
        for batch in _batched(link_ids, FILTER_BATCH_SIZE):
            search_filter = _or_filter('attributeSchema', 'linkID', batch)
            for attrs in self._search(search_filter, ['lDAPDisplayName', 'linkID']):
                link_id = _to_int(_first(attrs, 'linkID'))
                if link_id is not None:
                    partners[link_id] = _to_str(_first(attrs, 'lDAPDisplayName'))
        return partners

    def find_class(self, name: str) -> SchemaClass:
        """Resolve a class and all attributes it may or must carry.

        Walks subClassOf and the auxiliary classes up to top, so the result
        matches what the directory enforces for instances of the class.

        Raises:
            ClassNotFoundError: If no classSchema entry has this name
        """
        entry = self._find_class_entry(name)
        if entry is None:
            raise ClassNotFoundError(f"Class '{name}' was not found in the schema")

        must: list[str] = []
        may: list[str] = []
        pending = [entry]
        visited: set[str] = set()

        while pending:
            attrs = pending.pop(0)
            class_name = _to_str(_first(attrs, 'lDAPDisplayName'))
            if class_name.lower() in visited:
                continue
            visited.add(class_name.lower())

            must += [_to_str(v) for v in _values(attrs, 'mustContain') + _values(attrs, 'systemMustContain')]
            may += [_to_str(v) for v in _values(attrs, 'mayContain') + _values(attrs, 'systemMayContain')]

            related = [_to_str(_first(attrs, 'subClassOf', ''))]
            related += [_to_str(v) for v in _values(attrs, 'auxiliaryClass') + _values(attrs, 'systemAuxiliaryClass')]
            for related_name in related:
                if not related_name or related_name.lower() in visited:
                    continue
                related_entry = self._find_class_entry(related_name)
                if related_entry is None:
                    logger.warning("[!] %s refers to missing class %s", class_name, related_name)
                    continue
                pending.append(related_entry)

        must = _unique(must)
        mandatory_keys = {n.lower() for n in must}
        may = [n for n in _unique(may) if n.lower() not in mandatory_keys]

        definitions = self._load_attributes(must + may)
        for missing in (n for n in must + may if n.lower() not in definitions):
            logger.warning("[!] No attributeSchema entry for %s", missing)

        schema_class = self._parse_class(
            entry,
            mandatory=[definitions[n.lower()] for n in must if n.lower() in definitions],
            optional=[definitions[n.lower()] for n in may if n.lower() in definitions]
        )
        logger.debug(
            "[+] Resolved %s: %d mandatory, %d optional attributes",
            schema_class.name,
            len(schema_class.mandatory_properties),
            len(schema_class.optional_properties)
        )
        return schema_class

    def list_all_classes(self) -> list[SchemaClass]:
        """Enumerate every classSchema entry (name, common name, parent)."""
        entries = self._search("(objectClass=classSchema)", ['lDAPDisplayName', 'cn', 'subClassOf'])
        classes = [self._parse_class(attrs) for attrs in entries]
        logger.debug("[+] Found %d classes", len(classes))
        return classes

    def find_constructed_attribute_names(self) -> frozenset:
        """Names of all constructed attributes in the schema.

        Raises:
            ConstructedAttributeLookupError: If the search fails
        """
        try:
            entries = self._search(CONSTRUCTED_ATTRIBUTE_FILTER, ['lDAPDisplayName'])
        except LDAPException as e:
            raise ConstructedAttributeLookupError(
                f"Constructed attribute search failed: {e}"
            ) from e

        names = frozenset(_to_str(_first(attrs, 'lDAPDisplayName')) for attrs in entries)
        logger.debug("[+] Found %d constructed attributes", len(names))
        return names

    def disconnect(self) -> None:
        """Close the LDAP connection."""
        if self.connection:
            self.connection.unbind()
            self.connection = None


def get_current_schema(config: LDAPConfig) -> SchemaAccessor:
    """Obtain the schema handle for the run."""
    return SchemaAccessor.connect(config)
