"""Tests for record projection and ordering."""

from schemareport.analysis.property_extractor import extract_properties
from schemareport.model.projection import (
    ATTRIBUTE_FIELDS,
    CLASS_FIELDS,
    project_attribute,
    project_class,
    sort_by_name,
)
from schemareport.model.schemas import SchemaClass


class TestProjectAttribute:
    """Tests for the attribute projector."""

    def test_fields_and_order(self, sample_class):
        record = extract_properties(sample_class, frozenset())[0]
        projected = project_attribute(record)
        assert list(projected) == ATTRIBUTE_FIELDS
        assert ATTRIBUTE_FIELDS == [
            "Name", "CommonName", "OID", "Syntax", "Mandatory", "Constructed",
            "IsSingleValued", "IsInAnr", "RangeLower", "RangeUpper", "Link", "LinkId",
        ]

    def test_drops_directory_fields(self, sample_class):
        record = extract_properties(sample_class, frozenset())[0]
        assert "searchFlags" in record.to_dict()
        assert "searchFlags" not in project_attribute(record)

    def test_values(self, sample_class):
        records = extract_properties(sample_class, frozenset({"widgetId"}))
        widget_id = project_attribute(next(r for r in records if r.name == "widgetId"))
        assert widget_id["CommonName"] == "WIDGETID"
        assert widget_id["Mandatory"] is True
        assert widget_id["Constructed"] is True
        assert widget_id["IsSingleValued"] is True
        assert widget_id["RangeLower"] is None

    def test_idempotent(self, sample_class):
        for record in extract_properties(sample_class, frozenset({"description"})):
            once = project_attribute(record)
            assert project_attribute(once) == once


class TestProjectClass:
    """Tests for the class projector."""

    def test_fields_and_idempotence(self):
        schema_class = SchemaClass(
            name="user", common_name="User", sub_class_of="organizationalPerson",
            properties={"governsID": "1.2.840.113556.1.5.9"}
        )
        projected = project_class(schema_class)
        assert projected == {"Name": "user", "CommonName": "User", "SubClassOf": "organizationalPerson"}
        assert list(projected) == CLASS_FIELDS
        assert project_class(projected) == projected


class TestSortByName:
    """Tests for report ordering."""

    def test_ordinal_case_sensitive(self):
        records = [{"Name": "b"}, {"Name": "B"}, {"Name": "a"}, {"Name": "A1"}]
        assert [r["Name"] for r in sort_by_name(records)] == ["A1", "B", "a", "b"]

    def test_resorting_is_a_no_op(self, accessor):
        user = accessor.find_class("user")
        records = sort_by_name([project_attribute(r) for r in extract_properties(user, frozenset())])
        names = [r["Name"] for r in records]
        assert names == sorted(names)
        assert sort_by_name(records) == records
