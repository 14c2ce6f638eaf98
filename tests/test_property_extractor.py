"""Tests for mandatory/constructed flag extraction."""

from schemareport.analysis.property_extractor import extract_properties
from schemareport.model.schemas import AttributeRecord


class TestExtractProperties:
    """Tests for extract_properties."""

    def test_one_record_per_attribute(self, sample_class):
        records = extract_properties(sample_class, frozenset())
        assert len(records) == 5
        assert all(isinstance(r, AttributeRecord) for r in records)

    def test_mandatory_flag_follows_origin(self, sample_class):
        records = extract_properties(sample_class, frozenset())
        mandatory = {r.name for r in records if r.mandatory}
        assert mandatory == {"objectClass", "widgetId"}
        assert sum(1 for r in records if not r.mandatory) == 3

    def test_constructed_iff_in_name_set(self, sample_class):
        constructed = frozenset({"allowedChildClasses", "widgetId", "notOnThisClass"})
        records = extract_properties(sample_class, constructed)

        for record in records:
            assert record.constructed == (record.name in constructed)

        # holds for mandatory and optional attributes alike
        flagged = {(r.name, r.mandatory) for r in records if r.constructed}
        assert flagged == {("widgetId", True), ("allowedChildClasses", False)}

    def test_empty_name_set_marks_nothing_constructed(self, sample_class):
        records = extract_properties(sample_class, frozenset())
        assert not any(r.constructed for r in records)

    def test_definitions_are_not_modified(self, sample_class):
        records = extract_properties(sample_class, frozenset({"description"}))
        description = next(r for r in records if r.name == "description")
        assert description.attribute is sample_class.optional_properties[0]
        assert "Constructed" not in description.attribute.to_dict()
        assert description.to_dict()["Constructed"] is True

    def test_class_with_resolved_attributes(self, accessor):
        user = accessor.find_class("user")
        constructed = accessor.find_constructed_attribute_names()
        records = extract_properties(user, constructed)

        assert len(records) == len(user.mandatory_properties) + len(user.optional_properties)
        assert {r.name for r in records if r.constructed} == {"canonicalName", "tokenGroups"}
