"""
Class Property Extractor
========================

Turns a resolved SchemaClass into one AttributeRecord per attribute, flagged
with whether the class requires it and whether the directory computes it.
"""

from ..model.schemas import AttributeRecord, SchemaClass


def extract_properties(schema_class: SchemaClass, constructed_names: frozenset) -> list[AttributeRecord]:
    """Flag every mandatory and optional attribute of a class.

    Args:
        schema_class: Class resolved by SchemaAccessor.find_class
        constructed_names: Names from find_constructed_attribute_names

    Returns:
        Mandatory records followed by optional records; callers sort by name
    """
    records = [
        AttributeRecord(
            attribute=attribute,
            mandatory=True,
            constructed=attribute.name in constructed_names
        )
        for attribute in schema_class.mandatory_properties
    ]
    records += [
        AttributeRecord(
            attribute=attribute,
            mandatory=False,
            constructed=attribute.name in constructed_names
        )
        for attribute in schema_class.optional_properties
    ]
    return records
