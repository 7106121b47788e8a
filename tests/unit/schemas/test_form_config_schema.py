import pytest

from scriptform.core.exceptions import InvalidFieldError
from scriptform.forms.script_form import FORM_CONFIG_VERSION, default_fields
from scriptform.schemas.form_config import (
    DatabaseSource,
    DividerField,
    FieldPatch,
    NumberField,
    OptionField,
    PlainField,
    StaticOptionsSource,
    TextareaField,
    merge_field_patch,
    parse_field,
)


@pytest.mark.unit
def test_parse_field_dispatches_on_type() -> None:
    field = parse_field(
        {
            "id": "people",
            "fieldKey": "peopleCount",
            "label": "People",
            "type": "number",
            "min": 1,
            "max": 10,
            "step": 1,
        },
    )

    assert isinstance(field, NumberField)
    assert field.field_key == "peopleCount"
    assert field.min_value == 1
    assert field.max_value == 10
    assert field.enabled is True
    assert field.required is False


@pytest.mark.unit
@pytest.mark.parametrize(
    ("field_type", "expected"),
    [
        ("text", PlainField),
        ("url", PlainField),
        ("voice", PlainField),
        ("textarea", TextareaField),
        ("textarea-voice", TextareaField),
        ("dropdown", OptionField),
        ("db-dropdown", OptionField),
        ("multi-select", OptionField),
        ("divider", DividerField),
    ],
)
def test_parse_field_variant_per_type(field_type: str, expected: type) -> None:
    field = parse_field({"id": "f", "fieldKey": "f", "label": "F", "type": field_type})
    assert isinstance(field, expected)


@pytest.mark.unit
def test_parse_field_rejects_min_on_divider() -> None:
    with pytest.raises(InvalidFieldError):
        parse_field({"id": "d", "fieldKey": "_d", "label": "Section", "type": "divider", "min": 1})


@pytest.mark.unit
def test_parse_field_rejects_rows_on_number() -> None:
    with pytest.raises(InvalidFieldError):
        parse_field({"id": "n", "fieldKey": "n", "label": "N", "type": "number", "rows": 3})


@pytest.mark.unit
def test_parse_field_rejects_unknown_type() -> None:
    with pytest.raises(InvalidFieldError):
        parse_field({"id": "x", "fieldKey": "x", "label": "X", "type": "checkbox"})


@pytest.mark.unit
def test_parse_field_rejects_table_outside_allow_list() -> None:
    with pytest.raises(InvalidFieldError):
        parse_field(
            {
                "id": "x",
                "fieldKey": "x",
                "label": "X",
                "type": "db-dropdown",
                "dataSource": {"type": "database", "table": "users"},
            },
        )


@pytest.mark.unit
def test_parse_field_rejects_min_greater_than_max() -> None:
    with pytest.raises(InvalidFieldError, match="min"):
        parse_field({"id": "n", "fieldKey": "n", "label": "N", "type": "number", "min": 5, "max": 1})


@pytest.mark.unit
def test_divider_may_be_flagged_required() -> None:
    field = parse_field({"id": "d", "fieldKey": "_d", "label": "Section", "type": "divider", "required": True})
    assert field.required is True
    assert field.is_divider


@pytest.mark.unit
def test_data_source_union_is_discriminated_by_type() -> None:
    field = parse_field(
        {
            "id": "possibility",
            "fieldKey": "shootPossibility",
            "label": "Possibility",
            "type": "dropdown",
            "dataSource": {"type": "hardcoded", "options": [{"value": "100", "label": "Sure"}]},
        },
    )

    assert isinstance(field.data_source, StaticOptionsSource)
    assert field.data_source.options[0].value == "100"


@pytest.mark.unit
def test_to_document_uses_camel_case_and_drops_empty_attributes() -> None:
    field = OptionField(
        id="industry",
        field_key="industryId",
        label="Industry",
        type="db-dropdown",
        data_source=DatabaseSource(table="industries"),
        required=True,
    )

    assert field.to_document() == {
        "id": "industry",
        "fieldKey": "industryId",
        "label": "Industry",
        "type": "db-dropdown",
        "dataSource": {"type": "database", "table": "industries"},
        "required": True,
        "order": 0,
        "enabled": True,
    }


@pytest.mark.unit
def test_number_field_serializes_bounds_under_short_names() -> None:
    document = NumberField(id="n", field_key="n", label="N", type="number", min_value=1, max_value=9).to_document()
    assert document["min"] == 1
    assert document["max"] == 9
    assert "minValue" not in document


@pytest.mark.unit
def test_default_fields_are_unique_and_complete() -> None:
    fields = default_fields()
    ids = [field.id for field in fields]
    keys = [field.field_key for field in fields]

    assert len(fields) == 17
    assert len(set(ids)) == len(ids)
    assert len(set(keys)) == len(keys)
    assert all(field.data_source is not None for field in fields if field.is_option_field)
    assert FORM_CONFIG_VERSION == "1.0.0"


@pytest.mark.unit
def test_default_fields_returns_fresh_objects() -> None:
    first = default_fields()
    first[0].label = "changed"
    assert default_fields()[0].label == "Industry"


@pytest.mark.unit
def test_merge_field_patch_keeps_unspecified_attributes() -> None:
    field = TextareaField(
        id="hook",
        field_key="hook",
        label="Hook",
        type="textarea-voice",
        required=True,
        rows=3,
        order=5,
    )

    merged = merge_field_patch(field, FieldPatch(required=False))

    assert merged.required is False
    assert merged.rows == 3
    assert merged.order == 5
    assert merged.label == "Hook"
    assert merged.type == "textarea-voice"


@pytest.mark.unit
def test_merge_field_patch_drops_attributes_of_previous_variant() -> None:
    field = TextareaField(id="notes", field_key="notes", label="Notes", type="textarea", rows=4)

    merged = merge_field_patch(field, FieldPatch(type="number", min_value=0))

    assert isinstance(merged, NumberField)
    assert merged.min_value == 0
    assert not hasattr(merged, "rows")


@pytest.mark.unit
def test_merge_field_patch_rejects_attribute_foreign_to_variant() -> None:
    field = PlainField(id="loc", field_key="location", label="Location", type="text")

    with pytest.raises(InvalidFieldError):
        merge_field_patch(field, FieldPatch(rows=2))


@pytest.mark.unit
def test_field_patch_cannot_change_id() -> None:
    with pytest.raises(ValueError):
        FieldPatch.model_validate({"id": "other"})


@pytest.mark.unit
def test_field_patch_accepts_camel_case_keys() -> None:
    patch = FieldPatch.model_validate({"fieldKey": "newKey", "helpText": "help"})
    assert patch.changes() == {"field_key": "newKey", "help_text": "help"}


@pytest.mark.unit
def test_pattern_rule_must_be_valid_regular_expression() -> None:
    with pytest.raises(InvalidFieldError, match="pattern"):
        parse_field(
            {
                "id": "code",
                "fieldKey": "code",
                "label": "Code",
                "type": "text",
                "validation": [{"type": "pattern", "value": "([a-z"}],
            },
        )

    field = parse_field(
        {
            "id": "code",
            "fieldKey": "code",
            "label": "Code",
            "type": "text",
            "validation": [{"type": "pattern", "value": "[A-Z]{3}"}],
        },
    )
    assert field.validation[0].value == "[A-Z]{3}"
