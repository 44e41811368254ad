"""Placeholder substitution tests."""

from datetime import date, datetime, timezone

from app.services.substitution import (
    BoolValue,
    DateValue,
    NumberValue,
    TextValue,
    substitute,
)


def test_pay_by_due_date():
    out = substitute(
        "Pay {{amount}} by {{due}}.",
        {"amount": NumberValue(500), "due": DateValue(date(2025, 1, 1))},
    )
    assert out == "Pay 500 by 2025-01-01."


def test_unknown_placeholder_left_verbatim():
    out = substitute("Hello {{name}}, ref {{ref_no}}", {"name": TextValue("Ada")})
    assert out == "Hello Ada, ref {{ref_no}}"


def test_none_value_left_verbatim():
    assert substitute("{{a}}", {"a": None}) == "{{a}}"


def test_repeated_placeholder_replaced_everywhere():
    out = substitute("{{p}} and {{p}} again: {{p}}", {"p": TextValue("X")})
    assert out == "X and X again: X"


def test_datetime_value_truncated_to_date():
    dt = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)
    assert substitute("{{d}}", {"d": DateValue(dt)}) == "2024-03-15"


def test_iso_string_truncated_like_date():
    assert substitute("{{d}}", {"d": TextValue("2024-03-15T00:00:00.000Z")}) == "2024-03-15"
    assert substitute("{{d}}", {"d": TextValue("2024-03-15")}) == "2024-03-15"


def test_any_date_prefixed_string_truncated():
    assert substitute("{{d}}", {"d": TextValue("2024-03-15 10:30:00")}) == "2024-03-15"
    assert substitute("{{d}}", {"d": TextValue("2024-03-15X")}) == "2024-03-15"
    assert substitute("{{d}}", {"d": TextValue("signed 2024-03-15")}) == "signed 2024-03-15"


def test_booleans_render_literally():
    assert substitute("{{t}}/{{f}}", {"t": BoolValue(True), "f": BoolValue(False)}) == "true/false"


def test_numbers_render_plain():
    values = {"a": NumberValue(1234567), "b": NumberValue(2.0), "c": NumberValue(0.25)}
    assert substitute("{{a}} {{b}} {{c}}", values) == "1234567 2 0.25"


def test_values_are_not_rescanned():
    values = {"a": TextValue("{{b}}"), "b": TextValue("boom")}
    assert substitute("{{a}}", values) == "{{b}}"


def test_second_pass_leaves_resolved_text_alone():
    values = {"x": TextValue("one"), "y": NumberValue(2)}
    source = "{{x}} {{y}} {{z}}"
    once = substitute(source, values)
    assert substitute(once, values) == once == "one 2 {{z}}"


def test_placeholder_shape():
    # Whitespace, punctuation, and non-ASCII letters are not placeholder names
    source = "{{ x }} {{x-y}} {{}} {{é}} {{ok_1}}"
    assert substitute(source, {"x": TextValue("!"), "ok_1": TextValue("yes")}) == (
        "{{ x }} {{x-y}} {{}} {{é}} yes"
    )


def test_typst_syntax_untouched():
    source = '#if {{isMutual}} [(Mutual)] else [(One-Way)]\n#let x = (a: {{n}})'
    out = substitute(source, {"isMutual": BoolValue(False), "n": NumberValue(3)})
    assert out == '#if false [(Mutual)] else [(One-Way)]\n#let x = (a: 3)'