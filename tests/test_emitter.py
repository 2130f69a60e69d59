"""Tests for row emission and the per-report wire format."""

import io
import json
import logging

import pytest

from reportgen import emitter
from reportgen.emitter import (
    GenerationSummary,
    report_key,
    serialize_row,
    write_report,
    write_reports,
)
from reportgen.exceptions import RowSerializationError
from reportgen.models import ReportDescriptor


def _report(name, *fields):
    return ReportDescriptor.model_validate(
        {"Name": name, "Fields": [{"ColName": c, "Type": t} for c, t in fields]}
    )


def _rows(text):
    """Split one report's output into (key, rows)."""
    lines = text.splitlines()
    assert lines[0] == "{"
    assert lines[1].endswith(":[")
    assert lines[-2:] == ["]", "}"]
    key = json.loads(lines[1][:-2])
    return key, [json.loads(line) for line in lines[2:-2]]


@pytest.mark.parametrize(
    "name, expected",
    [("user", "users"), ("Person", "Persons"), ("Address", "Addresss"), ("", "s")],
)
def test_report_key_appends_literal_s(name, expected):
    assert report_key(name) == expected


def test_serialize_row_is_compact_and_sorted():
    assert serialize_row({"b": 1, "a": "x", "c": True}) == '{"a":"x","b":1,"c":true}'


def test_serialize_row_accepts_floats():
    assert serialize_row({"amount": 1.5}) == '{"amount":1.5}'


@pytest.mark.parametrize("bad", [None, [1], {"a": 1}, b"bytes"])
def test_serialize_row_rejects_unsupported_values(bad):
    with pytest.raises(RowSerializationError) as excinfo:
        serialize_row({"col": bad})
    assert excinfo.value.details["column"] == "col"


def test_serialize_row_rejects_non_finite_floats():
    with pytest.raises(RowSerializationError):
        serialize_row({"amount": float("nan")})


def test_write_report_framing(rng):
    out = io.StringIO()
    written = write_report(_report("user", ("id", "int")), 3, out, rng)
    text = out.getvalue()

    assert written == 3
    assert text.startswith('{\n"users":[\n')
    assert text.endswith("]\n}\n")
    key, rows = _rows(text)
    assert key == "users"
    assert len(rows) == 3
    # rows are newline-delimited, never comma-separated
    assert "},{" not in text and "}\n{" in text


def test_write_report_rows_have_every_column(rng):
    report = _report(
        "Everything",
        ("s", "string"),
        ("i", "int"),
        ("l", "long"),
        ("d", "decimal"),
        ("t", "datetime"),
        ("b", "bool"),
        ("u", "money"),
    )
    out = io.StringIO()
    write_report(report, 25, out, rng)
    _, rows = _rows(out.getvalue())

    assert len(rows) == 25
    for row in rows:
        assert set(row) == {"s", "i", "l", "d", "t", "b", "u"}
        assert isinstance(row["s"], str) and 11 <= len(row["s"]) <= 20
        assert 0 <= row["i"] < 2**31
        assert 0 <= row["l"] < 2**63
        assert 0 <= row["d"] < 2**63 // 100
        assert isinstance(row["t"], str) and len(row["t"]) == 19
        assert isinstance(row["b"], bool)
        assert row["u"] == ""


@pytest.mark.parametrize("order", [0, -2])
def test_write_report_without_rows(rng, order):
    out = io.StringIO()
    assert write_report(_report("Empty", ("id", "int")), order, out, rng) == 0
    assert out.getvalue() == '{\n"Emptys":[\n]\n}\n'


def test_report_without_fields_emits_empty_objects(rng):
    out = io.StringIO()
    write_report(_report("Bare"), 2, out, rng)
    assert out.getvalue() == '{\n"Bares":[\n{}\n{}\n]\n}\n'


def test_report_name_is_escaped(rng):
    out = io.StringIO()
    write_report(_report('say "hi"'), 0, out, rng)
    key, _ = _rows(out.getvalue())
    assert key == 'say "hi"s'


def test_unknown_type_warns_once_per_report(rng, caplog):
    report = _report("Widget", ("id", "int"), ("mystery", "enum"))
    with caplog.at_level(logging.INFO):
        write_report(report, 50, io.StringIO(), rng)
    warnings = [r for r in caplog.records if "no generator for type:enum" in r.getMessage()]
    assert len(warnings) == 1
    assert any(r.getMessage() == "Report Name:Widget" for r in caplog.records)


def test_failed_row_is_skipped_and_logged(rng, caplog, monkeypatch):
    rows = iter([{"id": 1}, {"id": object()}, {"id": 3}])
    monkeypatch.setattr(emitter, "generate_row", lambda specs, source: next(rows))
    summary = GenerationSummary()
    out = io.StringIO()

    with caplog.at_level(logging.ERROR, logger="reportgen.emitter"):
        written = write_report(_report("Flaky", ("id", "int")), 3, out, rng, summary=summary)

    assert written == 2
    _, emitted = _rows(out.getvalue())
    assert emitted == [{"id": 1}, {"id": 3}]
    assert summary.rows_written == 2
    assert summary.rows_skipped == 1
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Skipping row" in errors[0].getMessage()
    assert "report=Flaky" in errors[0].getMessage()


def test_write_reports_concatenates_in_order(rng):
    reports = [_report("user", ("id", "int")), _report("order", ("total", "decimal"))]
    out = io.StringIO()
    summary = write_reports(reports, 2, out, rng)
    text = out.getvalue()

    assert summary.reports == 2
    assert summary.rows_written == 4
    assert summary.rows_skipped == 0
    first, second = text.split("}\n{\n", 1)
    assert first.startswith('{\n"users":[\n')
    assert second.startswith('"orders":[\n')
    assert text.index('"users"') < text.index('"orders"')
    assert text.endswith("]\n}\n")
