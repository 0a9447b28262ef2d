"""Tests for report rendering."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from actionscan.engines.action_resolver.aggregator import aggregate
from actionscan.engines.action_resolver.identity import parse_reference
from actionscan.engines.action_resolver.models import ActionNode, RootResult, ScanReport
from actionscan.report import render, render_json, render_text


def _report() -> ScanReport:
    c = ActionNode(parse_reference("org/c/sub@v2"))
    a = ActionNode(parse_reference("org/a@v1"))
    a.add_dependency(c)
    results = [
        RootResult("org/a@v1", node=a, dependencies=[c]),
        RootResult(
            "not-a-valid-ref",
            error="MalformedReferenceError: Invalid action reference: 'not-a-valid-ref'",
        ),
    ]
    return aggregate(results, 4, timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc))


class TestRenderText:
    def test_sections(self):
        text = render_text(_report())
        assert "# Recursive Action Scanner Report" in text
        assert "Generated: 2026-03-01T00:00:00+00:00" in text
        assert "- Root actions scanned: 2" in text
        assert "- Total unique actions found: 2" in text
        assert "- Max recursion depth: 4" in text

    def test_root_details(self):
        text = render_text(_report())
        assert "### org/a@v1\n- Status: Success\n- Dependencies found: 1" in text
        assert "  - org/c/sub@v2 (https://github.com/org/c/tree/v2/sub)" in text
        assert "### not-a-valid-ref\n- Status: Failed\n- Error: MalformedReferenceError" in text

    def test_unique_actions(self):
        text = render_text(_report())
        assert "## All Unique Actions (2)" in text
        assert "- org/a@v1 (ROOT)\n  https://github.com/org/a/tree/v1" in text
        assert "- org/c/sub@v2\n  https://github.com/org/c/tree/v2/sub" in text


class TestRenderJson:
    def test_round_trips_to_dict(self):
        report = _report()
        assert json.loads(render_json(report)) == report.to_dict()

    def test_failed_root(self):
        data = json.loads(render_json(_report()))
        failed = data["root_actions"][1]
        assert failed["success"] is False
        assert failed["dependencies"] == []
        assert failed["total_dependencies"] == 0


def test_render_dispatch():
    report = _report()
    assert render(report, "json") == render_json(report)
    assert render(report, "text") == render_text(report)
    with pytest.raises(ValueError):
        render(report, "xml")
