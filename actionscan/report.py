"""Render a ScanReport as markdown text or JSON."""

from __future__ import annotations

import json

from actionscan.engines.action_resolver.models import ScanReport


def render_json(report: ScanReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def render_text(report: ScanReport) -> str:
    summary = report.summary
    lines = [
        "# Recursive Action Scanner Report",
        f"Generated: {report.timestamp}",
        "",
        "## Summary",
        f"- Root actions scanned: {summary.total_root_actions}",
        f"- Total unique actions found: {summary.total_unique_actions}",
        f"- Max recursion depth: {summary.max_depth_used}",
        "",
        "## Root Actions",
    ]

    for root in report.root_actions:
        lines.append("")
        lines.append(f"### {root.reference}")
        if not root.success:
            lines.append("- Status: Failed")
            lines.append(f"- Error: {root.error}")
            continue
        lines.append("- Status: Success")
        lines.append(f"- Dependencies found: {root.total_dependencies}")
        if root.dependencies:
            lines.append("- Dependency tree:")
            for dep in root.dependencies:
                lines.append(f"  - {dep.full_name} ({dep.url})")

    lines.append("")
    lines.append(f"## All Unique Actions ({len(report.all_unique_actions)})")
    for action in report.all_unique_actions:
        marker = " (ROOT)" if action.is_root_action else ""
        lines.append(f"- {action.identity.full_name}{marker}")
        lines.append(f"  {action.identity.url}")

    return "\n".join(lines) + "\n"


def render(report: ScanReport, fmt: str) -> str:
    """Dispatch on *fmt* (``text`` or ``json``)."""
    if fmt == "json":
        return render_json(report)
    if fmt == "text":
        return render_text(report)
    raise ValueError(f"unknown report format: {fmt!r}")
