"""Reporter — render a reconciliation result as text or JSON plus an exit code."""

from __future__ import annotations

import json

from indexcheck.models import ReconciliationResult

EXIT_PASS = 0
EXIT_FAIL = 1


def exit_code(result: ReconciliationResult) -> int:
    return EXIT_PASS if result.passed else EXIT_FAIL


def render(result: ReconciliationResult) -> tuple[str, int]:
    """Render a human-readable summary.

    Returns:
        ``(summary, exit_code)`` where exit code is 0 only when nothing is
        missing, not ready, or unexpected.
    """
    sections: list[list[str]] = []

    if result.missing:
        lines = ["Missing indexes:"]
        for d in result.missing:
            lines.append(
                f"- Collection: {d.collection_group}, Scope: {d.query_scope.value}, "
                f"Fields: {d.describe()}"
            )
        sections.append(lines)

    if result.not_ready:
        lines = ["Indexes not ready:"]
        for item in result.not_ready:
            d = item.expected
            lines.append(
                f"- Collection: {d.collection_group}, Scope: {d.query_scope.value}, "
                f"Fields: {d.describe()}, Current state: {item.observed.build_state.value}"
            )
        sections.append(lines)

    if result.unexpected:
        lines = ["Unexpected indexes found:"]
        for r in result.unexpected:
            lines.append(
                f"- Name: {r.name or '(unnamed)'}, Collection: {r.collection_group}, "
                f"Scope: {r.query_scope.value}, Fields: {r.describe()}, "
                f"State: {r.build_state.value}"
            )
        sections.append(lines)

    if result.passed:
        sections.append(
            [f"All {len(result.satisfied)} expected indexes are deployed and active."]
        )
    else:
        sections.append(["Index verification failed."])

    summary = "\n\n".join("\n".join(lines) for lines in sections)
    return summary, exit_code(result)


def render_json(result: ReconciliationResult) -> tuple[str, int]:
    """Render the result as indented JSON, with the same exit code as ``render``."""
    return json.dumps(result.to_dict(), indent=2), exit_code(result)
