"""Diagnostics report for a configuration run.

A run ends with at most one warning pointing here; the report lists every
duplicate configuration and every load failure recorded in the error log.
"""

from typing import List

from pydantic import BaseModel

from .state import ConfigState


class DuplicateEntry(BaseModel):
    plugin: str
    candidate: str


class FailureEntry(BaseModel):
    plugin: str
    candidate: str
    message: str


class HealthReport(BaseModel):
    """Snapshot of the error log.

    Attributes:
        ok: True when nothing was recorded.
        configured: Names marked configured so far, sorted.
        duplicate_configs_found: Extra configuration modules that were ignored.
        failed_to_load: Configuration units that raised while loading.
    """

    ok: bool
    configured: List[str]
    duplicate_configs_found: List[DuplicateEntry]
    failed_to_load: List[FailureEntry]


def build_health_report(state: ConfigState) -> HealthReport:
    errors = state.errors
    return HealthReport(
        ok=not errors.has_errors(),
        configured=sorted(state.configured),
        duplicate_configs_found=[
            DuplicateEntry(plugin=d.plugin, candidate=d.candidate)
            for d in errors.duplicate_configs_found
        ],
        failed_to_load=[
            FailureEntry(plugin=f.plugin, candidate=f.candidate, message=f.message)
            for f in errors.failed_to_load
        ],
    )


def format_health_report(report: HealthReport) -> List[str]:
    """Render the report as human-readable lines."""
    lines = ["Checking for duplicate configs"]
    if report.duplicate_configs_found:
        for entry in report.duplicate_configs_found:
            lines.append(f"  WARNING Found duplicate configs for {entry.plugin}: {entry.candidate}")
    else:
        lines.append("  OK No duplicate configs found")

    lines.append("Checking for load errors")
    if report.failed_to_load:
        for entry in report.failed_to_load:
            lines.append(
                f"  ERROR Failed to load {entry.candidate} for {entry.plugin}: {entry.message}"
            )
    else:
        lines.append("  OK No errors found")

    if report.ok:
        lines.append("OK Plugin configuration is healthy")
    else:
        issues = len(report.duplicate_configs_found) + len(report.failed_to_load)
        lines.append(f"WARNING {issues} issue(s) found")

    return lines
