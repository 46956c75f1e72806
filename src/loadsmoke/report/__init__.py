from __future__ import annotations

from loadsmoke.report.summary import NO_SAMPLES_DIAGNOSTIC, Summary, advisory_warnings, render_summary

__all__ = ["NO_SAMPLES_DIAGNOSTIC", "Summary", "advisory_warnings", "render_summary"]
