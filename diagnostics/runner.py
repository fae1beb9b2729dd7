"""Run diagnostics probes and render their report."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from core.logging import logger as LOGGER
from diagnostics.models import DiagnosticResult, DiagnosticStatus


Probe = Callable[[], DiagnosticResult]


def format_results(results: Iterable[DiagnosticResult]) -> str:
    """Return a human-friendly diagnostics report."""

    results = list(results)
    lines = ["pathsense diagnostics", "-" * 60]
    for result in results:
        lines.append(f"[{result.status.value}] {result.name}: {result.details}")
    lines.append("-" * 60)
    lines.append(f"Overall: {overall_status(results).value}")
    return "\n".join(lines)


def overall_status(results: Iterable[DiagnosticResult]) -> DiagnosticStatus:
    worst = DiagnosticStatus.PASS
    for result in results:
        if result.status.severity > worst.severity:
            worst = result.status
    return worst


def run_diagnostics(probes: Iterable[Probe]) -> list[DiagnosticResult]:
    """Run every probe; a probe that raises is reported as FAIL and the rest still run."""

    results: list[DiagnosticResult] = []
    for probe in probes:
        try:
            result = probe()
        except Exception as exc:  # noqa: BLE001 - diagnostics must keep running
            LOGGER.exception("Probe failed: %s", probe)
            result = DiagnosticResult(
                name=getattr(probe, "__name__", "unknown_probe"),
                status=DiagnosticStatus.FAIL,
                details=f"Probe raised exception: {exc}",
            )
        results.append(result)
    return results
