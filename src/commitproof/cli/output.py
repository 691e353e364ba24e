"""Rich output formatting helpers for the commitproof CLI.

Status color mapping:
    MATCH / ACCEPTED = green, ALREADY_RECORDED = cyan,
    NO_RECORD / FAILED = yellow, MISMATCH / REJECTED = bold red,
    ERROR = magenta
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from commitproof.audit.log import AuditEntry
from commitproof.config import ConfigReport, RegistryConfig
from commitproof.core.hooks.installer import StepResult
from commitproof.core.record.models import AttestationRecord
from commitproof.core.verify.models import (
    RevisionComparison,
    VerificationResult,
    VerificationStatus,
)
from commitproof.registry.client import SubmissionResult, SubmissionStatus

_VERIFICATION_STYLES: dict[VerificationStatus, str] = {
    VerificationStatus.MATCH: "bold green",
    VerificationStatus.MISMATCH: "bold red",
    VerificationStatus.NO_RECORD: "yellow",
    VerificationStatus.ERROR: "magenta",
}

_SUBMISSION_STYLES: dict[SubmissionStatus, str] = {
    SubmissionStatus.ACCEPTED: "bold green",
    SubmissionStatus.ALREADY_RECORDED: "cyan",
    SubmissionStatus.FAILED: "yellow",
    SubmissionStatus.REJECTED: "bold red",
}

console = Console()


def short(revision_id: str) -> str:
    """Abbreviate a commit id for tables."""
    return revision_id[:12]


def verification_to_json(result: VerificationResult) -> dict[str, Any]:
    return {
        "revision_id": result.revision_id,
        "status": result.status.value,
        "local_fingerprint": result.local_fingerprint,
        "recorded_fingerprint": result.recorded_fingerprint,
        "record": result.record.to_payload() if result.record else None,
        "error": result.error or None,
    }


def submission_to_json(result: SubmissionResult) -> dict[str, Any]:
    return {
        "revision_id": result.revision_id,
        "status": result.status.value,
        "attempts": result.attempts,
        "receipt": result.receipt,
        "reason": result.reason,
        "status_code": result.status_code,
    }


def print_verification(result: VerificationResult) -> None:
    """Print a verification verdict. Mismatches get a loud red panel."""
    style = _VERIFICATION_STYLES[result.status]
    verdict = Text(result.status.name, style=style)
    header = Text.assemble(
        ("Revision: ", "bold"), (short(result.revision_id), ""),
        ("  Status: ", "bold"), verdict,
    )
    console.print(Panel(header, title="Verification Result"))
    console.print(f"  Local:    {result.local_fingerprint}")
    if result.recorded_fingerprint is not None:
        console.print(f"  Recorded: {result.recorded_fingerprint}")

    if result.status is VerificationStatus.MISMATCH:
        console.print(Panel(
            "[bold red]The codebase does not match its attestation record.\n"
            "History or file contents were changed after attestation.[/bold red]",
            title="TAMPERING DETECTED",
            border_style="red",
        ))
    elif result.status is VerificationStatus.ERROR:
        console.print(f"[magenta]Could not verify: {result.error}[/magenta]")
    elif result.status is VerificationStatus.NO_RECORD:
        console.print("[yellow]The registry holds no record for this revision.[/yellow]")
    else:
        console.print("[green]Fingerprint matches the attestation record.[/green]")


def print_verification_table(results: list[VerificationResult]) -> None:
    """Print a summary table for a bulk audit."""
    if not results:
        console.print("[dim]No revisions to verify.[/dim]")
        return
    table = Table(title="Attestation Audit", show_header=True, header_style="bold")
    table.add_column("Revision", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Author", style="dim")
    table.add_column("Recorded", style="dim")
    for result in results:
        style = _VERIFICATION_STYLES[result.status]
        record = result.record
        table.add_row(
            short(result.revision_id),
            Text(result.status.name, style=style),
            record.author if record else "-",
            record.timestamp if record else (result.error[:60] or "-"),
        )
    console.print(table)

    counts = {status: 0 for status in VerificationStatus}
    for result in results:
        counts[result.status] += 1
    console.print(
        f"[bold]{len(results)}[/bold] revisions | "
        f"[green]{counts[VerificationStatus.MATCH]} match[/green] | "
        f"[red]{counts[VerificationStatus.MISMATCH]} mismatch[/red] | "
        f"[yellow]{counts[VerificationStatus.NO_RECORD]} unrecorded[/yellow] | "
        f"[magenta]{counts[VerificationStatus.ERROR]} error[/magenta]"
    )


def print_submission(result: SubmissionResult) -> None:
    """Print the outcome of a submission."""
    style = _SUBMISSION_STYLES[result.status]
    header = Text.assemble(
        ("Revision: ", "bold"), (short(result.revision_id), ""),
        ("  Status: ", "bold"), Text(result.status.name, style=style),
    )
    console.print(Panel(header, title="Submission"))
    console.print(f"  Attempts: {result.attempts}")
    if result.receipt:
        console.print(f"  Receipt:  {result.receipt}")
    if result.reason:
        console.print(f"  Reason:   {result.reason}")


def print_record(record: AttestationRecord) -> None:
    table = Table(title="Attestation Record", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in record.to_payload().items():
        table.add_row(key, value)
    console.print(table)


def print_comparison(comparison: RevisionComparison) -> None:
    console.print(f"  {comparison.left}: {comparison.left_fingerprint}")
    console.print(f"  {comparison.right}: {comparison.right_fingerprint}")
    if comparison.identical:
        console.print("[yellow]Fingerprints are identical - no tracked content differs.[/yellow]")
    else:
        console.print("[green]Fingerprints differ - tracked content changed.[/green]")


def print_audit_entries(entries: list[AuditEntry]) -> None:
    if not entries:
        console.print("[dim]Audit log is empty.[/dim]")
        return
    table = Table(title="Audit Log", show_header=True, header_style="bold")
    table.add_column("Time", style="dim")
    table.add_column("Operation")
    table.add_column("Revision", style="bold")
    table.add_column("Attempt", justify="right")
    table.add_column("Outcome")
    table.add_column("Detail", style="dim")
    for entry in entries:
        table.add_row(
            entry.timestamp, entry.operation, short(entry.revision_id),
            str(entry.attempt), entry.outcome, entry.detail[:60],
        )
    console.print(table)


def print_config_report(config: RegistryConfig, report: ConfigReport) -> None:
    console.print(f"  Endpoint:     {config.endpoint or '-'}")
    console.print(f"  Timeout:      {config.timeout_seconds:g}s x {config.retry_attempts} attempt(s)")
    console.print(f"  Worst case:   {config.worst_case_seconds:g}s per operation")
    for error in report.errors:
        console.print(f"  [red]ERROR[/red]   {error}")
    for warning in report.warnings:
        console.print(f"  [yellow]WARNING[/yellow] {warning}")
    if report.ok:
        console.print(
            f"[green]Configuration valid[/green] with {len(report.warnings)} warning(s)"
        )
    else:
        console.print(f"[red]Configuration invalid[/red]: {len(report.errors)} error(s)")


def print_steps(steps: list[StepResult]) -> None:
    for step in steps:
        mark = "[green]ok[/green]" if step.ok else "[red]FAILED[/red]"
        console.print(f"  {mark:<20} {step.name}: {step.detail}")
