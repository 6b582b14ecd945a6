"""Pintu Kerja CLI: account administration and moderation from the shell."""

from __future__ import annotations

import functools
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from pintukerja import __version__, config
from pintukerja.moderation.errors import ModerationError, NotFoundError

console = Console()


class _Stores:
    """Stores and services rooted at one data directory."""

    def __init__(self, data_dir: Path) -> None:
        from pintukerja.auth.store import UserStore
        from pintukerja.moderation.requests import VerificationRequestStore
        from pintukerja.moderation.service import ModerationService
        from pintukerja.notifications import ModerationNotifier, NotificationStore
        from pintukerja.security.audit_log import AuditLogger

        self.users = UserStore(data_dir / "auth")
        self.audit = AuditLogger(data_dir / "audit_logs")
        self.requests = VerificationRequestStore(data_dir / "verification")
        self.moderation = ModerationService(
            self.users,
            audit=self.audit,
            notifier=ModerationNotifier(NotificationStore(data_dir / "notifications")),
        )


def _stores() -> _Stores:
    return _Stores(click.get_current_context().find_root().obj)


def _handle_errors(fn):
    """Print domain errors in red and exit non-zero instead of a traceback."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except ModerationError as exc:
            console.print(f"[red]{exc.code}:[/] {exc.message}")
            sys.exit(1)

    return wrapper


def _resolve(stores: _Stores, ref: str):
    """Find an account by id, falling back to username."""
    user = stores.users.get_user(ref) or stores.users.get_user_by_username(ref)
    if user is None:
        raise NotFoundError(f"Account '{ref}' not found")
    return user


def _state_label(user) -> str:
    status = user.verification_status.value
    return f"[red]blocked[/] ({status})" if user.is_blocked else status


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory (default: $PINTUKERJA_HOME or ~/.pintukerja)",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, data_dir: Path | None):
    """Pintu Kerja administration.

    Create accounts, moderate employers and job seekers, and inspect the
    admin activity log without going through the web API.
    """
    ctx.obj = data_dir if data_dir is not None else config.get_data_dir()


# ── Accounts ─────────────────────────────────────────────────────────


@main.group()
def accounts():
    """List, inspect and create accounts."""


@accounts.command(name="list")
@click.option("--role", default=None, help="job_seeker, employer or admin")
@click.option("--status", "verification_status", default=None, help="Verification status")
@click.option("--blocked/--not-blocked", default=None, help="Filter by block state")
@_handle_errors
def list_accounts(role: str | None, verification_status: str | None, blocked: bool | None):
    """List accounts with their moderation state."""
    stores = _stores()
    try:
        users = stores.users.list_users(
            role=role, verification_status=verification_status, blocked=blocked
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from None

    if not users:
        console.print("[yellow]No accounts found.[/]")
        return

    table = Table(title=f"Accounts ({len(users)})")
    table.add_column("Username", style="cyan")
    table.add_column("Role")
    table.add_column("State")
    table.add_column("ID", style="dim")
    for u in users:
        table.add_row(u.username, u.role.value, _state_label(u), u.id)
    console.print(table)


@accounts.command()
@click.argument("account")
@_handle_errors
def show(account: str):
    """Show ACCOUNT (id or username) and its moderation history."""
    user = _resolve(_stores(), account)

    console.print(f"\n[bold]{user.username}[/] ({user.role.value})")
    console.print(f"  ID: {user.id}")
    console.print(f"  Verification: {user.verification_status.value}")
    if user.rejection_reason:
        console.print(f"  Rejection reason: {user.rejection_reason}")
    if user.is_blocked:
        console.print(f"  [red]Blocked:[/] {user.block_reason}")

    if not user.moderation_history:
        console.print("\n[dim]No moderation history.[/]")
        return

    table = Table(title="Moderation history")
    table.add_column("When", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Reason")
    for e in user.moderation_history:
        table.add_row(e.timestamp[:19], e.action.value, e.from_state, e.to_state, e.reason or "")
    console.print(table)


@accounts.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--role", default="job_seeker", help="job_seeker, employer or admin")
@click.option("--email", default="")
@click.option("--company-name", default="")
@_handle_errors
def create(username: str, password: str, role: str, email: str, company_name: str):
    """Create an account. This is the only way to create admins."""
    user = _stores().users.register(
        username, password, role, email=email, company_name=company_name
    )
    console.print(
        f"[green]Created[/] {user.role.value} {user.username} "
        f"({user.verification_status.value}) id={user.id}"
    )


# ── Moderation ───────────────────────────────────────────────────────


@main.group()
def moderate():
    """Apply moderation commands as an admin."""


def _moderation_command(action: str, reason_required: bool, help_text: str):
    @moderate.command(name=action, help=help_text)
    @click.argument("account")
    @click.option("--admin", "admin_ref", required=True, help="Acting admin (id or username)")
    @click.option("--reason", default=None, required=reason_required, help="Reason shown to the account")
    @_handle_errors
    def command(account: str, admin_ref: str, reason: str | None):
        stores = _stores()
        target = _resolve(stores, account)
        admin = _resolve(stores, admin_ref)
        user = stores.moderation.apply(action, target.id, admin.id, reason)
        event = user.moderation_history[-1]
        console.print(
            f"[green]{action}[/] {user.username}: {event.from_state} -> {event.to_state}"
        )

    return command


_moderation_command("verify", False, "Mark ACCOUNT verified.")
_moderation_command("reject", True, "Reject ACCOUNT's verification (--reason required).")
_moderation_command("reopen", False, "Send ACCOUNT back to pending review.")
_moderation_command("block", True, "Block ACCOUNT (--reason required).")
_moderation_command("unblock", False, "Lift the block on ACCOUNT.")


# ── Verification requests ────────────────────────────────────────────


@main.group()
def requests():
    """Employer verification requests."""


@requests.command(name="list")
@click.option("--status", default=None, type=click.Choice(["pending", "approved", "rejected"]))
@_handle_errors
def list_requests(status: str | None):
    """List verification requests, newest first."""
    stores = _stores()
    items = stores.requests.list_requests(status=status)
    if not items:
        console.print("[yellow]No verification requests.[/]")
        return

    table = Table(title=f"Verification requests ({len(items)})")
    table.add_column("ID", style="dim")
    table.add_column("Account", style="cyan")
    table.add_column("Status")
    table.add_column("Notes")
    for r in items:
        subject = stores.users.get_user(r["subject_id"])
        table.add_row(
            r["id"], subject.username if subject else r["subject_id"], r["status"], r["notes"][:40]
        )
    console.print(table)


@requests.command()
@click.argument("request_id")
@click.option("--admin", "admin_ref", required=True, help="Acting admin (id or username)")
@click.option("--status", required=True, type=click.Choice(["approved", "rejected"]))
@click.option("--notes", default="", help="Review notes; required when rejecting")
@_handle_errors
def review(request_id: str, admin_ref: str, status: str, notes: str):
    """Approve or reject a pending verification request."""
    from pintukerja.moderation.requests import review_request

    stores = _stores()
    admin = _resolve(stores, admin_ref)
    decided = review_request(
        stores.requests, stores.moderation, request_id, admin.id, status, notes, audit=stores.audit
    )
    console.print(f"[green]Request {decided['status']}[/]")


# ── Audit ────────────────────────────────────────────────────────────


@main.group()
def audit():
    """Inspect the admin activity log."""


@audit.command(name="list")
@click.option("--actor", default=None, help="Filter by actor id")
@click.option("--action", default=None, help="e.g. account.block")
@click.option("--account", "resource_id", default=None, help="Filter by account id")
@click.option("--limit", default=50, show_default=True)
@_handle_errors
def list_audit(actor: str | None, action: str | None, resource_id: str | None, limit: int):
    """Show recent audit entries, newest first."""
    entries = _stores().audit.get_events(
        actor=actor, action=action, resource_id=resource_id, limit=limit
    )
    if not entries:
        console.print("[yellow]No audit entries.[/]")
        return

    table = Table(title=f"Audit log ({len(entries)})")
    table.add_column("When", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Resource")
    table.add_column("Reason")
    for e in entries:
        table.add_row(
            e.timestamp[:19], e.action, e.resource_id[:8], str(e.details.get("reason") or "")
        )
    console.print(table)


@audit.command()
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "csv"]))
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False), help="Write to file")
@click.option("--limit", default=10000, show_default=True)
@_handle_errors
def export(fmt: str, output: str | None, limit: int):
    """Export the audit log as JSON or CSV."""
    text = _stores().audit.export_events(fmt=fmt, limit=limit)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Audit log written to:[/] {output}")
    else:
        click.echo(text)


# ── Seed ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("seed_file", type=click.Path(exists=True, dir_okay=False))
@_handle_errors
def seed(seed_file: str):
    """Create accounts and replay moderation actions from a YAML file."""
    from pintukerja.seed import apply_seed, load_seed

    stores = _stores()
    result = apply_seed(load_seed(seed_file), stores.users, stores.moderation)
    console.print(
        f"[green]Seeded[/] {len(result.created)} created, "
        f"{len(result.skipped)} skipped, {len(result.applied)} moderation actions"
    )


if __name__ == "__main__":
    main()
