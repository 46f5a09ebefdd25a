"""Rules command - Inspect, validate and dry-run rule catalogs."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from approvalflow.application.approver_resolver import resolve_approvers
from approvalflow.application.catalog_loader import load_rule_catalog, load_users
from approvalflow.application.escalation import build_escalation_path
from approvalflow.application.rule_catalog import RuleCatalog
from approvalflow.application.settings import load_settings
from approvalflow.core.domain.approval_rule import ApprovalRule
from approvalflow.core.domain.enums import TaskPriority
from approvalflow.core.domain.errors import ConfigError
from approvalflow.core.domain.models import Task

app = typer.Typer(help="Rule catalog inspection")
console = Console()


def _load_catalog(ctx: typer.Context, rules: str | None) -> RuleCatalog:
    """Load the catalog from ``--rules``, the settings file, or the packaged default."""
    global_opts = ctx.obj or {}
    try:
        if rules is None:
            rules = load_settings(global_opts.get("config")).rules_path
        return load_rule_catalog(rules)
    except ConfigError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)


def _describe_approvers(rule: ApprovalRule) -> str:
    parts = []
    for spec in rule.approvers:
        label = spec.type.value
        if spec.identifier:
            label += f":{spec.identifier}"
        if spec.order is not None:
            label += f" #{spec.order}"
        if not spec.required:
            label += " (optional)"
        parts.append(label)
    return ", ".join(parts)


def _describe_condition(rule: ApprovalRule) -> str:
    condition = rule.condition.to_dict()
    return f"{condition['field']} {condition['operator']} {condition['value']!r}"


@app.command("list")
def list_hierarchies(
    ctx: typer.Context,
    rules: str = typer.Option(None, "--rules", "-r", help="Rule catalog YAML"),
):
    """List hierarchies and their rules in evaluation order."""
    catalog = _load_catalog(ctx, rules)

    if not catalog.hierarchies():
        console.print("[yellow]No hierarchies defined[/yellow]")
        return

    for hierarchy in catalog.hierarchies():
        status = "[green]active[/green]" if hierarchy.active else "[dim]inactive[/dim]"
        table = Table(title=f"{hierarchy.name or hierarchy.hierarchy_id} ({hierarchy.hierarchy_id})")
        table.add_column("Rule", style="cyan")
        table.add_column("Condition", style="white")
        table.add_column("Approvers", style="green")
        table.add_column("Type", style="magenta")
        table.add_column("Timeout (h)", style="dim")

        for rule in hierarchy.rules:
            timeout = rule.escalation_timeout_hours
            table.add_row(
                rule.rule_id,
                _describe_condition(rule),
                _describe_approvers(rule),
                rule.approval_type.value,
                str(timeout) if timeout is not None else "default",
            )

        console.print(table)
        console.print(f"  Status: {status}\n")


@app.command("validate")
def validate_catalog(
    path: Path = typer.Argument(..., help="Rule catalog YAML to validate"),
):
    """Validate a rule catalog file."""
    try:
        catalog = load_rule_catalog(path)
    except ConfigError as e:
        console.print(f"[red]Invalid catalog:[/red] {e.message}")
        raise typer.Exit(1)

    rule_count = sum(len(h.rules) for h in catalog.hierarchies())
    console.print(
        f"[green]OK[/green] {path}: {len(catalog.hierarchies())} hierarchies, {rule_count} rules"
    )


@app.command("match")
def match_task(
    ctx: typer.Context,
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, "--priority", help="Task priority"),
    value: float = typer.Option(None, "--value", help="Estimated value"),
    tags: str = typer.Option("", "--tags", help="Comma-separated task tags"),
    project: str = typer.Option("", "--project", help="Project id"),
    department: str = typer.Option(None, "--department", help="Task department"),
    requester: str = typer.Option(None, "--requester", help="Requester id to resolve approvers for"),
    directory: str = typer.Option(None, "--directory", help="Directory YAML for approver resolution"),
    rules: str = typer.Option(None, "--rules", "-r", help="Rule catalog YAML"),
):
    """Dry-run rule matching for a task description."""
    catalog = _load_catalog(ctx, rules)
    task = Task(
        task_id="dry-run",
        requester_id=requester or "",
        priority=priority,
        project_id=project,
        tags=[tag.strip() for tag in tags.split(",") if tag.strip()],
        department=department,
    )

    rule = catalog.match(task, value)
    if rule is None:
        console.print("[yellow]No rule matched - no approval required[/yellow]")
        return

    console.print(f"[bold]Matched rule:[/bold] [cyan]{rule.rule_id}[/cyan]")
    console.print(f"[bold]Condition:[/bold] {_describe_condition(rule)}")
    console.print(f"[bold]Approval type:[/bold] {rule.approval_type.value}")
    console.print(f"[bold]Required approvals:[/bold] {rule.required_approvals}")
    console.print(f"[bold]Approvers:[/bold] {_describe_approvers(rule)}")

    if not (requester and directory):
        return

    try:
        users = load_users(directory)
    except ConfigError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    requester_user = next((u for u in users if u.user_id == requester), None)
    if requester_user is None:
        console.print(f"[red]Requester not found in directory: {requester}[/red]")
        raise typer.Exit(1)

    resolved = resolve_approvers(rule.approvers, requester_user, users)
    if not resolved:
        console.print("[red]No approvers could be resolved[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]Resolved approvers:[/bold] {', '.join(u.user_id for u in resolved)}")
    escalation = build_escalation_path(requester_user, users)
    console.print(f"[bold]Escalation path:[/bold] {' -> '.join(escalation) or '(empty)'}")
