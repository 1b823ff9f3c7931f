"""CLI interface for tasktrack."""

from __future__ import annotations

import json
import time
from datetime import datetime
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tasktrack import __version__
from tasktrack.config import CONFIG_FILE, TrackerConfig
from tasktrack.logging_setup import setup_logging
from tasktrack.models import (
    CATEGORIES,
    CATEGORY_LABELS,
    PRIORITIES,
    PRIORITY_LABELS,
    STATUS_LABELS,
    STATUSES,
    Task,
    TaskDraft,
)
from tasktrack.store import TaskStore
from tasktrack.timeutil import format_duration, format_time, is_overdue, relative_date

console = Console()

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%d %H:%M"]
SORT_FIELDS = {"priority": "priority", "due": "due_date", "created": "created_at"}

STATUS_STYLES = {
    "pending": "white",
    "in-progress": "yellow",
    "completed": "green",
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="tasktrack")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file path")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """tasktrack - Personal tasks with a built-in timer.

    \b
    Quick start:
      tasktrack add "Write report" -c work -p 1 --due 2025-01-31
      tasktrack start <id>     # Start the timer
      tasktrack stop <id>      # Stop it and log the time
      tasktrack today          # What's due
    """
    ctx.ensure_object(dict)
    try:
        config = TrackerConfig.load(config_path)
    except (json.JSONDecodeError, ValidationError) as e:
        path = config_path or CONFIG_FILE
        console.print(f"[red]Invalid config file:[/red] {escape(str(path))}")
        console.print(f"[dim]{escape(str(e).splitlines()[0])}[/dim]")
        ctx.exit(1)
    ctx.obj["config"] = config

    setup_logging(config.logging.level, config.logging.file)

    if "store" not in ctx.obj:
        ctx.obj["store"] = TaskStore.from_config(config)

    if config.seed_on_empty:
        from tasktrack.seed import seed_tasks

        seed_tasks(ctx.obj["store"])

    # If no subcommand, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _resolve(ctx: click.Context, task_id: str) -> Task:
    """Find a task by full ID or unique ID prefix, exiting if there's no match."""
    store: TaskStore = ctx.obj["store"]

    task = store.get(task_id)
    if task is not None:
        return task

    matches = [t for t in store.tasks if t.id.startswith(task_id)]
    if len(matches) == 1:
        return matches[0]

    if matches:
        console.print(
            f"[red]Ambiguous task ID:[/red] {escape(task_id)} matches {len(matches)} tasks"
        )
    else:
        console.print(f"[red]Task not found:[/red] {escape(task_id)}")
    ctx.exit(1)


def _clean_title(ctx: click.Context, title: str) -> str:
    title = title.strip()
    if not title:
        console.print("[red]Title cannot be empty.[/red]")
        ctx.exit(1)
    return title


def _due_cell(task: Task, now: datetime) -> Text:
    if task.due_date is None:
        return Text("-", style="dim")
    style = "red" if is_overdue(task, now) else "white"
    return Text(relative_date(task.due_date, now), style=style)


def _task_table(title: str, tasks: list[Task], store: TaskStore) -> Table:
    now = store.now()

    table = Table(title=title, show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Pri", style="dim", width=3)
    table.add_column("Title", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Status")
    table.add_column("Due")
    table.add_column("Est", style="dim", justify="right")
    table.add_column("Actual", justify="right")

    for task in tasks:
        actual = format_duration(task.actual_time_minutes)
        if task.is_timer_running:
            actual = f"{actual} [yellow]⏱ {format_time(store.elapsed_seconds(task.id))}[/yellow]"
        table.add_row(
            task.id,
            str(task.priority),
            Text(task.title),
            CATEGORY_LABELS[task.category],
            Text(STATUS_LABELS[task.status], style=STATUS_STYLES[task.status]),
            _due_cell(task, now),
            format_duration(task.estimated_time_minutes),
            actual,
        )

    return table


@main.command()
@click.argument("title")
@click.option("--description", "-d", default="", help="Free-text notes")
@click.option("--category", "-c", type=click.Choice(CATEGORIES), default="work")
@click.option("--priority", "-p", type=click.IntRange(1, 4), default=3, help="1 = urgent, 4 = low")
@click.option("--due", type=click.DateTime(formats=DATE_FORMATS), help="Due date")
@click.option("--estimate", "-e", type=click.IntRange(1, 480), default=30, help="Minutes")
@click.pass_context
def add(
    ctx: click.Context,
    title: str,
    description: str,
    category: str,
    priority: int,
    due: datetime | None,
    estimate: int,
) -> None:
    """Add a new task."""
    store: TaskStore = ctx.obj["store"]

    draft = TaskDraft(
        title=_clean_title(ctx, title),
        description=description,
        category=category,  # type: ignore[arg-type]
        priority=priority,  # type: ignore[arg-type]
        due_date=due,
        estimated_time_minutes=estimate,
    )
    task = store.add(draft)

    console.print(f"[green]Added task:[/green] {task.id} {escape(task.title)}")


@main.command("list")
@click.option("--category", "-c", type=click.Choice(["all", *CATEGORIES]), default="all")
@click.option(
    "--priority", "-p", type=click.Choice(["all", *map(str, PRIORITIES)]), default="all"
)
@click.option("--status", "-s", type=click.Choice(["all", *STATUSES]), default="all")
@click.option("--sort", "sort_by", type=click.Choice(list(SORT_FIELDS)), default="priority")
@click.option("--desc", is_flag=True, help="Reverse the sort order")
@click.pass_context
def list_command(
    ctx: click.Context,
    category: str,
    priority: str,
    status: str,
    sort_by: str,
    desc: bool,
) -> None:
    """List tasks, filtered and sorted."""
    from tasktrack.views import filter_and_sort

    store: TaskStore = ctx.obj["store"]

    tasks = filter_and_sort(
        store.tasks,
        category=category,  # type: ignore[arg-type]
        priority=priority if priority == "all" else int(priority),  # type: ignore[arg-type]
        status=status,  # type: ignore[arg-type]
        sort_field=SORT_FIELDS[sort_by],  # type: ignore[arg-type]
        direction="desc" if desc else "asc",
    )

    if not tasks:
        console.print("[dim]No tasks match.[/dim]")
        return

    console.print(_task_table(f"Tasks ({len(tasks)})", tasks, store))


@main.command()
@click.argument("task_id")
@click.pass_context
def show(ctx: click.Context, task_id: str) -> None:
    """Show one task in full."""
    store: TaskStore = ctx.obj["store"]
    task = _resolve(ctx, task_id)
    now = store.now()

    lines = [
        f"[cyan]ID:[/cyan] {task.id}",
        f"[cyan]Category:[/cyan] {CATEGORY_LABELS[task.category]}",
        f"[cyan]Priority:[/cyan] {task.priority} ({PRIORITY_LABELS[task.priority]})",
        f"[cyan]Status:[/cyan] {STATUS_LABELS[task.status]}",
        f"[cyan]Due:[/cyan] {relative_date(task.due_date, now) if task.due_date else '-'}",
        f"[cyan]Estimated:[/cyan] {format_duration(task.estimated_time_minutes)}",
        f"[cyan]Tracked:[/cyan] {format_duration(task.actual_time_minutes)}",
    ]
    if task.is_timer_running:
        lines.append(f"[yellow]Timer running:[/yellow] {format_time(store.elapsed_seconds(task.id))}")
    if task.completed_at:
        lines.append(f"[green]Completed:[/green] {task.completed_at:%Y-%m-%d %H:%M}")
    if task.description:
        lines.extend(["", escape(task.description)])

    console.print(Panel("\n".join(lines), title=escape(task.title)))


@main.command()
@click.argument("task_id")
@click.option("--title", "-t", help="New title")
@click.option("--description", "-d", help="New description")
@click.option("--category", "-c", type=click.Choice(CATEGORIES))
@click.option("--priority", "-p", type=click.IntRange(1, 4))
@click.option("--due", type=click.DateTime(formats=DATE_FORMATS), help="New due date")
@click.option("--no-due", is_flag=True, help="Remove the due date")
@click.option("--estimate", "-e", type=click.IntRange(1, 480), help="Minutes")
@click.option("--actual", type=click.IntRange(min=0), help="Correct tracked minutes")
@click.option("--status", "-s", type=click.Choice(STATUSES))
@click.pass_context
def edit(
    ctx: click.Context,
    task_id: str,
    title: str | None,
    description: str | None,
    category: str | None,
    priority: int | None,
    due: datetime | None,
    no_due: bool,
    estimate: int | None,
    actual: int | None,
    status: str | None,
) -> None:
    """Edit a task's fields."""
    store: TaskStore = ctx.obj["store"]
    task = _resolve(ctx, task_id)

    changes: dict = {}
    if title is not None:
        changes["title"] = _clean_title(ctx, title)
    if description is not None:
        changes["description"] = description
    if category is not None:
        changes["category"] = category
    if priority is not None:
        changes["priority"] = priority
    if no_due:
        changes["due_date"] = None
    elif due is not None:
        changes["due_date"] = due
    if estimate is not None:
        changes["estimated_time_minutes"] = estimate
    if actual is not None:
        changes["actual_time_minutes"] = actual
    if status is not None:
        changes["status"] = status

    if not changes:
        console.print("[yellow]Nothing to change.[/yellow]")
        return

    try:
        store.update(task.id, **changes)
    except ValidationError as e:
        console.print(f"[red]Invalid value:[/red] {e.errors()[0]['msg']}")
        ctx.exit(1)

    console.print(f"[green]Updated task:[/green] {task.id}")


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx: click.Context, task_id: str, yes: bool) -> None:
    """Delete a task."""
    store: TaskStore = ctx.obj["store"]
    task = _resolve(ctx, task_id)

    if not yes and not click.confirm(f"Delete '{task.title}'?"):
        console.print("[dim]Cancelled.[/dim]")
        return

    store.delete(task.id)
    console.print(f"[green]Deleted task:[/green] {task.id}")


@main.command()
@click.argument("task_id")
@click.pass_context
def toggle(ctx: click.Context, task_id: str) -> None:
    """Advance a task: To Do -> In Progress -> Done -> To Do."""
    store: TaskStore = ctx.obj["store"]
    task = _resolve(ctx, task_id)

    store.toggle_status(task.id)

    updated = store.get(task.id)
    assert updated is not None
    console.print(f"[cyan]{task.id}[/cyan] is now [bold]{STATUS_LABELS[updated.status]}[/bold]")


@main.command()
@click.argument("task_id")
@click.pass_context
def start(ctx: click.Context, task_id: str) -> None:
    """Start the timer on a task (stopping any other)."""
    store: TaskStore = ctx.obj["store"]
    task = _resolve(ctx, task_id)

    previous = store.active_timer_task_id
    if previous == task.id:
        console.print(f"[yellow]Timer already running on[/yellow] {task.id}")
        return

    store.start_timer(task.id)

    if previous is not None:
        stopped = store.get(previous)
        if stopped is not None:
            console.print(
                f"[dim]Stopped timer on {stopped.id} "
                f"({format_duration(stopped.actual_time_minutes)} tracked)[/dim]"
            )
    console.print(f"[green]Timer started:[/green] {escape(task.title)}")


@main.command()
@click.argument("task_id", required=False)
@click.pass_context
def stop(ctx: click.Context, task_id: str | None) -> None:
    """Stop a task's timer (the active one if no ID is given)."""
    store: TaskStore = ctx.obj["store"]

    if task_id is None:
        task_id = store.active_timer_task_id
        if task_id is None:
            console.print("[yellow]No timer is running.[/yellow]")
            return

    task = _resolve(ctx, task_id)
    if not task.is_timer_running:
        console.print(f"[yellow]No timer running on[/yellow] {task.id}")
        return

    before = task.actual_time_minutes
    store.stop_timer(task.id)

    updated = store.get(task.id)
    assert updated is not None
    console.print(
        f"[green]Timer stopped:[/green] +{format_duration(updated.actual_time_minutes - before)} "
        f"on {escape(task.title)} ({format_duration(updated.actual_time_minutes)} total)"
    )


@main.command()
@click.option("--watch", "-w", is_flag=True, help="Keep redrawing until the timer stops")
@click.pass_context
def timer(ctx: click.Context, watch: bool) -> None:
    """Show the running timer."""
    store: TaskStore = ctx.obj["store"]

    def render() -> Panel:
        task_id = store.active_timer_task_id
        task = store.get(task_id) if task_id else None
        if task is None:
            return Panel("[dim]No timer running[/dim]", title="Timer")
        return Panel(
            f"[bold yellow]{format_time(store.elapsed_seconds(task.id))}[/bold yellow]\n"
            f"[dim]{escape(task.title)}[/dim]",
            title="Timer",
        )

    if store.active_timer_task_id is None or not watch:
        console.print(render())
        return

    # The redraw only reads state; storage is re-read so a stop elsewhere ends the loop
    with Live(render(), console=console, refresh_per_second=4) as live:
        try:
            while store.active_timer_task_id is not None:
                time.sleep(1)
                store.reload()
                live.update(render())
        except KeyboardInterrupt:
            pass


@main.command()
@click.pass_context
def today(ctx: click.Context) -> None:
    """Show overdue, today's and upcoming tasks."""
    from tasktrack.views import partition_by_due

    store: TaskStore = ctx.obj["store"]
    partition = partition_by_due(store.tasks, store.now())

    if partition.overdue:
        console.print(_task_table("Overdue", partition.overdue, store))

    if partition.today:
        console.print(_task_table("Today", partition.today, store))
    else:
        console.print("[dim]Nothing due today.[/dim]")

    if partition.upcoming:
        console.print(_task_table("Upcoming", partition.upcoming, store))


@main.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show today's progress and the completion streak."""
    from tasktrack.views import dashboard_stats

    store: TaskStore = ctx.obj["store"]
    summary = dashboard_stats(store.tasks, store.now())

    table = Table(title="Dashboard", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_column("", style="dim")

    table.add_row(
        "Completed Today", str(summary.completed_today), f"{summary.completed_this_week} this week"
    )
    table.add_row("Time Tracked", format_duration(summary.total_time_today), "Today's focus time")
    table.add_row(
        "Pending Tasks", str(summary.pending_tasks), f"{summary.in_progress_tasks} in progress"
    )
    table.add_row("Current Streak", f"{summary.streak} days", "Keep it going!")

    console.print(table)


@main.command()
@click.pass_context
def analytics(ctx: click.Context) -> None:
    """Show time by category, the last 7 days, and estimates vs actuals."""
    from tasktrack.views import category_stats, estimate_vs_actual, weekly_activity

    store: TaskStore = ctx.obj["store"]
    tasks = store.tasks

    by_category = category_stats(tasks)
    total_minutes = sum(s.minutes for s in by_category)

    cat_table = Table(title="Time by Category", show_header=True)
    cat_table.add_column("Category", style="cyan")
    cat_table.add_column("Tasks", justify="right")
    cat_table.add_column("Time", justify="right")
    cat_table.add_column("Share", style="dim", justify="right")
    for stat in by_category:
        share = f"{stat.minutes / total_minutes:.0%}" if total_minutes else "-"
        cat_table.add_row(stat.name, str(stat.tasks), format_duration(stat.minutes), share)
    console.print(cat_table)

    week_table = Table(title="Weekly Progress", show_header=True)
    week_table.add_column("Day", style="cyan")
    week_table.add_column("Completed", justify="right")
    week_table.add_column("Time", justify="right")
    for day in weekly_activity(tasks, store.now()):
        week_table.add_row(day.day, str(day.completed), format_duration(day.minutes))
    console.print(week_table)

    comparisons = estimate_vs_actual(tasks)
    if not comparisons:
        console.print("[dim]Complete some tasks to see time comparison.[/dim]")
        return

    cmp_table = Table(title="Estimated vs Actual", show_header=True)
    cmp_table.add_column("Task", style="cyan")
    cmp_table.add_column("Estimated (min)", justify="right")
    cmp_table.add_column("Actual (min)", justify="right")
    for row in comparisons:
        style = "red" if row.actual > row.estimated else "green"
        cmp_table.add_row(
            Text(row.name), str(row.estimated), Text(str(row.actual), style=style)
        )
    console.print(cmp_table)


@main.command()
@click.pass_context
def seed(ctx: click.Context) -> None:
    """Add sample tasks to an empty task list."""
    from tasktrack.seed import seed_tasks

    store: TaskStore = ctx.obj["store"]
    added = seed_tasks(store)

    if added:
        console.print(f"[green]Added {added} sample tasks.[/green]")
    else:
        console.print("[yellow]Task list isn't empty; nothing added.[/yellow]")


@main.command("config")
@click.option("--init", "write", is_flag=True, help=f"Write defaults to {CONFIG_FILE}")
@click.pass_context
def config_command(ctx: click.Context, write: bool) -> None:
    """Show the active configuration."""
    config: TrackerConfig = ctx.obj["config"]

    if write:
        if CONFIG_FILE.exists():
            console.print(f"[yellow]Config already exists:[/yellow] {CONFIG_FILE}")
        else:
            config.save(CONFIG_FILE)
            console.print(f"[green]Wrote config:[/green] {CONFIG_FILE}")

    table = Table(title="Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Storage file", config.storage.path)
    table.add_row("Storage key", config.storage.key)
    table.add_row("Credit timer on complete", str(config.timer.commit_on_complete))
    table.add_row("Log level", config.logging.level)
    table.add_row("Log file", config.logging.file or "-")
    table.add_row("Seed on empty", str(config.seed_on_empty))
    console.print(table)


if __name__ == "__main__":
    main()
