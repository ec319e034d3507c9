"""Command-line interface for the growth advisor."""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .advisor import (
    AdvisorSession,
    DataAggregator,
    DEFAULT_FEATURE_TOGGLES,
    FeatureToggleStore,
    GoalStore,
    LoggingNotificationSink,
    OverrideField,
    OverrideStore,
    ReportGenerator,
    SessionState,
    WidgetLayoutStore,
)
from .config import Settings
from .database import InMemoryStudentRepository, StudentRepository, create_kv_store, load_demo_repository
from .errors import AdvisorError, NotFoundError
from .models import MoveDirection

app = typer.Typer(
    name="growth-advisor",
    help="Growth Advisor - personalized student growth reports",
    add_completion=False,
)
widgets_app = typer.Typer(help="Manage the report widget layout.")
override_app = typer.Typer(help="Override generated report content.")
goal_app = typer.Typer(help="Manage a student's current goal.")
features_app = typer.Typer(help="Manage optional features.")
app.add_typer(widgets_app, name="widgets")
app.add_typer(override_app, name="override")
app.add_typer(goal_app, name="goal")
app.add_typer(features_app, name="features")

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Configure root logging once for the process."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


class _Context:
    """Lazily wired components for one CLI invocation."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.kv_store = create_kv_store(settings.storage.backend, settings.storage.path)
        self.overrides = OverrideStore(self.kv_store)
        self.goals = GoalStore(self.kv_store)
        self.toggles = FeatureToggleStore(self.kv_store)

    def repository(self) -> StudentRepository:
        if self.settings.app.data_file:
            return InMemoryStudentRepository.from_yaml(self.settings.app.data_file)
        return load_demo_repository()

    def layout(self, student_id: str) -> WidgetLayoutStore:
        layout = WidgetLayoutStore(self.kv_store, self.overrides, self.toggles)
        layout.load(student_id)
        return layout


def _context() -> _Context:
    try:
        return _Context(Settings.load())
    except (AdvisorError, ValueError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override ADVISOR_LOG_LEVEL"),
):
    """Growth Advisor command-line tools."""
    try:
        settings = Settings.load()
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1)
    setup_logging(log_level or settings.app.effective_log_level(), settings.app.log_file)


@app.command()
def version():
    """Show version information."""
    app_config = Settings.load().app

    console.print(Panel.fit(
        f"[bold blue]{app_config.name}[/bold blue]\n"
        f"Version: [green]{app_config.version}[/green]",
        title="Version Info"
    ))


@app.command()
def summary(student_id: str = typer.Argument(..., help="Student id, e.g. S005")):
    """Print the compiled student summary sent to the generation service."""
    ctx = _context()
    try:
        student_summary = DataAggregator(ctx.repository()).compile(student_id)
    except NotFoundError:
        console.print(f"[red]Student profile not found: {student_id}[/red]")
        raise typer.Exit(code=1)

    console.print(Panel(student_summary.to_prompt_text(), title=f"Summary for {student_id}"))


@app.command()
def report(student_id: str = typer.Argument(..., help="Student id, e.g. S005")):
    """Generate a growth report and print the visible sections."""
    ctx = _context()
    session = AdvisorSession(
        student_id=student_id,
        aggregator=DataAggregator(ctx.repository()),
        generator=ReportGenerator.from_settings(ctx.settings.llm, ctx.settings.app.prompt_templates_dir),
        layout=WidgetLayoutStore(ctx.kv_store, ctx.overrides, ctx.toggles),
        overrides=ctx.overrides,
        goals=ctx.goals,
        notifications=LoggingNotificationSink(),
    )

    console.print("[yellow]Generating growth report...[/yellow]")
    try:
        state = asyncio.run(session.start())
    finally:
        session.close()

    if state != SessionState.READY:
        console.print(f"[red]{session.error_message}[/red]")
        raise typer.Exit(code=1)

    for section in session.sections():
        console.print(Panel(_render_content(section.content), title=section.display_name))


def _render_content(content) -> str:
    if content is None:
        return "-"
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        return "\n".join(f"{key}: {_render_content(value)}" for key, value in content.items())
    if isinstance(content, (list, tuple)):
        if not content:
            return "-"
        return "\n".join(f"- {_render_content(item)}" for item in content)
    if hasattr(content, "model_dump"):
        return ", ".join(f"{k}={v}" for k, v in content.model_dump(exclude_none=True).items())
    return str(content)


def _print_layout(widgets):
    table = Table(title="Widget Layout")
    table.add_column("Order", justify="right")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Visible")
    for widget in widgets:
        table.add_row(
            str(widget.order),
            widget.id,
            widget.display_name,
            "[green]yes[/green]" if widget.is_visible else "[dim]no[/dim]"
        )
    console.print(table)


@widgets_app.command("list")
def widgets_list(student_id: str = typer.Argument(...)):
    """Show the widget layout, hidden widgets included."""
    _print_layout(_context().layout(student_id).snapshot())


def _set_visibility(student_id: str, widget_id: str, visible: bool):
    layout = _context().layout(student_id)
    try:
        layout.set_visibility(widget_id, visible)
    except KeyError:
        console.print(f"[red]Unknown widget: {widget_id}[/red]")
        raise typer.Exit(code=1)
    _print_layout(layout.snapshot())


@widgets_app.command("show")
def widgets_show(student_id: str = typer.Argument(...), widget_id: str = typer.Argument(...)):
    """Make a widget visible."""
    _set_visibility(student_id, widget_id, True)


@widgets_app.command("hide")
def widgets_hide(student_id: str = typer.Argument(...), widget_id: str = typer.Argument(...)):
    """Hide a widget."""
    _set_visibility(student_id, widget_id, False)


@widgets_app.command("move")
def widgets_move(
    student_id: str = typer.Argument(...),
    widget_id: str = typer.Argument(...),
    direction: MoveDirection = typer.Argument(..., help="up or down"),
):
    """Move a widget one position up or down."""
    layout = _context().layout(student_id)
    try:
        _print_layout(layout.move(widget_id, direction))
    except KeyError:
        console.print(f"[red]Unknown widget: {widget_id}[/red]")
        raise typer.Exit(code=1)


@widgets_app.command("reset")
def widgets_reset(student_id: str = typer.Argument(...)):
    """Restore the default layout and clear content overrides."""
    layout = _context().layout(student_id)
    _print_layout(layout.restore_defaults(student_id))
    console.print("[green]Layout restored to defaults; overrides cleared.[/green]")


@override_app.command("set")
def override_set(
    student_id: str = typer.Argument(...),
    field: OverrideField = typer.Argument(..., help="growthSummary, strengths or focusAreas"),
    value: str = typer.Argument(..., help="Text, or comma-separated items for list fields"),
):
    """Override one generated report field."""
    stored = _context().overrides.set(student_id, field, value)
    console.print(f"[green]{field.value} override saved:[/green] {stored}")


@override_app.command("show")
def override_show(student_id: str = typer.Argument(...)):
    """Show the overrides set for a student."""
    overrides = _context().overrides
    table = Table(title=f"Overrides for {student_id}")
    table.add_column("Field")
    table.add_column("Value")
    for field in OverrideField:
        value = overrides.get(student_id, field)
        table.add_row(field.value, "[dim]not set[/dim]" if value is None else str(value))
    console.print(table)


@goal_app.command("set")
def goal_set(student_id: str = typer.Argument(...), text: str = typer.Argument(...)):
    """Set the student's current goal."""
    try:
        goal = _context().goals.set(student_id, text)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Goal set:[/green] {goal}")


@goal_app.command("show")
def goal_show(student_id: str = typer.Argument(...)):
    """Show the student's current goal."""
    goal = _context().goals.get(student_id)
    console.print(goal if goal else "[dim]No goal set.[/dim]")


@features_app.command("list")
def features_list():
    """Show optional feature flags."""
    toggles = _context().toggles.get()
    table = Table(title="Features")
    table.add_column("Feature")
    table.add_column("Enabled")
    for name, enabled in toggles.items():
        table.add_row(name, "[green]on[/green]" if enabled else "[dim]off[/dim]")
    console.print(table)


@features_app.command("set")
def features_set(
    feature: str = typer.Argument(..., help=", ".join(DEFAULT_FEATURE_TOGGLES)),
    enabled: bool = typer.Option(..., "--enable/--disable"),
):
    """Turn an optional feature on or off."""
    try:
        _context().toggles.set(feature, enabled)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]{feature} {'enabled' if enabled else 'disabled'}[/green]")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
