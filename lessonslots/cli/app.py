"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from pendulum import Date
from rich.console import Console
from rich.table import Table

from ..adapters.holiday_client import NagerHolidayClient
from ..adapters.json_slot_store import JsonSlotStore
from ..adapters.mock_holiday_client import MockHolidayClient
from ..config import AppConfig, AutoFillConfig, get_default_config_path
from ..domain.exceptions import SchedulingError
from ..domain.models import Slot, SlotKind, SlotStatus
from ..domain.week_generator import generate_week
from ..services.scheduling import SchedulingService

app = typer.Typer(
    name="lessonslots",
    help="Plan driving lessons: validate slots, auto-fill and copy weeks",
    add_completion=False
)

console = Console()

STATUS_STYLES = {
    SlotStatus.DRAFT: "magenta",
    SlotStatus.BOOKED: "yellow",
    SlotStatus.OPEN: "green",
    SlotStatus.BLOCKED: "red",
    SlotStatus.COMPLETED: "dim green",
    SlotStatus.CANCELLED: "dim red",
}

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
StoreOption = Annotated[Optional[Path], typer.Option("--store", help="Slot store JSON file (overrides config)")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use bundled holiday data instead of the public API.")]
WeekStartOption = Annotated[Optional[str], typer.Option("--week-start", "-w", help="First day of the week (YYYY-MM-DD). Defaults to this Monday.")]
NextWeekOption = Annotated[bool, typer.Option("--next-week", help="Use next week's Monday as week start.")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Lesson-slot scheduling for driving instructors.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load the given config file; without one, fall back to defaults when ./config.yaml is absent."""
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    config_path = get_default_config_path()
    if config_path.exists():
        return AppConfig.load_from_yaml(config_path)
    return AppConfig()


def _build_service(config: AppConfig, store: JsonSlotStore, mock: bool) -> SchedulingService:
    if mock:
        holiday_provider = MockHolidayClient()
    else:
        holiday_provider = NagerHolidayClient(
            country_code=config.holidays.country_code,
            base_url=config.holidays.api_url,
            timeout=config.holidays.timeout_seconds,
        )

    return SchedulingService(
        slot_store=store,
        holiday_provider=holiday_provider,
        profile=config.profile.to_profile_defaults(),
        timezone=config.timezone,
    )


def _determine_week_start(*, tz: str, week_start: Optional[str], next_week: bool) -> Date:
    """
    Resolve the first day of the target week from flags or an explicit date.
    """
    if week_start and next_week:
        console.print("[red]Error: --week-start and --next-week cannot be combined.[/red]")
        raise typer.Exit(1)

    if week_start:
        try:
            return pendulum.from_format(week_start, "YYYY-MM-DD").date()
        except ValueError as e:
            console.print(f"[red]Could not parse week start: {e}[/red]")
            raise typer.Exit(1)

    monday = pendulum.now(tz).start_of("week").date()
    return monday.add(days=7) if next_week else monday


def _slot_table(title: str, slots: List[Slot], show_ids: bool = False) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Time")
    table.add_column("Min.", justify="right")
    table.add_column("Status")
    table.add_column("Details", style="dim")
    if show_ids:
        table.add_column("Id", style="dim")

    for slot in slots:
        day = pendulum.from_format(slot.date, "YYYY-MM-DD")
        if slot.kind is SlotKind.BLOCK:
            details = slot.reason
        else:
            details = " · ".join(part for part in (slot.vehicle_type, slot.exam_center, slot.location, slot.student_id or "") if part)
        style = STATUS_STYLES.get(slot.status, "white")
        row = [
            f"{day.format('ddd DD.MM.YYYY')}",
            f"{slot.start_time} – {slot.end_time}",
            str(slot.duration),
            f"[{style}]{slot.status.value}[/{style}]",
            details,
        ]
        if show_ids:
            row.append(slot.id or "")
        table.add_row(*row)
    return table


@app.command()
def check(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Length in minutes. Defaults to the profile lesson length.")] = None,
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
    mock: MockOption = False,
):
    """
    Check whether a slot may be placed, without saving it.

    Examples:

        lessonslots check 2024-11-26 17:00 --duration 45
    """
    try:
        config = _load_config(config_file)
        store = JsonSlotStore(store_file or config.store_path)
        service = _build_service(config, store, mock)

        validity = service.check_validity(
            date=date,
            start_time=time,
            duration=duration or config.profile.lesson_duration,
        )

        if validity.valid:
            console.print(f"[bold green]✓ {date} {time} is available.[/bold green]")
        else:
            console.print(f"[bold red]✗ {validity.message}[/bold red]")
            raise typer.Exit(2)

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def generate(
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
    mock: MockOption = False,
    week_start: WeekStartOption = None,
    next_week: NextWeekOption = False,
    start: Annotated[Optional[str], typer.Option("--start", help="Day start (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Day end (HH:MM)")] = None,
    double: Annotated[Optional[bool], typer.Option("--double/--single", help="Double lessons")] = None,
    skip_lunch: Annotated[Optional[bool], typer.Option("--skip-lunch/--no-skip-lunch", help="Keep 12:30-13:30 free")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show drafts without saving them.")] = False,
):
    """
    Auto-fill a week with draft lessons.

    Examples:

        lessonslots generate --next-week
        lessonslots generate --week-start 2024-11-25 --start 09:00 --end 18:00 --double
    """
    try:
        config = _load_config(config_file)

        overrides = {
            key: value for key, value in {
                "start_time": start,
                "end_time": end,
                "is_double": double,
                "skip_lunch": skip_lunch,
            }.items() if value is not None
        }
        if overrides:
            config.auto_fill = AutoFillConfig.model_validate(
                {**config.auto_fill.model_dump(), **overrides}
            )
        week_config = config.week_config()

        first_day = _determine_week_start(tz=config.timezone, week_start=week_start, next_week=next_week)
        store = JsonSlotStore(store_file or config.store_path)
        service = _build_service(config, store, mock)

        if dry_run:
            week_end = first_day.add(days=6)
            drafts = generate_week(
                first_day,
                week_config,
                store.list_slots(first_day, week_end),
                holidays=service.holidays_for([first_day, week_end]),
                now=service.now(),
            )
        else:
            drafts = service.generate_week(week_start=first_day, config=week_config)

        if not drafts:
            console.print("[yellow]⚠ No free positions found for this week.[/yellow]")
            return

        console.print()
        console.print(_slot_table(f"Drafts for week of {first_day.to_date_string()}", drafts))
        verb = "would be created" if dry_run else "created"
        console.print(f"\n[bold green]✓ {len(drafts)} draft(s) {verb}.[/bold green]\n")

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("copy-week")
def copy_week(
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
    mock: MockOption = False,
    week_start: WeekStartOption = None,
):
    """
    Copy a week's slots to the following week as drafts.
    """
    try:
        config = _load_config(config_file)
        first_day = _determine_week_start(tz=config.timezone, week_start=week_start, next_week=False)
        store = JsonSlotStore(store_file or config.store_path)
        service = _build_service(config, store, mock)

        result = service.copy_week_forward(week_start=first_day)

        style = "green" if not result.skipped.total else "yellow"
        console.print(f"\n[bold {style}]{result.summary()}[/bold {style}]\n")

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def publish(
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
    week_start: WeekStartOption = None,
    next_week: NextWeekOption = False,
):
    """
    Publish all drafts of a week.
    """
    try:
        config = _load_config(config_file)
        first_day = _determine_week_start(tz=config.timezone, week_start=week_start, next_week=next_week)
        store = JsonSlotStore(store_file or config.store_path)
        service = _build_service(config, store, mock=False)

        published = service.publish_drafts(start_date=first_day, end_date=first_day.add(days=6))
        console.print(f"\n[bold green]✓ {len(published)} draft(s) published.[/bold green]\n")

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("list")
def list_slots(
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
    week_start: WeekStartOption = None,
    next_week: NextWeekOption = False,
    show_ids: Annotated[bool, typer.Option("--ids", help="Include slot ids (for delete).")] = False,
):
    """
    Show the slots of a week.
    """
    try:
        config = _load_config(config_file)
        first_day = _determine_week_start(tz=config.timezone, week_start=week_start, next_week=next_week)
        store = JsonSlotStore(store_file or config.store_path)

        slots = store.list_slots(first_day, first_day.add(days=6))
        if not slots:
            console.print("[yellow]No slots in this week.[/yellow]")
            return

        console.print()
        console.print(_slot_table(f"Week of {first_day.to_date_string()}", slots, show_ids=show_ids))
        console.print()

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def available(
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
    mock: MockOption = False,
    week_start: WeekStartOption = None,
    next_week: NextWeekOption = False,
):
    """
    Show the slots students can still book in a week.
    """
    try:
        config = _load_config(config_file)
        first_day = _determine_week_start(tz=config.timezone, week_start=week_start, next_week=next_week)
        store = JsonSlotStore(store_file or config.store_path)
        service = _build_service(config, store, mock)

        slots = service.available_slots(start_date=first_day, end_date=first_day.add(days=6))
        if not slots:
            console.print("[yellow]No bookable slots in this week.[/yellow]")
            return

        console.print()
        console.print(_slot_table(f"Bookable slots, week of {first_day.to_date_string()}", slots))
        console.print()

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def suggest(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    hour: Annotated[int, typer.Argument(min=0, max=23, help="Clicked hour (0-23)")],
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
    mock: MockOption = False,
):
    """
    Suggest a start time for a new slot in the given hour.

    Examples:

        lessonslots suggest 2024-11-26 14
    """
    try:
        config = _load_config(config_file)
        store = JsonSlotStore(store_file or config.store_path)
        service = _build_service(config, store, mock)

        start_time = service.suggest_start_time(date=date, clicked_hour=hour)
        console.print(f"[bold cyan]{date} {start_time}[/bold cyan]")

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def delete(
    slot_id: Annotated[str, typer.Argument(help="Id of the slot to remove")],
    config_file: ConfigOption = None,
    store_file: StoreOption = None,
):
    """
    Remove a slot from the store.
    """
    try:
        config = _load_config(config_file)
        store = JsonSlotStore(store_file or config.store_path)

        if not store.delete(slot_id):
            console.print(f"[yellow]No slot with id {slot_id}.[/yellow]")
            raise typer.Exit(1)
        console.print(f"[bold green]✓ Slot {slot_id} deleted.[/bold green]")

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def holidays(
    year: Annotated[Optional[int], typer.Option("--year", "-y", help="Year to show. Defaults to the current year.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List public holidays (restricted zones do not apply on these days).
    """
    try:
        config = _load_config(config_file)
        target_year = year or pendulum.now(config.timezone).year

        if mock:
            client = MockHolidayClient()
        else:
            client = NagerHolidayClient(
                country_code=config.holidays.country_code,
                base_url=config.holidays.api_url,
                timeout=config.holidays.timeout_seconds,
            )
        holiday_map = client.get_holidays([target_year])

        table = Table(
            title=f"Public holidays {target_year} ({config.holidays.country_code})",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Date", style="bold yellow")
        table.add_column("Name", style="dim")
        for date_str, name in sorted(holiday_map.items()):
            table.add_row(date_str, name)

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]lessonslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
