"""skyfare CLI - GDS fare search, markup and fare calendar."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from . import rules as rules_mod
from .api import handle_baggage, handle_fare_calendar, handle_fare_rules, handle_flight_search
from .fare_calendar import FareCalendarAggregator
from .formatter import console, print_calendar_view, print_fare_rules, print_search_results
from .gds import SabreClient
from .models import FareCalendarEntry, FareCalendarResult
from .search import FlightSearchService

app = typer.Typer(
    name="skyfare",
    help="✈ Search GDS fares with markup, filters and a monthly fare calendar",
    rich_markup_mode="rich",
)

markup_app = typer.Typer(help="Markup rule commands")
app.add_typer(markup_app, name="markup")

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _set_verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _write_json(path: str, data) -> None:
    with open(path, "w") as fp:
        json.dump(data, fp, indent=2)
    console.print(f"[green]Results saved to {path} (JSON)[/green]")


def _parse_segments(raw: list[str]) -> list[dict]:
    """ORIGIN:DESTINATION:YYYY-MM-DD strings into segment dicts."""
    segments = []
    for item in raw:
        parts = item.split(":")
        if len(parts) != 3:
            console.print(f"[red]Invalid segment: {item}. Use ORIGIN:DESTINATION:YYYY-MM-DD[/red]")
            raise typer.Exit(1)
        segments.append({"origin": parts[0], "destination": parts[1], "date": parts[2]})
    return segments


def _read_pricing_info(path: Path) -> dict:
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        raise typer.Exit(1)
    # Accept a bare pricing-info block or a whole itinerary.
    if isinstance(data, dict) and "AirItineraryPricingInfo" in data:
        info = data["AirItineraryPricingInfo"]
        data = info[0] if isinstance(info, list) and info else info
    return data


@app.command()
def search(
    origin: Annotated[Optional[str], typer.Argument(help="Origin airport code (e.g. DAC)")] = None,
    destination: Annotated[Optional[str], typer.Argument(help="Destination airport code (e.g. JED)")] = None,
    departure_date: Annotated[Optional[str], typer.Argument(help="Departure date YYYY-MM-DD")] = None,
    return_date: Annotated[Optional[str], typer.Option("--return", "-r", help="Return date YYYY-MM-DD")] = None,
    segment: Annotated[Optional[list[str]], typer.Option("--segment", help="Multi-city leg ORIGIN:DESTINATION:YYYY-MM-DD (repeatable)")] = None,
    adults: Annotated[int, typer.Option("--adults", "-a", help="Adult passengers")] = 1,
    children: Annotated[int, typer.Option("--children", help="Child passengers")] = 0,
    infants: Annotated[int, typer.Option("--infants", help="Infant passengers")] = 0,
    cabin: Annotated[Optional[str], typer.Option("--class", "-c", help="Cabin: Economy, PremiumEconomy, Business, First")] = None,
    sort: Annotated[Optional[str], typer.Option("--sort", "-s", help="Sort: cheapest, fastest")] = None,
    stops: Annotated[Optional[str], typer.Option("--stops", help="Stops: direct, one, multi")] = None,
    airline: Annotated[Optional[list[str]], typer.Option("--airline", help="Only this marketing carrier (repeatable)")] = None,
    output: Annotated[Optional[str], typer.Option("-o", help="Output file path (JSON)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
):
    """
    🔍 Search priced itineraries with markup applied.

    Examples:

      skyfare search DAC JED 2025-07-15 --class Economy --sort cheapest

      skyfare search DAC DXB 2025-07-01 --return 2025-07-10 --stops direct --airline EK

      skyfare search --segment DAC:DXB:2025-07-01 --segment DXB:LHR:2025-07-05
    """
    _set_verbose(verbose)

    payload = {
        "origin": origin,
        "destination": destination,
        "departureDate": departure_date,
        "returnDate": return_date,
        "travellers": {"adults": adults, "children": children, "infants": infants, "cabin": cabin},
        "sortOption": sort,
        "filterStops": stops,
        "filterAirlines": {code.upper(): True for code in (airline or [])},
    }
    if segment:
        payload["tripType"] = "multicity"
        payload["segments"] = _parse_segments(segment)
    elif return_date:
        payload["tripType"] = "roundtrip"

    async def run():
        async with SabreClient() as gds:
            return await handle_flight_search(payload, FlightSearchService(gds))

    status, body = asyncio.run(run())

    if status != 200 or not body.get("success"):
        console.print(f"[red]⚠ {body.get('error', 'Search failed')}[/red]")
        raise typer.Exit(1)

    if output:
        _write_json(output, body)
        return

    if segment:
        title = " / ".join(s.upper() for s in segment)
    else:
        title = f"{origin.upper()} → {destination.upper()}  |  {departure_date}"
        if return_date:
            title += f" ↔ {return_date}"
    print_search_results(body["data"], title)


@app.command()
def calendar_view(
    origin: Annotated[str, typer.Argument(help="Origin airport code (e.g. DAC)")],
    destination: Annotated[str, typer.Argument(help="Destination airport code (e.g. JED)")],
    month: Annotated[str, typer.Argument(help="Month in YYYY-MM format")],
    cabin: Annotated[str, typer.Option("--class", "-c", help="Cabin class")] = "Economy",
    adults: Annotated[int, typer.Option("--adults", "-a", help="Adult passengers")] = 1,
    output: Annotated[Optional[str], typer.Option("-o", help="Output file path (JSON)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
):
    """
    📅 Show the cheapest fare for every day of a month.

    Examples:

      skyfare calendar-view DAC JED 2025-07

      skyfare calendar-view DAC DXB 2025-08 --class Business --adults 2
    """
    _set_verbose(verbose)

    console.print(f"[bold]Scanning {month} for {origin.upper()} → {destination.upper()}...[/bold]")

    async def run():
        async with SabreClient() as gds:
            aggregator = FareCalendarAggregator(gds)
            return await handle_fare_calendar(
                {"origin": origin, "destination": destination, "month": month,
                 "cabin": cabin, "adults": adults},
                aggregator,
            )

    status, body = asyncio.run(run())

    if status != 200 or not body.get("success"):
        console.print(f"[red]⚠ {body.get('error', 'Fare calendar failed')}[/red]")
        raise typer.Exit(1)

    if output:
        _write_json(output, body)
        return

    result = FareCalendarResult(
        origin=body["origin"],
        destination=body["destination"],
        month=body["month"],
        fares=[FareCalendarEntry(**f) for f in body["fares"]],
        cabin=cabin,
        adults=adults,
    )
    print_calendar_view(result)


@app.command()
def fare_rules(
    pricing_file: Annotated[Path, typer.Argument(help="JSON file with a pricing-info block or itinerary")],
):
    """📜 Show cancellation, date-change and no-show rules for a fare."""
    status, body = handle_fare_rules({"pricingInfo": _read_pricing_info(pricing_file)})
    if status != 200:
        console.print(f"[red]{body['error']}[/red]")
        raise typer.Exit(1)
    print_fare_rules(body)


@app.command()
def baggage(
    pricing_file: Annotated[Path, typer.Argument(help="JSON file with a pricing-info block or itinerary")],
):
    """🧳 Show the baggage allowance for a fare."""
    status, body = handle_baggage({"pricingInfo": _read_pricing_info(pricing_file)})
    if status != 200:
        console.print(f"[red]{body['error']}[/red]")
        raise typer.Exit(1)
    console.print(body["baggage"] or "[dim]No baggage information in this fare.[/dim]")


# ---------------------------------------------------------------------------
# Markup rules
# ---------------------------------------------------------------------------

@markup_app.command("add")
def markup_add(
    value: Annotated[float, typer.Argument(help="Markup value (percent or flat amount)")],
    markup_type: Annotated[str, typer.Option("--type", "-t", help="percentage or flat")] = "percentage",
    priority: Annotated[int, typer.Option("--priority", "-p", help="Higher is evaluated first")] = 0,
    airline: Annotated[Optional[list[str]], typer.Option("--airline", help="Carrier code (repeatable); none = all")] = None,
    origin: Annotated[Optional[str], typer.Option("--origin", help="Origin airport (stored, not matched)")] = None,
    inactive: Annotated[bool, typer.Option("--inactive", help="Create the rule disabled")] = False,
):
    """➕ Add a markup rule."""
    try:
        rule_id = rules_mod.add_rule(
            markup_type=markup_type,
            markup_value=value,
            priority=priority,
            airlines=airline,
            origin=origin,
            status="inactive" if inactive else "active",
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Markup rule #{rule_id} created.[/green]")


@markup_app.command("list")
def markup_list():
    """📋 List markup rules in evaluation order."""
    from rich import box
    from rich.table import Table

    from .markup import sort_rules

    stored = rules_mod.list_rules()
    if not stored:
        console.print("[dim]No markup rules configured.[/dim]")
        return

    table = Table(box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Airlines")
    table.add_column("Origin")
    table.add_column("Markup", justify="right")
    table.add_column("Status")
    for rule in sort_rules(stored):
        amount = f"{rule.markup_value:g}%" if rule.markup_type == "percentage" else f"{rule.markup_value:,.2f}"
        status_style = "green" if rule.is_active else "dim"
        table.add_row(
            rule.id,
            str(rule.priority),
            ", ".join(sorted(rule.airlines)) or "All Airlines",
            rule.origin or "Any",
            amount,
            f"[{status_style}]{rule.status}[/{status_style}]",
        )
    console.print(table)


@markup_app.command("enable")
def markup_enable(rule_id: Annotated[int, typer.Argument(help="Rule ID")]):
    """Activate a markup rule."""
    if not rules_mod.set_status(rule_id, "active"):
        console.print(f"[red]Markup rule #{rule_id} not found.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Markup rule #{rule_id} enabled.[/green]")


@markup_app.command("disable")
def markup_disable(rule_id: Annotated[int, typer.Argument(help="Rule ID")]):
    """Deactivate a markup rule without deleting it."""
    if not rules_mod.set_status(rule_id, "inactive"):
        console.print(f"[red]Markup rule #{rule_id} not found.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Markup rule #{rule_id} disabled.[/green]")


@markup_app.command("remove")
def markup_remove(rule_id: Annotated[int, typer.Argument(help="Rule ID")]):
    """Delete a markup rule."""
    if not rules_mod.remove_rule(rule_id):
        console.print(f"[red]Markup rule #{rule_id} not found.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Markup rule #{rule_id} removed.[/green]")


if __name__ == "__main__":
    app()
