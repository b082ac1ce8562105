"""Output formatting for fare search and fare calendar results."""

import calendar as cal_mod
from datetime import date
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .extract import dig
from .itinerary import (
    all_segments,
    elapsed_minutes,
    legs,
    leg_segments,
    marketing_carrier,
    pricing_info,
    stop_count,
    total_fare,
    total_fare_currency,
)
from .models import FareCalendarResult

console = Console()


def format_money(amount: Optional[float], currency: Optional[str] = None) -> str:
    if amount is None:
        return "–"
    text = f"{amount:,.2f}"
    return f"{text} {currency}" if currency else text


def format_duration(minutes: int) -> str:
    if not minutes:
        return "N/A"
    return f"{minutes // 60}h {minutes % 60:02d}m"


def _hhmm(value: Optional[str]) -> str:
    if not value or len(value) < 16:
        return value or "–"
    return value[11:16]


def _route(itinerary: dict) -> str:
    parts = []
    for leg in legs(itinerary):
        segments = leg_segments(leg)
        if not segments:
            continue
        codes = [dig(segments[0], "DepartureAirport", "LocationCode") or "?"]
        codes += [dig(s, "ArrivalAirport", "LocationCode") or "?" for s in segments]
        parts.append("→".join(codes))
    return " / ".join(parts) or "–"


def _flight_numbers(itinerary: dict) -> str:
    numbers = []
    for seg in all_segments(itinerary):
        carrier = dig(seg, "MarketingAirline", "Code") or ""
        numbers.append(f"{carrier}{seg.get('FlightNumber', '')}")
    return ", ".join(numbers) or "–"


def print_search_results(itineraries: list[dict], title: str = "") -> None:
    """Print itineraries as a rich table (in the order given)."""
    if not itineraries:
        console.print(f"[dim]No flights found{' for ' + title if title else ''}.[/dim]")
        return

    if title:
        console.print(f"\n[bold blue]✈  {title}[/bold blue]")

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Airline", no_wrap=True)
    table.add_column("Flights")
    table.add_column("Route")
    table.add_column("Departs", no_wrap=True)
    table.add_column("Duration", justify="right")
    table.add_column("Stops", justify="center")
    table.add_column("Seats", justify="right")
    table.add_column("Baggage")
    table.add_column("Cabin", justify="center")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Markup", justify="right")

    for i, itinerary in enumerate(itineraries, start=1):
        pricing = pricing_info(itinerary) or {}
        segments = all_segments(itinerary)
        stops = stop_count(itinerary)
        stops_style = "green" if stops == 0 else ("yellow" if stops == 1 else "red")
        markup = pricing.get("Markup")
        markup_text = (
            f"+{markup['Amount']:,.2f} ({markup['Type']})" if isinstance(markup, dict) else "–"
        )
        table.add_row(
            str(i),
            marketing_carrier(itinerary) or "–",
            _flight_numbers(itinerary),
            _route(itinerary),
            _hhmm(segments[0].get("DepartureDateTime")) if segments else "–",
            format_duration(elapsed_minutes(itinerary)),
            Text("Direct" if stops == 0 else str(stops), style=stops_style),
            str(pricing.get("SeatsRemaining", "–")),
            pricing.get("Baggage") or "–",
            pricing.get("CabinCode") or "–",
            format_money(total_fare(itinerary), total_fare_currency(pricing)),
            markup_text,
        )

    console.print(table)
    total = len(itineraries)
    console.print(f"[dim]{total} itinerar{'ies' if total != 1 else 'y'} found.[/dim]\n")


def _price_style(amount: float, low: float, high: float) -> str:
    if amount <= low:
        return "bold green"
    if amount > high:
        return "red"
    return "yellow"


def print_calendar_view(result: FareCalendarResult) -> None:
    """Print a month grid with the cheapest fare for each day."""
    priced = sorted(f.amount for f in result.fares if f.amount is not None)
    if not result.fares:
        console.print("[dim]No results to display.[/dim]")
        return

    # Cheapest third green, most expensive third red.
    n = len(priced)
    low = priced[(n - 1) // 3] if n else 0.0
    high = priced[(2 * (n - 1)) // 3] if n else 0.0

    by_day = {f.date: f for f in result.fares}
    year, month = (int(p) for p in result.month.split("-"))

    table = Table(
        title=f"{result.origin} → {result.destination}  |  {cal_mod.month_name[month]} {year}  |  {result.cabin}",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
        show_lines=True,
    )
    for name in ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"):
        table.add_column(name, justify="center", min_width=9)

    for week in cal_mod.Calendar(firstweekday=0).monthdayscalendar(year, month):
        cells = []
        for day in week:
            if day == 0:
                cells.append("")
                continue
            entry = by_day.get(date(year, month, day).isoformat())
            if entry is None or entry.amount is None:
                cells.append(Text(f"{day}\n–", style="dim"))
            else:
                cells.append(Text(
                    f"{day}\n{entry.amount:,.0f}",
                    style=_price_style(entry.amount, low, high),
                ))
        table.add_row(*cells)

    console.print(table)

    best = result.best()
    if best is not None:
        console.print(
            f"[bold]Cheapest:[/bold] [green]{best.date}[/green] "
            f"at [bold green]{format_money(best.amount, best.currency)}[/bold green]"
        )
    console.print(f"[dim]{n}/{len(result.fares)} days priced.[/dim]\n")


def print_fare_rules(body: dict) -> None:
    rules = body.get("rules") or {}
    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Rule", style="bold cyan")
    table.add_column("Text")
    table.add_row("Cancellation", rules.get("cancellation") or "[dim]Not provided[/dim]")
    table.add_row("Date change", rules.get("dateChange") or "[dim]Not provided[/dim]")
    table.add_row("No-show", rules.get("noShow") or "[dim]Not provided[/dim]")
    codes = body.get("fareBasisCodes") or []
    table.add_row("Fare basis", ", ".join(codes) or "–")
    refundable = body.get("inferredRefundable")
    refundable_text = "Unknown" if refundable is None else ("Yes" if refundable else "No")
    if body.get("inferredSource"):
        refundable_text += f" (from {body['inferredSource']})"
    table.add_row("Refundable", refundable_text)
    console.print(table)
