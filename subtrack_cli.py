#!/usr/bin/env python3
"""
subtrack CLI - Command-line interface for the subscription-expense tracker

Usage:
    subtrack list                          - List subscriptions
    subtrack list --by-date                - Charges of the next 30 days by date
    subtrack alerts                        - Show upcoming renewals, trial ends, expirations
    subtrack stats                         - Show spending totals and breakdown
    subtrack stats --trend                 - Add monthly spending history
    subtrack add NAME AMOUNT               - Add a subscription
    subtrack pay ID                        - Mark a subscription as paid
    subtrack payments                      - List payments awaiting confirmation
    subtrack adjust ID PAYMENT_ID AMOUNT   - Adjust a pending payment
    subtrack confirm ID PAYMENT_ID         - Confirm a pending payment
    subtrack cancel ID                     - Cancel a subscription (reversible)
    subtrack reactivate ID                 - Reactivate a cancelled subscription
    subtrack delete ID                     - Delete a subscription permanently
    subtrack import FILE                   - Import subscriptions from JSON
    subtrack export [FILE]                 - Export subscriptions to JSON
    subtrack settings show|set             - Show or change settings
    subtrack categories list|add|remove    - Manage categories (also enable/disable)
    subtrack payment-methods ...           - Manage payment methods

Options:
    --json                                 - Output in JSON format for scripting
    --today YYYY-MM-DD                     - Evaluate as of another day
    --help                                 - Show help message
"""

import functools
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from subtrack import (
    Frequency,
    SubscriptionStatus,
    Urgency,
    __version__,
    create_subscription,
    format_currency,
    format_days_remaining,
    generate_alerts,
    monthly_trend,
    payments_by_date,
    spending_by_category,
    spending_summary,
)
from subtrack.categories import LabelTable
from subtrack.exceptions import SettingsError, SubtrackError
from subtrack.models import Alert, Subscription
from subtrack.settings import SettingsManager
from subtrack.store import SubscriptionStore

# Initialize Rich console
console = Console()

DATA_DIR = Path.home() / ".subtrack"
DEFAULT_STORE_FILE = DATA_DIR / "subscriptions.json"
DEFAULT_SETTINGS_FILE = DATA_DIR / "settings.yaml"

URGENCY_COLORS = {
    Urgency.HIGH: "red",
    Urgency.MEDIUM: "yellow",
    Urgency.LOW: "green",
}

STATUS_COLORS = {
    SubscriptionStatus.ACTIVE: "green",
    SubscriptionStatus.TRIAL: "cyan",
    SubscriptionStatus.CANCELLED: "dim",
}

ALERT_TITLES = {
    "renewal": "Renewal",
    "trial_ending": "Trial ending",
    "expiring": "Expiring",
}


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    formatter = logging.Formatter(
        '%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]


# =============================================================================
# OUTPUT HELPERS
# =============================================================================

def output_json(data: Any) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=2, default=str))


def handle_errors(func):
    """Turn subtrack errors into a red message and exit status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SubtrackError as e:
            ctx = click.get_current_context()
            if ctx.obj and ctx.obj.get("json"):
                output_json({"error": str(e), "type": type(e).__name__})
            else:
                console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            ctx.exit(1)
    return wrapper


def money(ctx: click.Context, amount: float) -> str:
    return format_currency(amount, **ctx.obj["settings"].currency_format())


def create_alerts_table(ctx: click.Context, alerts: List[Alert]) -> Table:
    """Create an alerts table."""
    language = ctx.obj["settings"].language
    today = ctx.obj["today"]

    table = Table(
        title="Upcoming",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("When", width=14)
    table.add_column("Type", style="cyan", width=14)
    table.add_column("Subscription", style="white")
    table.add_column("Amount", justify="right")
    table.add_column("Urgency", width=8)

    for alert in alerts:
        color = URGENCY_COLORS[alert.urgency]
        target = today + timedelta(days=alert.days_remaining)
        name = alert.subscription_name
        if alert.next_billing_date:
            name += f" (first charge {alert.next_billing_date.isoformat()})"
        table.add_row(
            format_days_remaining(target, today, language),
            ALERT_TITLES[alert.type.value],
            name,
            money(ctx, alert.amount),
            Text(alert.urgency.value.upper(), style=color),
        )
    return table


def create_subscriptions_table(ctx: click.Context, subscriptions: List[Subscription]) -> Table:
    """Create a subscriptions table."""
    categories = ctx.obj["settings"].categories()

    table = Table(
        title="Subscriptions",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("ID", style="dim")
    table.add_column("Name", style="white")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Every")
    table.add_column("Next billing")
    table.add_column("Status")

    for sub in subscriptions:
        status = sub.status.value
        if sub.is_trial_period and sub.trial_end_date:
            status += f" (trial until {sub.trial_end_date.isoformat()})"
        table.add_row(
            sub.id,
            sub.name,
            categories.label(sub.category),
            money(ctx, sub.amount),
            sub.frequency.value,
            sub.next_billing.isoformat(),
            Text(status, style=STATUS_COLORS[sub.status]),
        )
    return table


def create_trend_table(ctx: click.Context, history: List[Dict[str, Any]]) -> Table:
    """Create a monthly spending history table."""
    table = Table(
        title="Monthly trend",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Month", width=8)
    table.add_column("Monthly", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Subscriptions", style="dim")

    for i, month in enumerate(history):
        previous = history[i + 1]["amount"] if i + 1 < len(history) else None
        if previous is None:
            change = Text("")
        elif month["amount"] > previous:
            change = Text(f"+{money(ctx, month['amount'] - previous)}", style="red")
        elif month["amount"] < previous:
            change = Text(f"-{money(ctx, previous - month['amount'])}", style="green")
        else:
            change = Text("=", style="dim")
        table.add_row(
            month["month"].strftime("%Y-%m"),
            money(ctx, month["amount"]),
            change,
            str(len(month["subscriptions"])),
        )
    return table


# =============================================================================
# CLI GROUP
# =============================================================================

@click.group()
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
@click.option('--store', 'store_file', type=click.Path(dir_okay=False, path_type=Path),
              default=DEFAULT_STORE_FILE, envvar='SUBTRACK_STORE', show_default=True,
              help='Subscription store file')
@click.option('--settings', 'settings_file', type=click.Path(dir_okay=False, path_type=Path),
              default=DEFAULT_SETTINGS_FILE, envvar='SUBTRACK_SETTINGS', show_default=True,
              help='Settings YAML file')
@click.option('--today', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help='Evaluate as of this day instead of the current date')
@click.option('--log-level', default='WARNING',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
@click.version_option(__version__, prog_name='subtrack')
@click.pass_context
def cli(ctx: click.Context, json_output: bool, store_file: Path, settings_file: Path,
        today, log_level: str) -> None:
    """subtrack - personal subscription-expense tracker"""
    setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj['json'] = json_output
    # One reference day per command
    ctx.obj['today'] = today.date() if today else date.today()

    try:
        ctx.obj['settings'] = SettingsManager(settings_file)
        ctx.obj['store'] = SubscriptionStore(store_file)
    except SubtrackError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        ctx.exit(1)

    skipped = ctx.obj['store'].load_errors
    if skipped and not json_output:
        console.print(f"[yellow]Warning:[/yellow] {len(skipped)} invalid record(s) skipped in store")


# =============================================================================
# VIEW COMMANDS
# =============================================================================

SORT_CHOICES = ['next_billing', 'name', 'amount', 'category']


def sort_subscriptions(subscriptions: List[Subscription], sort_by: str, descending: bool,
                       categories: LabelTable) -> List[Subscription]:
    """Order subscriptions for display. Ties keep store order."""
    keys = {
        'next_billing': lambda s: s.next_billing,
        'name': lambda s: s.name.casefold(),
        'amount': lambda s: s.amount,
        'category': lambda s: categories.label(s.category).casefold(),
    }
    return sorted(subscriptions, key=keys[sort_by], reverse=descending)


@cli.command(name='list')
@click.option('--status', type=click.Choice([s.value for s in SubscriptionStatus]),
              default=None, help='Only show this status')
@click.option('--sort', 'sort_by', type=click.Choice(SORT_CHOICES), default='next_billing',
              show_default=True, help='Sort order')
@click.option('--desc', 'descending', is_flag=True, help='Sort descending')
@click.option('--by-date', is_flag=True, help='Group charges of the next 30 days by billing date')
@click.pass_context
def list_subscriptions(ctx: click.Context, status: Optional[str], sort_by: str,
                       descending: bool, by_date: bool) -> None:
    """List subscriptions."""
    subscriptions = ctx.obj['store'].snapshot()
    if status:
        subscriptions = [s for s in subscriptions if s.status.value == status]

    if by_date:
        show_payment_calendar(ctx, payments_by_date(subscriptions, ctx.obj['today']))
        return

    subscriptions = sort_subscriptions(
        subscriptions, sort_by, descending, ctx.obj['settings'].categories()
    )

    if ctx.obj['json']:
        output_json([s.to_dict() for s in subscriptions])
        return

    if not subscriptions:
        console.print("\n[dim]No subscriptions.[/dim]\n")
        return

    console.print()
    console.print(create_subscriptions_table(ctx, subscriptions))
    console.print()


def show_payment_calendar(ctx: click.Context, groups: List[Dict[str, Any]]) -> None:
    if ctx.obj['json']:
        output_json([
            {
                "date": group["date"],
                "total_amount": round(group["total_amount"], 2),
                "subscriptions": [{"id": s.id, "name": s.name, "amount": s.amount}
                                  for s in group["subscriptions"]],
            }
            for group in groups
        ])
        return

    if not groups:
        console.print("\n[dim]No charges in the next 30 days.[/dim]\n")
        return

    language = ctx.obj['settings'].language
    console.print("\n[bold cyan]Next 30 days:[/bold cyan]")
    for group in groups:
        when = format_days_remaining(group["date"], ctx.obj['today'], language)
        console.print(
            f"  [bold]{group['date'].isoformat()}[/bold] [dim]({when})[/dim] "
            f"{money(ctx, group['total_amount'])}"
        )
        for sub in group["subscriptions"]:
            console.print(f"    {escape(sub.name)}: {money(ctx, sub.amount)}")
    console.print()


@cli.command()
@click.pass_context
def alerts(ctx: click.Context) -> None:
    """Show upcoming renewals, trial ends and expirations."""
    settings = ctx.obj['settings']
    result = generate_alerts(ctx.obj['store'].snapshot(), settings.policy, ctx.obj['today'])

    if ctx.obj['json']:
        output_json([a.to_dict() for a in result])
        return

    console.print()
    if not result:
        console.print(
            f"[green]No upcoming alerts in the next {settings.policy.advance_days} days.[/green]"
        )
    else:
        console.print(create_alerts_table(ctx, result))
    console.print()


@cli.command()
@click.option('--trend', is_flag=True, help='Also show monthly spending history')
@click.pass_context
def stats(ctx: click.Context, trend: bool) -> None:
    """Show spending totals and breakdown by category."""
    snapshot = ctx.obj['store'].snapshot()
    summary = spending_summary(snapshot, ctx.obj['today'])
    breakdown = spending_by_category(snapshot)
    alert_count = len(generate_alerts(snapshot, ctx.obj['settings'].policy, ctx.obj['today']))
    history = monthly_trend(snapshot, ctx.obj['today']) if trend else []

    if ctx.obj['json']:
        data = summary.to_dict()
        data["alert_count"] = alert_count
        data["by_category"] = [
            {"category": row["key"], "monthly": round(row["amount"], 2),
             "percentage": round(row["percentage"], 1)}
            for row in breakdown
        ]
        if trend:
            data["trend"] = [
                {"month": m["month"].strftime("%Y-%m"), "monthly": round(m["amount"], 2),
                 "subscriptions": m["subscriptions"]}
                for m in history
            ]
        output_json(data)
        return

    console.print()
    console.print(Panel(
        f"[bold]Active subscriptions:[/bold] {summary.active_count}\n"
        f"[bold]Monthly:[/bold] {money(ctx, summary.total_monthly)}\n"
        f"[bold]Yearly:[/bold] {money(ctx, summary.total_yearly)}\n"
        f"[bold]Due this week:[/bold] {money(ctx, summary.to_pay_this_week)}\n"
        f"[bold]Due this month:[/bold] {money(ctx, summary.to_pay_this_month)}\n"
        f"[bold]Due this year:[/bold] {money(ctx, summary.to_pay_this_year)}\n"
        f"[bold]Alerts:[/bold] {alert_count}",
        title="[bold blue]Spending[/bold blue]",
        border_style="blue",
        box=box.ROUNDED,
    ))

    if breakdown:
        categories = ctx.obj['settings'].categories()
        console.print("\n[bold cyan]By category (monthly):[/bold cyan]")
        for row in breakdown:
            console.print(
                f"  {categories.label(row['key'])}: {money(ctx, row['amount'])} "
                f"[dim]({row['percentage']:.1f}%)[/dim]"
            )

    if history:
        console.print()
        console.print(create_trend_table(ctx, history))
    console.print()


@cli.command()
@click.pass_context
def payments(ctx: click.Context) -> None:
    """List payments awaiting confirmation."""
    pending = ctx.obj['store'].pending_payments()

    if ctx.obj['json']:
        output_json([
            {"subscription_id": p["subscription"].id, **p["payment"].to_dict()}
            for p in pending
        ])
        return

    if not pending:
        console.print("\n[dim]No payments to confirm.[/dim]\n")
        return

    console.print("\n[bold cyan]Payments to confirm:[/bold cyan]")
    for p in pending:
        sub, payment = p["subscription"], p["payment"]
        console.print(
            f"  [dim]{payment.id}[/dim] {sub.name}: {money(ctx, payment.amount)} "
            f"on {payment.payment_date.isoformat()}"
        )
    console.print()


# =============================================================================
# MUTATION COMMANDS
# =============================================================================

def _report(ctx: click.Context, sub: Subscription, message: str) -> None:
    if ctx.obj['json']:
        output_json(sub.to_dict())
    else:
        console.print(f"[green]{message}[/green]")


@cli.command()
@click.argument('name')
@click.argument('amount', type=float)
@click.option('--frequency', '-f', default='monthly',
              type=click.Choice([f.value for f in Frequency]), help='Billing frequency')
@click.option('--start', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help='First billing day (defaults to today)')
@click.option('--category', '-c', default='other', help='Category key')
@click.option('--currency', default=None, help='Currency symbol (display only)')
@click.option('--payment-method', default=None, help='Payment method key')
@click.option('--trial-end', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help='Trial end date; marks the subscription as a trial')
@click.option('--no-reminder', is_flag=True, help='Disable renewal reminders')
@click.option('--notes', default=None)
@click.pass_context
@handle_errors
def add(ctx: click.Context, name: str, amount: float, frequency: str, start, category: str,
        currency: Optional[str], payment_method: Optional[str], trial_end,
        no_reminder: bool, notes: Optional[str]) -> None:
    """Add a subscription."""
    settings = ctx.obj['settings']
    today = ctx.obj['today']

    category = settings.categories().require(category)
    if payment_method:
        payment_method = settings.payment_methods().require(payment_method)

    sub = create_subscription(
        name=name,
        amount=amount,
        frequency=frequency,
        start_date=start.date() if start else today,
        today=today,
        is_trial_period=trial_end is not None,
        trial_end_date=trial_end.date() if trial_end else None,
        category=category,
        currency=currency or settings.settings.currency,
        payment_method=payment_method,
        reminder_enabled=not no_reminder,
        notes=notes,
    )
    ctx.obj['store'].add(sub)
    _report(ctx, sub, f"Added {sub.name} ({sub.id}), next billing {sub.next_billing.isoformat()}")


@cli.command()
@click.argument('subscription_id')
@click.pass_context
@handle_errors
def pay(ctx: click.Context, subscription_id: str) -> None:
    """Mark a subscription as paid and advance its next billing date."""
    sub = ctx.obj['store'].record_payment(subscription_id, ctx.obj['today'])
    payment = sub.payment_history[-1]
    _report(ctx, sub, f"Recorded payment {payment.id}; next billing {sub.next_billing.isoformat()}")


@cli.command()
@click.argument('subscription_id')
@click.argument('payment_id')
@click.argument('amount', type=float)
@click.option('--date', 'payment_date', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help='Corrected payment date')
@click.option('--update-amount', is_flag=True,
              help='Also use this amount for the subscription going forward')
@click.pass_context
@handle_errors
def adjust(ctx: click.Context, subscription_id: str, payment_id: str, amount: float,
           payment_date, update_amount: bool) -> None:
    """Adjust a pending payment."""
    sub = ctx.obj['store'].adjust_payment(
        subscription_id, payment_id, amount,
        payment_date=payment_date.date() if payment_date else None,
        update_subscription_amount=update_amount,
    )
    _report(ctx, sub, f"Adjusted payment {payment_id}")


@cli.command()
@click.argument('subscription_id')
@click.argument('payment_id')
@click.pass_context
@handle_errors
def confirm(ctx: click.Context, subscription_id: str, payment_id: str) -> None:
    """Confirm a pending payment."""
    sub = ctx.obj['store'].confirm_payment(subscription_id, payment_id)
    _report(ctx, sub, f"Confirmed payment {payment_id}")


@cli.command()
@click.argument('subscription_id')
@click.pass_context
@handle_errors
def cancel(ctx: click.Context, subscription_id: str) -> None:
    """Cancel a subscription. History is kept and it can be reactivated."""
    sub = ctx.obj['store'].cancel(subscription_id)
    _report(ctx, sub, f"Cancelled {sub.name}; access runs until {sub.next_billing.isoformat()}")


@cli.command()
@click.argument('subscription_id')
@click.pass_context
@handle_errors
def reactivate(ctx: click.Context, subscription_id: str) -> None:
    """Reactivate a cancelled subscription."""
    sub = ctx.obj['store'].reactivate(subscription_id, ctx.obj['today'])
    _report(ctx, sub, f"Reactivated {sub.name}; next billing {sub.next_billing.isoformat()}")


@cli.command()
@click.argument('subscription_id')
@click.confirmation_option(prompt='Delete this subscription and its payment history?')
@click.pass_context
@handle_errors
def delete(ctx: click.Context, subscription_id: str) -> None:
    """Delete a subscription permanently."""
    sub = ctx.obj['store'].delete(subscription_id)
    _report(ctx, sub, f"Deleted {sub.name}")


# =============================================================================
# IMPORT / EXPORT
# =============================================================================

@cli.command(name='import')
@click.argument('source', type=click.File('r'))
@click.option('--replace', is_flag=True, help='Discard current subscriptions first')
@click.pass_context
@handle_errors
def import_command(ctx: click.Context, source, replace: bool) -> None:
    """Import subscriptions from a JSON export."""
    report = ctx.obj['store'].import_data(source.read(), replace=replace)

    if ctx.obj['json']:
        output_json(report.to_dict())
        return

    console.print(f"[green]Imported {len(report.imported)} subscription(s).[/green]")
    for skipped in report.skipped:
        console.print(
            f"  [yellow]Skipped #{skipped['index']} ({skipped['id']}):[/yellow] "
            f"{'; '.join(skipped['errors'])}"
        )


@cli.command(name='export')
@click.argument('destination', type=click.File('w'), default='-')
@click.pass_context
def export_command(ctx: click.Context, destination) -> None:
    """Export subscriptions as JSON (stdout by default)."""
    destination.write(ctx.obj['store'].to_json())
    destination.write("\n")


# =============================================================================
# SETTINGS
# =============================================================================

@cli.group()
def settings() -> None:
    """Show or change settings."""
    pass


@settings.command(name='show')
@click.pass_context
def settings_show(ctx: click.Context) -> None:
    """Show current settings."""
    data: Dict[str, Any] = ctx.obj['settings'].to_dict()

    if ctx.obj['json']:
        output_json(data)
        return

    notifications = data["notifications"]
    console.print()
    console.print(Panel(
        f"[bold]Language:[/bold] {data['language']}\n"
        f"[bold]Currency:[/bold] {data['currency']}\n"
        f"[bold]Advance days:[/bold] {notifications['advance_days']}\n"
        f"[bold]Upcoming payments:[/bold] {notifications['upcoming_payments']}\n"
        f"[bold]Trial ending:[/bold] {notifications['trial_ending']}\n"
        f"[bold]Subscription expiring:[/bold] {notifications['subscription_expiring']}",
        title="[bold blue]Settings[/bold blue]",
        border_style="blue",
        box=box.ROUNDED,
    ))
    console.print()


@settings.command(name='set')
@click.argument('key')
@click.argument('value')
@click.pass_context
@handle_errors
def settings_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a value, e.g. `settings set notifications.advance_days 14`."""
    lowered = value.lower()
    parsed: Any = {"true": True, "false": False}.get(lowered, value)
    ctx.obj['settings'].set_value(key, parsed)

    if ctx.obj['json']:
        output_json(ctx.obj['settings'].to_dict())
    else:
        console.print(f"[green]Set {key} = {parsed}[/green]")


# =============================================================================
# CATEGORIES / PAYMENT METHODS
# =============================================================================

def label_group(name: str, table_name: str) -> click.Group:
    """Build the list/add/remove/enable/disable commands for one label table."""

    def load(ctx: click.Context) -> Dict[str, LabelTable]:
        settings = ctx.obj['settings']
        return {"categories": settings.categories(), "payment_methods": settings.payment_methods()}

    def save(ctx: click.Context, tables: Dict[str, LabelTable], message: str) -> None:
        ctx.obj['settings'].save_label_tables(tables["categories"], tables["payment_methods"])
        if ctx.obj['json']:
            output_json(tables[table_name].overrides())
        else:
            console.print(f"[green]{escape(message)}[/green]")

    @cli.group(name=name, help=f"Manage {name.replace('-', ' ')}.")
    def group() -> None:
        pass

    @group.command(name='list')
    @click.option('--all', 'show_all', is_flag=True, help='Include disabled entries')
    @click.pass_context
    def list_labels(ctx: click.Context, show_all: bool) -> None:
        """List entries."""
        entries = [
            (key, entry) for key, entry in load(ctx)[table_name].entries().items()
            if show_all or entry.enabled
        ]
        entries.sort(key=lambda item: item[1].label.casefold())

        if ctx.obj['json']:
            output_json([
                {"key": key, "label": e.label, "enabled": e.enabled, "builtin": e.builtin}
                for key, e in entries
            ])
            return

        table = Table(box=box.SIMPLE, show_header=True, header_style="bold magenta")
        table.add_column("Key", style="dim")
        table.add_column("Label", style="white")
        table.add_column("Enabled")
        table.add_column("Custom")
        for key, e in entries:
            table.add_row(key, e.label, "yes" if e.enabled else "no", "" if e.builtin else "yes")
        console.print(table)

    @group.command(name='add')
    @click.argument('key')
    @click.argument('label')
    @click.pass_context
    @handle_errors
    def add_label(ctx: click.Context, key: str, label: str) -> None:
        """Add a custom entry."""
        tables = load(ctx)
        key = tables[table_name].add(key, label)
        save(ctx, tables, f"Added {key} ({label})")

    @group.command(name='remove')
    @click.argument('key')
    @click.pass_context
    @handle_errors
    def remove_label(ctx: click.Context, key: str) -> None:
        """Remove a custom entry. Built-in entries can only be disabled."""
        tables = load(ctx)
        table = tables[table_name]
        if not table.remove(key):
            raise SettingsError(f"Unknown {table.kind}: {key}")
        save(ctx, tables, f"Removed {key}")

    @group.command(name='enable')
    @click.argument('key')
    @click.pass_context
    @handle_errors
    def enable_label(ctx: click.Context, key: str) -> None:
        """Enable an entry."""
        tables = load(ctx)
        tables[table_name].set_enabled(key, True)
        save(ctx, tables, f"Enabled {key}")

    @group.command(name='disable')
    @click.argument('key')
    @click.pass_context
    @handle_errors
    def disable_label(ctx: click.Context, key: str) -> None:
        """Disable an entry. Existing subscriptions keep it."""
        tables = load(ctx)
        tables[table_name].set_enabled(key, False)
        save(ctx, tables, f"Disabled {key}")

    return group


categories = label_group('categories', 'categories')
payment_methods = label_group('payment-methods', 'payment_methods')


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main():
    """Main entry point for subtrack CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
