#!/usr/bin/env python3
"""
Shop CRM Terminal CLI
Command-line interface for clients, pipeline, quotes, inventory and calendar.

State lives in memory for as long as the process runs. A plain invocation
works on freshly seeded demo data; the menu launcher (main.py) passes one
Session in as ctx.obj so every command it runs shares the same records.
"""

import logging
import re
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import click

from shopcrm.config import config
from shopcrm.db.seed import seed_store
from shopcrm.db.store import RecordStore
from shopcrm.engine import agenda, crm, dashboard, inventory, pipeline, quotes
from shopcrm.engine.ai_client import MODEL_CHOICES
from shopcrm.engine.proposal_writer import ProposalSlot
from shopcrm.models import (
    Client, InventoryItem, Quote, EVENT_TYPES, EVENT_LABELS, INTERACTION_TYPES,
    INTERACTION_LABELS, INVENTORY_UNITS, STATUS_ORDER, parse_status,
)
from shopcrm.logging_config import configure_logging, log_call

_EMAIL_RE = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

RECENCY_CHOICES = ['7', '30', '90', 'all']


class Session:
    """Everything one console session keeps between commands."""

    def __init__(self, store: Optional[RecordStore] = None):
        self.store = store if store is not None else seed_store(RecordStore())
        self.board_filter = pipeline.PipelineFilter()
        self.stock_monitor = inventory.LowStockMonitor(on_alert=self._stock_alert)
        self.proposal_slot = ProposalSlot()
        # Prime the monitor with the starting stock so only later changes count
        self.check_stock()

    def _stock_alert(self, count: int) -> None:
        inventory.emit_low_stock_alert(count)
        click.echo(f"\a🔔 Estoque baixo: {count} item(ns) no mínimo ou abaixo.", err=True)

    def check_stock(self) -> bool:
        return self.stock_monitor.check(self.store.inventory)


@log_call
def _prompt_date(label: str, default: Optional[date] = None) -> Optional[date]:
    """Prompt for a date, re-prompting on bad format. Returns None if left blank."""
    logger = logging.getLogger("shopcrm")
    default_str = str(default) if default else ""
    while True:
        raw = click.prompt(label, default=default_str, show_default=bool(default_str)) or ""
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            logger.debug(f"_prompt_date | rejected input={raw!r}")
            click.echo("  Invalid format, please use YYYY-MM-DD.", err=True)


@log_call
def _prompt_email() -> str:
    """Prompt for an email address, re-prompting on bad format. Returns '' if left blank."""
    logger = logging.getLogger("shopcrm")
    while True:
        raw = click.prompt("Email", default="", show_default=False) or ""
        if not raw or _EMAIL_RE.match(raw):
            return raw
        logger.debug(f"_prompt_email | rejected input={raw!r}")
        click.echo("  Invalid email address, please try again or press Enter to skip.", err=True)


def _money(value: float) -> str:
    return dashboard.format_brl(value)


@click.group()
@click.pass_context
def cli(ctx):
    """Shop CRM - Clients, Pipeline, Quotes, Inventory & Calendar"""
    configure_logging()
    if not isinstance(ctx.obj, Session):
        ctx.obj = Session()


pass_session = click.make_pass_decorator(Session)


# =============================================================================
# DASHBOARD
# =============================================================================

@cli.command('dashboard')
@pass_session
@log_call
def dashboard_cmd(session):
    """Revenue, workload and status overview"""
    summary = dashboard.build_summary(session.store)

    click.echo(f"\n{'='*60}")
    click.echo(f"{'Receita':<15} {dashboard.format_kilo(summary['total_revenue'])}")
    click.echo(f"{'Em Produção':<15} {summary['active']}")
    click.echo(f"{'Total':<15} {summary['total']}")
    click.echo(f"{'Entregues':<15} {summary['completed']}")
    click.echo(f"{'='*60}")

    click.echo("\nProjetos por status:")
    for status, count in summary['status_counts']:
        click.echo(f"  {status.value:<12} {'#' * count} {count}")

    click.echo("\nValor por projeto:")
    for row in summary['value_ranking']:
        click.echo(f"  {row['name']:<20} {_money(row['value'])}")

    click.echo("\nAtividade recente:")
    for p in summary['recent']:
        client_name = crm.resolve_client_name(session.store, p.client_id)
        click.echo(f"  {p.title[:30]:<32} {client_name[:20]:<22} {_money(p.value)}")
    click.echo()


# =============================================================================
# CLIENTS COMMANDS
# =============================================================================

@cli.group()
def clients():
    """Manage clients and their interaction history"""
    pass


@clients.command('list')
@click.option('--search', help='Match name, phone or email')
@pass_session
@log_call
def clients_list(session, search):
    """List clients"""
    results = crm.search_clients(session.store, search)

    if not results:
        click.echo("No clients found.")
        return

    click.echo(f"\nFound {len(results)} clients:\n")
    click.echo(f"{'ID':<11} {'Name':<25} {'Phone':<17} {'Email':<25}")
    click.echo("-" * 80)
    for c in results:
        click.echo(f"{c.id:<11} {c.name[:23]:<25} {c.phone[:15]:<17} {c.email[:23]:<25}")


@clients.command('show')
@click.argument('client_id')
@pass_session
@log_call
def clients_show(session, client_id):
    """Show client details and history"""
    logger = logging.getLogger("shopcrm")
    client = crm.get_client(session.store, client_id)

    if not client:
        logger.warning(f"clients_show | client_id={client_id} not found")
        click.echo(f"Client ID {client_id} not found.", err=True)
        return

    click.echo(f"\n{'='*60}")
    click.echo(f"CLIENT #{client.id}: {client.name}")
    click.echo(f"{'='*60}")
    click.echo(f"Phone:    {client.phone or '(not set)'}")
    click.echo(f"Email:    {client.email or '(not set)'}")
    click.echo(f"Address:  {client.address or '(not set)'}")

    click.echo(f"\n{'='*60}")
    click.echo("INTERACTION HISTORY")
    click.echo(f"{'='*60}")
    if client.interactions:
        for i in client.interactions:
            when = i.interaction_date.strftime('%d/%m/%Y') if i.interaction_date else '?'
            click.echo(f"\n[{when}] {INTERACTION_LABELS.get(i.type, i.type)}")
            click.echo(f"  {i.notes[:100]}")
    else:
        click.echo("No interactions yet.")
    click.echo()


@clients.command('add')
@pass_session
@log_call
def clients_add(session):
    """Add a new client (interactive)"""
    logger = logging.getLogger("shopcrm")
    click.echo("\n=== NOVO CLIENTE ===\n")

    name = click.prompt("Name", default="", show_default=False)
    phone = click.prompt("Phone", default="", show_default=False)
    email = _prompt_email()
    address = click.prompt("Address", default="", show_default=False)

    try:
        client = crm.create_client(session.store, Client(name=name, phone=phone, email=email, address=address))
    except ValueError as e:
        logger.warning(f"clients_add rejected: {e}")
        click.echo(f"Error: {e}", err=True)
        return

    click.echo(f"\n✓ Created client #{client.id}: {client.name}")


@clients.command('delete')
@click.argument('client_id')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@pass_session
@log_call
def clients_delete(session, client_id, yes):
    """Delete a client and its history (projects and events are kept)"""
    logger = logging.getLogger("shopcrm")
    client = crm.get_client(session.store, client_id)
    if not client:
        logger.warning(f"clients_delete | client_id={client_id} not found")
        click.echo(f"Client ID {client_id} not found.", err=True)
        return

    if not yes and not click.confirm(f"Delete {client.name}? This cannot be undone"):
        click.echo("Cancelled.")
        return

    crm.delete_client(session.store, client_id)
    click.echo(f"✓ Deleted client #{client_id}")


@clients.command('log')
@click.argument('client_id')
@pass_session
@log_call
def clients_log(session, client_id):
    """Log an interaction with a client"""
    logger = logging.getLogger("shopcrm")
    client = crm.get_client(session.store, client_id)
    if not client:
        logger.warning(f"clients_log | client_id={client_id} not found")
        click.echo(f"Client ID {client_id} not found.", err=True)
        return

    click.echo(f"\n=== LOG INTERACTION: {client.name} ===\n")

    when = _prompt_date("Date (YYYY-MM-DD)", default=date.today())
    type = click.prompt("Type", type=click.Choice(INTERACTION_TYPES, case_sensitive=False), default="Call")
    notes = click.prompt("Notes")

    interaction_date = datetime.combine(when, datetime.now().time()) if when else None
    try:
        interaction = crm.log_interaction(session.store, client_id, type, notes, interaction_date=interaction_date)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return
    click.echo(f"\n✓ Logged interaction #{interaction.id}")


# =============================================================================
# PIPELINE COMMANDS
# =============================================================================

@cli.group('pipeline')
def pipeline_group():
    """Project board and status workflow"""
    pass


@pipeline_group.command('board')
@click.option('--client', 'client_id', help='Only this client (use "all" to clear)')
@click.option('--days', type=click.Choice(RECENCY_CHOICES), help='Updated in the last N days')
@click.option('--status', help='Focus one status; repeating the same status clears the focus')
@click.option('--clear', is_flag=True, help='Reset all filters first')
@pass_session
@log_call
def pipeline_board(session, client_id, days, status, clear):
    """Show the board, grouped by status"""
    flt = session.board_filter.clear() if clear else session.board_filter

    try:
        if client_id is not None:
            flt = pipeline.PipelineFilter(None if client_id == 'all' else client_id, flt.days, flt.status)
        if days is not None:
            flt = pipeline.PipelineFilter(flt.client_id, None if days == 'all' else int(days), flt.status)
        if status is not None:
            flt = flt.toggle_status(parse_status(status))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return

    session.board_filter = flt
    columns = pipeline.group_by_status(session.store.projects, flt)

    if flt.has_active_filters:
        parts = []
        if flt.client_id:
            parts.append(f"cliente={crm.resolve_client_name(session.store, flt.client_id)}")
        if flt.days:
            parts.append(f"últimos {flt.days} dias")
        if flt.status:
            parts.append(f"status={flt.status.value}")
        click.echo(f"\nFiltros: {', '.join(parts)}")

    for status_key, cards in columns.items():
        click.echo(f"\n== {status_key.value} ({len(cards)}) ==")
        for p in cards:
            client_name = crm.resolve_client_name(session.store, p.client_id)
            deadline = p.deadline.strftime('%d/%m/%Y') if p.deadline else '-'
            click.echo(f"  [{p.id}] {p.title[:30]:<32} {client_name[:20]:<22} {_money(p.value):>14}  prazo {deadline}")
    click.echo()


@pipeline_group.command('advance')
@click.argument('project_id')
@pass_session
@log_call
def pipeline_advance(session, project_id):
    """Move a project to the next status"""
    project = pipeline.get_project(session.store, project_id)
    if not project:
        click.echo(f"Project ID {project_id} not found.", err=True)
        return
    if not pipeline.can_advance(project):
        click.echo(f"Project #{project_id} is already {project.status.value}.", err=True)
        return

    updated = pipeline.advance_status(session.store, project_id)
    click.echo(f"✓ {updated.title}: {project.status.value} → {updated.status.value}")


@pipeline_group.command('set-status')
@click.argument('project_id')
@click.argument('status')
@pass_session
@log_call
def pipeline_set_status(session, project_id, status):
    """Set a project's status directly"""
    try:
        target = parse_status(status)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return

    updated = pipeline.set_status(session.store, project_id, target)
    if not updated:
        click.echo(f"Project ID {project_id} not found.", err=True)
        return
    click.echo(f"✓ {updated.title}: {updated.status.value}")


# =============================================================================
# INVENTORY COMMANDS
# =============================================================================

@cli.group('inventory')
def inventory_group():
    """Materials, stock levels and the stock report"""
    pass


@inventory_group.command('list')
@click.option('--search', help='Match name or category')
@pass_session
@log_call
def inventory_list(session, search):
    """List stock lines"""
    items = inventory.search_items(session.store, search)
    low = inventory.low_stock_count(session.store.inventory)

    click.echo(f"\nTotal de itens: {len(session.store.inventory)}   Estoque baixo: {low}\n")
    if not items:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<11} {'Name':<26} {'Category':<14} {'Qty':>8} {'Min':>6} {'Status':<8}")
    click.echo("-" * 80)
    for i in items:
        label = inventory.CRITICAL_LABEL if i.is_low_stock else inventory.NORMAL_LABEL
        click.echo(
            f"{i.id:<11} {i.name[:24]:<26} {i.category[:12]:<14} "
            f"{i.quantity:>5g} {i.unit:<2} {i.min_quantity:>6g} {label:<8}"
        )


@inventory_group.command('add')
@pass_session
@log_call
def inventory_add(session):
    """Add a material (interactive)"""
    click.echo("\n=== ADICIONAR MATERIAL ===\n")
    name = click.prompt("Name", default="", show_default=False)
    category = click.prompt("Category (Perfis, Chapas, Consumíveis...)", default="", show_default=False)
    quantity = click.prompt("Quantity", type=click.FloatRange(min=0), default=0)
    unit = click.prompt("Unit", type=click.Choice(INVENTORY_UNITS), default="un")
    min_quantity = click.prompt("Minimum quantity", type=click.FloatRange(min=0), default=0)

    try:
        item = inventory.add_item(session.store, InventoryItem(
            name=name, category=category, quantity=quantity, min_quantity=min_quantity, unit=unit,
        ))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return

    click.echo(f"\n✓ Added #{item.id}: {item.name}")
    session.check_stock()


@inventory_group.command('update')
@click.argument('item_id')
@click.option('--name', help='New name')
@click.option('--category', help='New category')
@click.option('--quantity', type=click.FloatRange(min=0), help='Overwrite current quantity')
@click.option('--min', 'min_quantity', type=click.FloatRange(min=0), help='New minimum')
@click.option('--unit', help='New unit')
@pass_session
@log_call
def inventory_update(session, item_id, name, category, quantity, min_quantity, unit):
    """Edit a stock line (use options to set fields)"""
    item = inventory.get_item(session.store, item_id)
    if not item:
        click.echo(f"Item ID {item_id} not found.", err=True)
        return

    updates = {k: v for k, v in {
        'name': name, 'category': category, 'quantity': quantity,
        'min_quantity': min_quantity, 'unit': unit,
    }.items() if v is not None}
    if not updates:
        click.echo("No updates specified. Use --name, --category, --quantity, --min or --unit", err=True)
        return

    try:
        inventory.update_item(session.store, replace(item, **updates))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return

    click.echo(f"✓ Updated item #{item_id}")
    session.check_stock()


@inventory_group.command('delete')
@click.argument('item_id')
@pass_session
@log_call
def inventory_delete(session, item_id):
    """Remove a stock line"""
    if not inventory.delete_item(session.store, item_id):
        click.echo(f"Item ID {item_id} not found.", err=True)
        return
    click.echo(f"✓ Deleted item #{item_id}")
    session.check_stock()


@inventory_group.command('report')
@pass_session
@log_call
def inventory_report(session):
    """Stock report, ready to paste into chat"""
    click.echo(inventory.generate_report(session.store.inventory))


# =============================================================================
# CALENDAR COMMANDS
# =============================================================================

@cli.group('calendar')
def calendar_group():
    """Technical visits and installations"""
    pass


@calendar_group.command('month')
@click.argument('year', type=int, required=False)
@click.argument('month', type=click.IntRange(1, 12), required=False)
@click.option('--offset', type=int, default=0, help='Months to move from the given/current month')
@pass_session
@log_call
def calendar_month(session, year, month, offset):
    """Show a month grid (* marks booked days)"""
    today = date.today()
    year, month = agenda.shift_month(year or today.year, month or today.month, offset)
    grid = agenda.month_grid(year, month)
    click.echo()
    click.echo(agenda.render_month(grid, session.store.events))
    click.echo()


@calendar_group.command('day')
@click.argument('day', type=click.DateTime(formats=['%Y-%m-%d']))
@pass_session
@log_call
def calendar_day(session, day):
    """List the bookings of one day"""
    events = agenda.events_for_day(session.store.events, day.year, day.month, day.day)
    if not events:
        click.echo("No events on this day.")
        return
    for e in events:
        client_name = crm.resolve_client_name(session.store, e.client_id)
        click.echo(f"{e.time}  [{e.id}] {e.title}  ({agenda.event_label(e)}, {client_name})")
        if e.notes:
            click.echo(f"       {e.notes}")


@calendar_group.command('add')
@pass_session
@log_call
def calendar_add(session):
    """Book a visit or installation (interactive)"""
    click.echo("\n=== AGENDAR ===\n")
    client_id = click.prompt("Client ID", default="", show_default=False)
    event_date = _prompt_date("Date (YYYY-MM-DD)", default=date.today())
    time = click.prompt("Time (HH:MM)", default="09:00")
    type = click.prompt("Type", type=click.Choice(EVENT_TYPES), default="TechnicalVisit")
    title = click.prompt("Title (Enter for automatic)", default="", show_default=False)
    notes = click.prompt("Notes", default="", show_default=False)

    if client_id and crm.get_client(session.store, client_id) is None:
        click.echo(f"Client ID {client_id} not found.", err=True)
        return

    try:
        event = agenda.create_event(
            session.store, client_id, event_date or date.today(), time=time, type=type,
            title=title, notes=notes, client_name=crm.resolve_client_name(session.store, client_id, 'Cliente'),
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return
    click.echo(f"\n✓ {EVENT_LABELS[event.type]} #{event.id}: {event.title} em {event.event_date} {event.time}")


@calendar_group.command('delete')
@click.argument('event_id')
@pass_session
@log_call
def calendar_delete(session, event_id):
    """Remove a booking"""
    if not agenda.delete_event(session.store, event_id):
        click.echo(f"Event ID {event_id} not found.", err=True)
        return
    click.echo(f"✓ Deleted event #{event_id}")


# =============================================================================
# QUOTES COMMANDS
# =============================================================================

@cli.group('quote')
def quote_group():
    """Build quotes, AI proposals and PDF exports"""
    pass


@quote_group.command('new')
@click.option('--model', type=click.Choice(MODEL_CHOICES), default=config.DEFAULT_AI_MODEL,
              show_default=True, help='AI model for the proposal text')
@click.option('--pdf/--no-pdf', default=None, help='Export the proposal as PDF (asks when omitted)')
@pass_session
@log_call
def quote_new(session, model, pdf):
    """Compose a quote, draft the proposal and save it as a project"""
    from shopcrm.engine import proposal_writer

    logger = logging.getLogger("shopcrm")
    click.echo("\n=== NOVO ORÇAMENTO ===\n")

    client_id = click.prompt("Client ID")
    client = crm.get_client(session.store, client_id)
    if not client:
        click.echo(f"Client ID {client_id} not found.", err=True)
        return

    title = click.prompt("Project title")
    quote = Quote(client_id=client_id, title=title)

    click.echo("\nItems (blank description to finish):")
    while True:
        description = click.prompt("  Description", default="", show_default=False)
        if not description:
            break
        quantity = click.prompt("  Quantity", type=int, default=1)
        unit_price = click.prompt("  Unit price", type=float, default=0.0)
        before = len(quote.items)
        quote.items = quotes.add_item(quote.items, description, quantity, unit_price)
        if len(quote.items) == before:
            click.echo("  Item ignored: description and a price above zero are required.", err=True)

    if not quotes.is_ready(quote):
        click.echo(f"Error: {quotes.MISSING_FIELDS_MESSAGE}", err=True)
        return

    click.echo(f"\nTotal: {_money(quote.total)}")
    click.echo(f"\nDrafting proposal [{model}]...\n")
    result = proposal_writer.draft_proposal(
        session.proposal_slot, client.name, title, quote.items, quote.total, model=model,
    )
    if result is None:
        click.echo("Proposal discarded: a newer proposal request replaced it.", err=True)
        return
    if not result.ok:
        logger.error(f"quote_new: proposal failed for client {client_id}: {result.error}")
        click.echo(f"AI Error: {result.error}", err=True)
    quote.proposal = result.value or ''

    click.echo(f"{'='*60}")
    click.echo(quote.proposal)
    click.echo(f"{'='*60}\n")

    if pdf is None:
        pdf = click.confirm("Export PDF?", default=False)
    if pdf:
        _export_pdf(client.name, quote)

    if not click.confirm("Save as project?", default=True):
        click.echo("Not saved.")
        return

    project, notified = quotes.save_quote(session.store, quote)
    click.echo(f"✓ Saved project #{project.id}: {project.title} ({_money(project.value)})")
    if not notified.ok:
        click.echo(f"Notification not sent: {notified.error}", err=True)


def _export_pdf(client_name: str, quote: Quote) -> None:
    from shopcrm.engine import pdf_export

    today = date.today()
    doc = pdf_export.QuoteDocument(
        client_name=client_name,
        project_title=quote.title,
        issued_on=today,
        total=quote.total,
        body=quote.proposal,
        items=[(i.description, i.quantity, i.unit_price) for i in quote.items],
    )
    config.EXPORT_DIR.mkdir(parents=True, exist_ok=True)
    path = config.EXPORT_DIR / pdf_export.pdf_filename(client_name, today)
    path.write_bytes(pdf_export.render_quote_pdf(doc))
    click.echo(f"✓ PDF saved to: {path}")


@quote_group.command('history')
@click.argument('client_id')
@pass_session
@log_call
def quote_history(session, client_id):
    """Previous quotes (projects) for a client, newest first"""
    projects = pipeline.client_history(session.store, client_id)
    if not projects:
        click.echo("No quotes for this client.")
        return
    for p in projects:
        updated = p.last_update.strftime('%d/%m/%Y') if p.last_update else '-'
        click.echo(f"[{p.id}] {updated}  {p.title[:35]:<37} {_money(p.value):>14}  {p.status.value}")


@quote_group.command('show')
@click.argument('project_id')
@pass_session
@log_call
def quote_show(session, project_id):
    """Reopen a saved quote and print its proposal text"""
    project = pipeline.get_project(session.store, project_id)
    if not project:
        click.echo(f"Project ID {project_id} not found.", err=True)
        return

    client_name = crm.resolve_client_name(session.store, project.client_id)
    click.echo(f"\n=== {project.title} ===")
    click.echo(f"Client: {client_name}")
    click.echo(f"Value:  {_money(project.value)}")
    click.echo(f"Status: {project.status.value}\n")
    click.echo(project.description or "(no proposal text saved)")
    click.echo()


# =============================================================================
# AI & NOTIFICATIONS
# =============================================================================

@cli.command('analyze')
@click.argument('description')
@click.option('--model', type=click.Choice(MODEL_CHOICES), default=config.DEFAULT_AI_MODEL,
              show_default=True, help='AI model to use')
@log_call
def analyze(description, model):
    """AI feasibility notes for a job description"""
    from shopcrm.engine import proposal_writer

    click.echo(f"\nAnalyzing request [{model}]...\n")
    result = proposal_writer.analyze_feasibility(description, model=model)
    if not result.ok:
        click.echo(f"AI Error: {result.error}", err=True)
        return
    click.echo(result.value)
    click.echo()


@cli.command('notify')
@click.argument('message')
@log_call
def notify(message):
    """Send a message to the shop chat"""
    from shopcrm.engine.notifier import send_notification

    result = send_notification(message)
    if result.ok:
        click.echo("✓ Notification sent")
    else:
        click.echo(f"Notification not sent: {result.error}", err=True)


@cli.command('statuses')
def statuses():
    """List the workflow statuses in order"""
    for idx, status in enumerate(STATUS_ORDER):
        click.echo(f"{idx}  {status.name:<13} {status.value}")


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    cli()
