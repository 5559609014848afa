#!/usr/bin/env python3
"""
Shop CRM - Interactive Menu Launcher
Run this file to access all CRM commands through a simple menu.
Commands run in-process against one Session, so changes made from the menu
stay visible until you quit.

Usage:
    python main.py
"""

import os

import click

from shopcrm.cli.main import cli, Session
from shopcrm.logging_config import configure_logging


def run(session: Session, args: list):
    """Run a CRM CLI command and return to menu when done."""
    print()
    try:
        cli.main(args=args, obj=session, standalone_mode=False)
    except click.exceptions.Abort:
        print("\n  (cancelled)")
    except click.ClickException as e:
        e.show()
    print()
    input("  Press Enter to return to menu...")


def prompt(label: str, required: bool = True) -> str:
    """Prompt user for input. Returns empty string if optional and skipped."""
    while True:
        value = input(f"  {label}: ").strip()
        if value:
            return value
        if not required:
            return ""
        print("  (required - please enter a value)")


def prompt_optional(label: str) -> str:
    return prompt(f"{label} (optional, Enter to skip)", required=False)


def clear():
    os.system("cls" if os.name == "nt" else "clear")


# =============================================================================
# COMMAND HANDLERS
# =============================================================================

def clients_list(session):
    args = ["clients", "list"]
    s = prompt_optional("Search name / phone / email")
    if s: args += ["--search", s]
    run(session, args)

def clients_show(session):
    run(session, ["clients", "show", prompt("Client ID")])

def clients_add(session):
    run(session, ["clients", "add"])

def clients_log(session):
    run(session, ["clients", "log", prompt("Client ID")])

def clients_delete(session):
    run(session, ["clients", "delete", prompt("Client ID")])

def pipeline_board(session):
    args = ["pipeline", "board"]
    c = prompt_optional("Client ID (all = every client)")
    d = prompt_optional("Updated in the last 7 / 30 / 90 days (all = any)")
    s = prompt_optional("Focus status (same again = show all)")
    if c: args += ["--client", c]
    if d: args += ["--days", d]
    if s: args += ["--status", s]
    run(session, args)

def pipeline_clear(session):
    run(session, ["pipeline", "board", "--clear"])

def pipeline_advance(session):
    run(session, ["pipeline", "advance", prompt("Project ID")])

def pipeline_set_status(session):
    pid = prompt("Project ID")
    run(session, ["pipeline", "set-status", pid, prompt("Status (Novo/Medição/Produção/Instalação/Concluído)")])

def quote_new(session):
    run(session, ["quote", "new"])

def quote_history(session):
    run(session, ["quote", "history", prompt("Client ID")])

def quote_show(session):
    run(session, ["quote", "show", prompt("Project ID")])

def inventory_list(session):
    args = ["inventory", "list"]
    s = prompt_optional("Search name / category")
    if s: args += ["--search", s]
    run(session, args)

def inventory_add(session):
    run(session, ["inventory", "add"])

def inventory_update(session):
    iid = prompt("Item ID")
    args = ["inventory", "update", iid]
    q = prompt_optional("New quantity")
    m = prompt_optional("New minimum")
    if q: args += ["--quantity", q]
    if m: args += ["--min", m]
    run(session, args)

def inventory_report(session):
    run(session, ["inventory", "report"])

def calendar_month(session):
    args = ["calendar", "month"]
    y = prompt_optional("Year")
    m = prompt_optional("Month (1-12)")
    if y and m: args += [y, m]
    run(session, args)

def calendar_day(session):
    run(session, ["calendar", "day", prompt("Date (YYYY-MM-DD)")])

def calendar_add(session):
    run(session, ["calendar", "add"])

def analyze(session):
    run(session, ["analyze", prompt("Job description")])

def dashboard(session):
    run(session, ["dashboard"])


MENU = [
    ("DASHBOARD", None),
    ("1",  "Overview",                     dashboard),
    ("CLIENTS", None),
    ("2",  "List / search clients",        clients_list),
    ("3",  "Show client + history",        clients_show),
    ("4",  "Add client",                   clients_add),
    ("5",  "Log interaction",              clients_log),
    ("6",  "Delete client",                clients_delete),
    ("PIPELINE", None),
    ("7",  "Board (filters)",              pipeline_board),
    ("8",  "Clear board filters",          pipeline_clear),
    ("9",  "Advance project",              pipeline_advance),
    ("10", "Set project status",           pipeline_set_status),
    ("QUOTES", None),
    ("11", "New quote + AI proposal",      quote_new),
    ("12", "Client quote history",         quote_history),
    ("13", "Reopen saved quote",           quote_show),
    ("14", "AI feasibility analysis",      analyze),
    ("INVENTORY", None),
    ("15", "List / search materials",      inventory_list),
    ("16", "Add material",                 inventory_add),
    ("17", "Update stock",                 inventory_update),
    ("18", "Stock report",                 inventory_report),
    ("CALENDAR", None),
    ("19", "Month view",                   calendar_month),
    ("20", "Day agenda",                   calendar_day),
    ("21", "Book visit / installation",    calendar_add),
]

HANDLERS = {row[0]: row[2] for row in MENU if len(row) == 3}


def show_menu():
    clear()
    print("=" * 52)
    print("  SHOP CRM")
    print("=" * 52)
    for row in MENU:
        if len(row) == 2:
            print(f"\n  {row[0]}")
        else:
            print(f"   {row[0]:>2}. {row[1]}")
    print("\n    q. Quit")
    print("=" * 52)


def main():
    configure_logging()
    session = Session()
    if session.stock_monitor.previous_count:
        input("  Press Enter to open the menu...")
    while True:
        show_menu()
        choice = input("  Choice: ").strip().lower()
        if choice in ("q", "quit", "exit"):
            break
        handler = HANDLERS.get(choice)
        if handler:
            handler(session)


if __name__ == "__main__":
    main()
