"""
Agenda Engine - Month grid, per-day agenda and event booking.
Weeks start on Sunday. Double-booking is allowed.
"""

import calendar as _cal
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from shopcrm.db.store import RecordStore
from shopcrm.models import CalendarEvent, EVENT_TYPES, EVENT_LABELS
from shopcrm.bus.events import bus, EVENT_EVENT_SCHEDULED, EVENT_EVENT_DELETED

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')

WEEKDAY_HEADERS = ('Dom', 'Seg', 'Ter', 'Qua', 'Qui', 'Sex', 'Sáb')

MONTH_NAMES = (
    'janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho',
    'julho', 'agosto', 'setembro', 'outubro', 'novembro', 'dezembro',
)


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    days_in_month: int
    first_weekday: int  # 0 = Sunday
    cells: List[List[Optional[int]]]

    @property
    def title(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} de {self.year}"


def month_grid(year: int, month: int) -> MonthGrid:
    """
    7-column grid for one month: leading blanks up to the weekday of day 1,
    then the days, with the last week padded to seven cells.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {month}")

    days_in_month = _cal.monthrange(year, month)[1]
    # date.weekday(): Monday=0 .. Sunday=6; shift so Sunday=0
    first_weekday = (date(year, month, 1).weekday() + 1) % 7

    flat: List[Optional[int]] = [None] * first_weekday + list(range(1, days_in_month + 1))
    if len(flat) % 7:
        flat.extend([None] * (7 - len(flat) % 7))
    cells = [flat[i:i + 7] for i in range(0, len(flat), 7)]

    return MonthGrid(year, month, days_in_month, first_weekday, cells)


def shift_month(year: int, month: int, delta: int):
    """(year, month) moved by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def events_for_day(events, year: int, month: int, day: int) -> List[CalendarEvent]:
    """Events on exactly that date, earliest time first."""
    target = date(year, month, day).isoformat()
    matching = [e for e in events if e.event_date is not None and e.event_date.isoformat() == target]
    return sorted(matching, key=lambda e: e.time)


def default_event_title(type: str, client_name: str) -> str:
    return f"Visita: {client_name}" if type == 'TechnicalVisit' else f"Instalação: {client_name}"


# =============================================================================
# EVENT OPERATIONS
# =============================================================================

def create_event(
    store: RecordStore,
    client_id: str,
    event_date: date,
    time: str = '09:00',
    type: str = 'TechnicalVisit',
    title: str = '',
    notes: str = '',
    client_name: Optional[str] = None,
) -> CalendarEvent:
    """
    Book a visit or installation. The title is generated from the type and
    client name when left blank.
    Returns: the stored event
    """
    if not client_id:
        raise ValueError("Selecione um cliente")
    if type not in EVENT_TYPES:
        raise ValueError(f"Invalid event type '{type}'. Choose from: {', '.join(EVENT_TYPES)}")
    if not _TIME_RE.match(time):
        raise ValueError(f"Invalid time '{time}', expected HH:MM")

    event = CalendarEvent(
        id=store.next_id('ev'),
        client_id=client_id,
        title=title.strip() or default_event_title(type, client_name or 'Cliente'),
        event_date=event_date,
        time=time,
        type=type,
        notes=notes,
    )
    with store.edit('events') as events:
        events.append(event)

    logger.info(f"Scheduled event ID {event.id}: {event.title} on {event_date} {time}")
    bus.emit(EVENT_EVENT_SCHEDULED, {'event_id': event.id, 'event': event})
    return event


def delete_event(store: RecordStore, event_id: str) -> bool:
    """Returns: True if deleted, False if not found"""
    if store.find('events', event_id) is None:
        return False

    with store.edit('events') as events:
        events[:] = [e for e in events if e.id != event_id]

    logger.info(f"Deleted event ID {event_id}")
    bus.emit(EVENT_EVENT_DELETED, {'event_id': event_id})
    return True


# =============================================================================
# TEXT RENDERING
# =============================================================================

def render_month(grid: MonthGrid, events=()) -> str:
    """Month as a text table; days with bookings carry a '*'."""
    busy = {
        e.event_date.day for e in events
        if e.event_date is not None and (e.event_date.year, e.event_date.month) == (grid.year, grid.month)
    }
    lines = [grid.title.capitalize().center(35), " ".join(f"{h:>4}" for h in WEEKDAY_HEADERS)]
    for week in grid.cells:
        cells = []
        for day in week:
            if day is None:
                cells.append("    ")
            else:
                mark = "*" if day in busy else " "
                cells.append(f"{day:>3}{mark}")
        lines.append(" ".join(cells))
    return "\n".join(lines)


def event_label(event: CalendarEvent) -> str:
    return EVENT_LABELS.get(event.type, event.type)
