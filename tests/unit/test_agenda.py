"""
Unit tests for the Agenda Engine (shopcrm/engine/agenda.py).
"""

from datetime import date
from unittest.mock import patch

import pytest

from shopcrm.models import CalendarEvent
from shopcrm.engine.agenda import (
    create_event,
    default_event_title,
    delete_event,
    event_label,
    events_for_day,
    month_grid,
    render_month,
    shift_month,
)
from shopcrm.bus.events import EVENT_EVENT_SCHEDULED


# ---------------------------------------------------------------------------
# Month grid
# ---------------------------------------------------------------------------

def test_month_grid_march_2026_starts_on_sunday():
    grid = month_grid(2026, 3)
    assert grid.first_weekday == 0
    assert grid.days_in_month == 31
    assert grid.cells[0] == [1, 2, 3, 4, 5, 6, 7]


def test_month_grid_leading_blanks():
    # 1 Oct 2026 is a Thursday
    grid = month_grid(2026, 10)
    assert grid.first_weekday == 4
    assert grid.cells[0] == [None, None, None, None, 1, 2, 3]


def test_month_grid_last_week_padded():
    grid = month_grid(2026, 10)
    assert all(len(week) == 7 for week in grid.cells)
    assert grid.cells[-1] == [25, 26, 27, 28, 29, 30, 31]
    days = [d for week in grid.cells for d in week if d is not None]
    assert days == list(range(1, 32))


def test_month_grid_leap_february():
    assert month_grid(2028, 2).days_in_month == 29
    assert month_grid(2026, 2).days_in_month == 28


def test_month_grid_invalid_month():
    with pytest.raises(ValueError):
        month_grid(2026, 13)


def test_month_title():
    assert month_grid(2026, 3).title == 'março de 2026'


@pytest.mark.parametrize('year,month,delta,expected', [
    (2026, 3, 1, (2026, 4)),
    (2026, 12, 1, (2027, 1)),
    (2026, 1, -1, (2025, 12)),
    (2026, 3, -15, (2024, 12)),
    (2026, 3, 0, (2026, 3)),
])
def test_shift_month(year, month, delta, expected):
    assert shift_month(year, month, delta) == expected


# ---------------------------------------------------------------------------
# Day agenda
# ---------------------------------------------------------------------------

def test_events_for_day_sorted_by_time():
    events = [
        CalendarEvent(id='a', event_date=date(2026, 3, 10), time='14:00'),
        CalendarEvent(id='b', event_date=date(2026, 3, 11), time='08:00'),
        CalendarEvent(id='c', event_date=date(2026, 3, 10), time='09:30'),
    ]
    assert [e.id for e in events_for_day(events, 2026, 3, 10)] == ['c', 'a']


def test_events_for_day_empty():
    assert events_for_day([], 2026, 3, 10) == []


def test_seeded_events(store, now):
    assert [e.id for e in events_for_day(store.events, now.year, now.month, now.day)] == ['ev1']


# ---------------------------------------------------------------------------
# create / delete
# ---------------------------------------------------------------------------

def test_default_event_title():
    assert default_event_title('TechnicalVisit', 'Ana') == 'Visita: Ana'
    assert default_event_title('Installation', 'Ana') == 'Instalação: Ana'


def test_create_event_generates_title(store):
    event = create_event(store, '3', date(2026, 3, 12), time='10:00', type='Installation',
                         client_name='Maria Helena')
    assert event.title == 'Instalação: Maria Helena'
    assert event.id.startswith('ev')
    assert store.events[-1] == event


def test_create_event_keeps_explicit_title(store):
    event = create_event(store, '1', date(2026, 3, 12), title='Medição extra')
    assert event.title == 'Medição extra'
    assert event.type == 'TechnicalVisit'
    assert event.time == '09:00'


def test_double_booking_allowed(store, now):
    create_event(store, '2', now.date(), time='14:00', client_name='Construtora Souza')
    assert len(events_for_day(store.events, now.year, now.month, now.day)) == 2


def test_create_event_requires_client(store):
    with pytest.raises(ValueError, match='Selecione um cliente'):
        create_event(store, '', date(2026, 3, 12))


def test_create_event_rejects_unknown_type(store):
    with pytest.raises(ValueError, match='event type'):
        create_event(store, '1', date(2026, 3, 12), type='Delivery')


@pytest.mark.parametrize('time', ['9:00', '24:00', '12:60', 'noon', ''])
def test_create_event_rejects_bad_time(store, time):
    with pytest.raises(ValueError, match='Invalid time'):
        create_event(store, '1', date(2026, 3, 12), time=time)


def test_create_event_emits_event(store):
    with patch('shopcrm.engine.agenda.bus.emit') as mock_emit:
        event = create_event(store, '1', date(2026, 3, 12))
    mock_emit.assert_called_once_with(EVENT_EVENT_SCHEDULED, {'event_id': event.id, 'event': event})


def test_delete_event(store):
    assert delete_event(store, 'ev1') is True
    assert [e.id for e in store.events] == ['ev2']
    assert delete_event(store, 'ev1') is False


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def test_render_month_marks_booked_days():
    events = [CalendarEvent(event_date=date(2026, 3, 10)), CalendarEvent(event_date=date(2026, 4, 2))]
    text = render_month(month_grid(2026, 3), events)
    lines = text.splitlines()
    assert lines[0].strip() == 'Março de 2026'
    assert ' 10*' in text
    assert '  2*' not in text


def test_event_label():
    assert event_label(CalendarEvent(type='Installation')) == 'Instalação'
    assert event_label(CalendarEvent(type='TechnicalVisit')) == 'Visita Técnica'
