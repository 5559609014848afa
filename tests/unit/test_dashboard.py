"""
Unit tests for dashboard aggregates (shopcrm/engine/dashboard.py).
Pure functions over project tuples, no mocking required.
"""

import pytest

from shopcrm.models import Project, ProjectStatus, STATUS_ORDER
from shopcrm.engine.dashboard import (
    active_count,
    build_summary,
    completed_count,
    format_brl,
    format_kilo,
    recent_projects,
    short_label,
    status_counts,
    total_revenue,
    value_ranking,
)


def test_total_revenue_of_seed(store):
    assert total_revenue(store.projects) == 19300


def test_total_revenue_empty():
    assert total_revenue(()) == 0


def test_active_excludes_new_and_completed():
    projects = [Project(status=s) for s in STATUS_ORDER]
    assert active_count(projects) == 3


def test_completed_count(store):
    assert completed_count(store.projects) == 1


def test_status_counts_include_zeros_in_order(store):
    counts = status_counts(store.projects)
    assert [s for s, _ in counts] == list(STATUS_ORDER)
    assert dict(counts) == {
        ProjectStatus.NEW: 1,
        ProjectStatus.MEASUREMENT: 0,
        ProjectStatus.PRODUCTION: 1,
        ProjectStatus.INSTALLATION: 0,
        ProjectStatus.COMPLETED: 1,
    }


@pytest.mark.parametrize('title,expected', [
    ('Portão', 'Portão'),
    ('Exatamente 15 c', 'Exatamente 15 c'),
    ('Portão Automático Basculante', 'Portão Automáti...'),
])
def test_short_label(title, expected):
    assert short_label(title) == expected


def test_value_ranking_highest_first(store):
    ranking = value_ranking(store.projects)
    assert [r['value'] for r in ranking] == [12000, 4500, 2800]
    assert ranking[0]['full_title'] == 'Grade de Proteção Janelas'
    assert ranking[0]['name'] == 'Grade de Proteç...'


def test_recent_projects_limit():
    projects = [Project(id=str(i)) for i in range(6)]
    assert [p.id for p in recent_projects(projects)] == ['0', '1', '2', '3']
    assert len(recent_projects(projects, limit=2)) == 2


@pytest.mark.parametrize('value,expected', [
    (0, 'R$ 0,00'),
    (4500, 'R$ 4.500,00'),
    (1234.56, 'R$ 1.234,56'),
    (1234567.8, 'R$ 1.234.567,80'),
])
def test_format_brl(value, expected):
    assert format_brl(value) == expected


def test_format_kilo():
    assert format_kilo(19300) == 'R$ 19.3k'


def test_build_summary(store):
    summary = build_summary(store)
    assert summary['total_revenue'] == 19300
    assert summary['active'] == 1
    assert summary['total'] == 3
    assert summary['completed'] == 1
    assert len(summary['status_counts']) == 5
    assert len(summary['recent']) == 3
