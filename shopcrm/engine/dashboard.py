"""
Dashboard - Derived figures over the project list.
"""

from typing import Any, Dict, List, Tuple

from shopcrm.db.store import RecordStore
from shopcrm.models import Project, ProjectStatus, STATUS_ORDER

_LABEL_MAX = 15


def total_revenue(projects) -> float:
    return sum(p.value for p in projects)


def active_count(projects) -> int:
    """Projects already under way: neither new nor completed."""
    return sum(1 for p in projects if p.status not in (ProjectStatus.NEW, ProjectStatus.COMPLETED))


def completed_count(projects) -> int:
    return sum(1 for p in projects if p.status == ProjectStatus.COMPLETED)


def status_counts(projects) -> List[Tuple[ProjectStatus, int]]:
    """(status, count) for every status in workflow order, zeros included."""
    counts = {status: 0 for status in STATUS_ORDER}
    for p in projects:
        counts[p.status] = counts.get(p.status, 0) + 1
    return [(status, counts[status]) for status in STATUS_ORDER]


def short_label(title: str, limit: int = _LABEL_MAX) -> str:
    return title if len(title) <= limit else title[:limit] + '...'


def value_ranking(projects) -> List[Dict[str, Any]]:
    """Projects by value, highest first, with chart-friendly labels."""
    ranked = sorted(projects, key=lambda p: p.value, reverse=True)
    return [
        {'name': short_label(p.title), 'full_title': p.title, 'value': p.value}
        for p in ranked
    ]


def recent_projects(projects, limit: int = 4) -> List[Project]:
    return list(projects)[:limit]


def format_brl(value: float) -> str:
    """Brazilian currency: R$ 1.234,56"""
    text = f"{value:,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_kilo(value: float) -> str:
    """Compact revenue figure: R$ 19.3k"""
    return f"R$ {value / 1000:.1f}k"


def build_summary(store: RecordStore) -> Dict[str, Any]:
    projects = store.projects
    return {
        'total_revenue': total_revenue(projects),
        'active': active_count(projects),
        'total': len(projects),
        'completed': completed_count(projects),
        'status_counts': status_counts(projects),
        'value_ranking': value_ranking(projects),
        'recent': recent_projects(projects),
    }
