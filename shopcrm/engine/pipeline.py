"""
Pipeline Engine - Project workflow, status transitions and board filters.

Status moves forward one step at a time through STATUS_ORDER via
advance_status(); set_status() is the explicit manual override. Both stamp
last_update. The board filter is a pure function of the project list and a
PipelineFilter value.
"""

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from shopcrm.config import config
from shopcrm.db.store import RecordStore
from shopcrm.models import Project, ProjectStatus, STATUS_ORDER, TERMINAL_STATUS, status_index
from shopcrm.bus.events import bus, EVENT_PROJECT_CREATED, EVENT_PROJECT_STATUS_CHANGED

logger = logging.getLogger(__name__)

# Recency windows offered by the board, in days. None means "all".
RECENCY_WINDOWS = (7, 30, 90)

_ONE_DAY = timedelta(days=1)


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

def next_status(status: ProjectStatus) -> Optional[ProjectStatus]:
    """The status after `status`, or None at the end of the workflow."""
    idx = status_index(status)
    if idx + 1 >= len(STATUS_ORDER):
        return None
    return STATUS_ORDER[idx + 1]


def can_advance(project: Project) -> bool:
    return project.status != TERMINAL_STATUS


def _replace_project(store: RecordStore, updated: Project) -> None:
    with store.edit('projects') as projects:
        projects[:] = [updated if p.id == updated.id else p for p in projects]


def advance_status(store: RecordStore, project_id: str, now: Optional[datetime] = None) -> Optional[Project]:
    """
    Move a project exactly one step forward and stamp last_update.
    A completed project is returned unchanged.
    Returns: the resulting project, or None if not found
    """
    project = store.find('projects', project_id)
    if project is None:
        logger.debug(f"advance_status: project_id={project_id} not found")
        return None

    target = next_status(project.status)
    if target is None:
        logger.debug(f"advance_status: project {project_id} already {project.status.value}, nothing to do")
        return project

    return _apply_status(store, project, target, now)


def set_status(
    store: RecordStore,
    project_id: str,
    status: ProjectStatus,
    now: Optional[datetime] = None,
) -> Optional[Project]:
    """
    Assign any status directly and stamp last_update.
    Returns: the updated project, or None if not found
    """
    project = store.find('projects', project_id)
    if project is None:
        logger.debug(f"set_status: project_id={project_id} not found")
        return None
    return _apply_status(store, project, status, now)


def _apply_status(store: RecordStore, project: Project, status: ProjectStatus, now: Optional[datetime]) -> Project:
    previous = project.status
    updated = replace(project, status=status, last_update=now or datetime.now())
    _replace_project(store, updated)

    logger.info(f"Project {project.id}: {previous.value} -> {status.value}")
    bus.emit(EVENT_PROJECT_STATUS_CHANGED, {
        'project_id': project.id,
        'from': previous,
        'to': status,
    })
    return updated


# =============================================================================
# PROJECT OPERATIONS
# =============================================================================

def create_project(
    store: RecordStore,
    client_id: str,
    title: str = '',
    description: str = '',
    value: float = 0,
    now: Optional[datetime] = None,
    deadline: Optional[date] = None,
) -> Project:
    """
    Create a project in the first workflow status.
    Returns: the stored project
    """
    if not client_id:
        raise ValueError("A project needs a client")
    if value < 0:
        raise ValueError("Project value cannot be negative")

    now = now or datetime.now()
    project = Project(
        id=store.next_id(),
        client_id=client_id,
        title=title.strip() or 'Novo Projeto',
        description=description,
        value=value,
        status=STATUS_ORDER[0],
        deadline=deadline or (now + timedelta(days=config.DEFAULT_DEADLINE_DAYS)).date(),
        last_update=now,
    )
    with store.edit('projects') as projects:
        projects.append(project)

    logger.info(f"Created project ID {project.id}: {project.title} ({project.value:.2f})")
    bus.emit(EVENT_PROJECT_CREATED, {'project_id': project.id, 'project': project})
    return project


def get_project(store: RecordStore, project_id: str) -> Optional[Project]:
    return store.find('projects', project_id)


def client_history(store: RecordStore, client_id: str) -> List[Project]:
    """A client's projects, most recently updated first."""
    projects = [p for p in store.projects if p.client_id == client_id]
    return sorted(projects, key=lambda p: _as_datetime(p.last_update), reverse=True)


# =============================================================================
# BOARD FILTERS
# =============================================================================

@dataclass(frozen=True)
class PipelineFilter:
    """Board filter state. Unset criteria always pass."""
    client_id: Optional[str] = None
    days: Optional[int] = None
    status: Optional[ProjectStatus] = None

    def __post_init__(self):
        if self.days is not None and self.days not in RECENCY_WINDOWS:
            raise ValueError(f"Invalid recency window {self.days}. Choose from: {RECENCY_WINDOWS} or all")

    def toggle_status(self, status: ProjectStatus) -> 'PipelineFilter':
        """Focus on a status; selecting the focused status again clears it."""
        return replace(self, status=None if self.status == status else status)

    def clear(self) -> 'PipelineFilter':
        return PipelineFilter()

    @property
    def has_active_filters(self) -> bool:
        return self.client_id is not None or self.days is not None or self.status is not None


def _as_datetime(value) -> datetime:
    if value is None:
        return datetime.min
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def elapsed_days(last_update, now: Optional[datetime] = None) -> int:
    """Whole days since last_update, rounded up: ceil(|now - last_update| / 1 day)."""
    now = now or datetime.now()
    delta = abs(now - _as_datetime(last_update))
    return math.ceil(delta / _ONE_DAY)


def matches(project: Project, flt: PipelineFilter, now: Optional[datetime] = None) -> bool:
    if flt.client_id is not None and project.client_id != flt.client_id:
        return False
    if flt.days is not None:
        if project.last_update is None or elapsed_days(project.last_update, now) > flt.days:
            return False
    if flt.status is not None and project.status != flt.status:
        return False
    return True


def filter_projects(projects, flt: PipelineFilter, now: Optional[datetime] = None) -> List[Project]:
    """Projects passing every active criterion, in store order."""
    now = now or datetime.now()
    return [p for p in projects if matches(p, flt, now)]


def visible_statuses(flt: PipelineFilter) -> List[ProjectStatus]:
    """The focused status alone, or every status in workflow order."""
    if flt.status is not None:
        return [flt.status]
    return list(STATUS_ORDER)


def group_by_status(projects, flt: PipelineFilter, now: Optional[datetime] = None) -> Dict[ProjectStatus, List[Project]]:
    """
    Board columns: visible status -> filtered projects.
    Empty columns are kept; cards keep store order.
    """
    filtered = filter_projects(projects, flt, now)
    columns: Dict[ProjectStatus, List[Project]] = OrderedDict((s, []) for s in visible_statuses(flt))
    for project in filtered:
        if project.status in columns:
            columns[project.status].append(project)
    return columns
