"""
Data Models
Dataclasses for all entities. These are pure Python objects, no storage logic.
Records are frozen: a change produces a new record via dataclasses.replace().
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Tuple


INTERACTION_TYPES = ('Call', 'Email', 'Meeting', 'Whatsapp', 'Note')

INTERACTION_LABELS = {
    'Call': 'Ligação',
    'Email': 'Email',
    'Meeting': 'Reunião',
    'Whatsapp': 'WhatsApp',
    'Note': 'Nota',
}

EVENT_TYPES = ('TechnicalVisit', 'Installation')

EVENT_LABELS = {
    'TechnicalVisit': 'Visita Técnica',
    'Installation': 'Instalação',
}

INVENTORY_UNITS = ('un', 'm', 'kg', 'lt', 'cx')


class ProjectStatus(Enum):
    """Workflow position of a project. Values are the display labels."""
    NEW = 'Novo'
    MEASUREMENT = 'Medição'
    PRODUCTION = 'Produção'
    INSTALLATION = 'Instalação'
    COMPLETED = 'Concluído'


# The workflow order is data, not enum declaration order.
STATUS_ORDER: Tuple[ProjectStatus, ...] = (
    ProjectStatus.NEW,
    ProjectStatus.MEASUREMENT,
    ProjectStatus.PRODUCTION,
    ProjectStatus.INSTALLATION,
    ProjectStatus.COMPLETED,
)

TERMINAL_STATUS = STATUS_ORDER[-1]


def status_index(status: ProjectStatus) -> int:
    """Position of a status in the workflow."""
    return STATUS_ORDER.index(status)


def parse_status(raw: str) -> ProjectStatus:
    """Accept an enum name (PRODUCTION), its label (Produção) or a 0-based index."""
    text = raw.strip()
    if text.isdigit():
        idx = int(text)
        if 0 <= idx < len(STATUS_ORDER):
            return STATUS_ORDER[idx]
    for status in STATUS_ORDER:
        if text.upper() == status.name or text.casefold() == status.value.casefold():
            return status
    raise ValueError(f"Unknown status '{raw}'. Choose from: {', '.join(s.value for s in STATUS_ORDER)}")


@dataclass(frozen=True)
class Interaction:
    """One entry in a client's contact history"""
    id: Optional[str] = None
    interaction_date: Optional[datetime] = None
    type: str = 'Call'
    notes: str = ''


@dataclass(frozen=True)
class Client:
    """Client entity. Interactions are owned and kept newest first."""
    id: Optional[str] = None
    name: str = ''
    phone: str = ''
    email: str = ''
    address: str = ''
    interactions: Tuple[Interaction, ...] = ()


@dataclass(frozen=True)
class Project:
    """Pipeline card. client_id is a weak reference; the client may be gone."""
    id: Optional[str] = None
    client_id: Optional[str] = None
    title: str = ''
    description: str = ''
    value: float = 0.0
    status: ProjectStatus = ProjectStatus.NEW
    deadline: Optional[date] = None
    last_update: Optional[datetime] = None


@dataclass(frozen=True)
class InventoryItem:
    """Stock line for a material or consumable"""
    id: Optional[str] = None
    name: str = ''
    category: str = ''
    quantity: float = 0
    min_quantity: float = 0
    unit: str = 'un'

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_quantity


@dataclass(frozen=True)
class CalendarEvent:
    """Technical visit or installation booked for a client"""
    id: Optional[str] = None
    client_id: Optional[str] = None
    title: str = ''
    event_date: Optional[date] = None
    time: str = '09:00'
    type: str = 'TechnicalVisit'
    notes: str = ''


@dataclass(frozen=True)
class QuoteItem:
    """Line of a quote being composed. Never stored on its own."""
    id: Optional[str] = None
    description: str = ''
    quantity: float = 1
    unit_price: float = 0.0

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price


@dataclass
class Quote:
    """Quote under composition; collapses into a Project on save."""
    client_id: Optional[str] = None
    title: str = ''
    items: Tuple[QuoteItem, ...] = ()
    proposal: str = ''

    @property
    def total(self) -> float:
        return sum(item.subtotal for item in self.items)


@dataclass(frozen=True)
class Result:
    """Outcome of a call to an external service."""
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> 'Result':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, value: Any = None) -> 'Result':
        return cls(ok=False, value=value, error=error)
