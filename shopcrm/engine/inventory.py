"""
Inventory Engine - Stock lines, low-stock monitoring and the stock report.

Low stock means quantity <= min_quantity. LowStockMonitor turns the low-stock
count into a one-shot alert: it fires when the count leaves zero and re-arms
only after the count is back to zero.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from shopcrm.config import config
from shopcrm.db.store import RecordStore
from shopcrm.models import InventoryItem
from shopcrm.bus.events import (
    bus, EVENT_INVENTORY_ITEM_ADDED, EVENT_INVENTORY_ITEM_UPDATED,
    EVENT_INVENTORY_ITEM_DELETED, EVENT_LOW_STOCK_ALERT,
)

logger = logging.getLogger(__name__)

CRITICAL_LABEL = 'Crítico'
NORMAL_LABEL = 'Normal'

_RULE = '-----------------------------------'


def _validate(item: InventoryItem) -> None:
    if not item.name or not item.name.strip():
        raise ValueError("Item name is required")
    if item.quantity < 0 or item.min_quantity < 0:
        raise ValueError("Quantities cannot be negative")


# =============================================================================
# CRUD
# =============================================================================

def add_item(store: RecordStore, item: InventoryItem) -> InventoryItem:
    """Add a stock line. Returns the stored item (with id assigned)."""
    _validate(item)
    new_item = replace(item, id=store.next_id())
    with store.edit('inventory') as inventory:
        inventory.append(new_item)

    logger.info(f"Added inventory item ID {new_item.id}: {new_item.name}")
    bus.emit(EVENT_INVENTORY_ITEM_ADDED, {'item_id': new_item.id, 'item': new_item})
    return new_item


def update_item(store: RecordStore, item: InventoryItem) -> bool:
    """
    Overwrite a stock line (quantity is replaced, not adjusted).
    Returns: True if updated, False if not found
    """
    _validate(item)
    if store.find('inventory', item.id) is None:
        return False

    with store.edit('inventory') as inventory:
        inventory[:] = [item if i.id == item.id else i for i in inventory]

    logger.info(f"Updated inventory item ID {item.id}: qty={item.quantity} min={item.min_quantity}")
    bus.emit(EVENT_INVENTORY_ITEM_UPDATED, {'item_id': item.id, 'item': item})
    return True


def delete_item(store: RecordStore, item_id: str) -> bool:
    """Returns: True if deleted, False if not found"""
    if store.find('inventory', item_id) is None:
        return False

    with store.edit('inventory') as inventory:
        inventory[:] = [i for i in inventory if i.id != item_id]

    logger.info(f"Deleted inventory item ID {item_id}")
    bus.emit(EVENT_INVENTORY_ITEM_DELETED, {'item_id': item_id})
    return True


def get_item(store: RecordStore, item_id: str) -> Optional[InventoryItem]:
    return store.find('inventory', item_id)


def search_items(store: RecordStore, term: Optional[str] = None) -> List[InventoryItem]:
    """Case-insensitive match on name or category."""
    items = list(store.inventory)
    if not term:
        return items
    needle = term.lower()
    return [i for i in items if needle in i.name.lower() or needle in i.category.lower()]


# =============================================================================
# LOW STOCK
# =============================================================================

def low_stock_items(items) -> List[InventoryItem]:
    return [i for i in items if i.is_low_stock]


def low_stock_count(items) -> int:
    return sum(1 for i in items if i.is_low_stock)


def emit_low_stock_alert(count: int) -> None:
    logger.warning(f"Low stock alert: {count} item(s) at or below minimum")
    bus.emit(EVENT_LOW_STOCK_ALERT, {'count': count})


class LowStockMonitor:
    """
    Edge detector over the low-stock count.

    update() fires the alert once when the count goes from 0 to >0, stays
    quiet while it remains above zero, and re-arms when it returns to 0.
    """

    def __init__(self, on_alert: Optional[Callable[[int], None]] = None):
        self._on_alert = on_alert or emit_low_stock_alert
        self._previous = 0

    @property
    def previous_count(self) -> int:
        return self._previous

    def update(self, count: int) -> bool:
        """Feed the latest count. Returns True when an alert fired."""
        fired = self._previous == 0 and count > 0
        self._previous = count
        if fired:
            self._on_alert(count)
        return fired

    def check(self, items) -> bool:
        """Recompute the count from an inventory collection and update."""
        return self.update(low_stock_count(items))


# =============================================================================
# REPORT
# =============================================================================

def _qty(value) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def generate_report(items, now: Optional[datetime] = None, company: Optional[str] = None) -> str:
    """
    Plain-text stock report for pasting into chat.
    Sections: summary counts, critical items (store order), full list sorted by name.
    """
    now = now or datetime.now()
    company = company or config.COMPANY_NAME
    items = list(items)
    critical = low_stock_items(items)

    lines = [
        f"📋 *RELATÓRIO DE ESTOQUE - {company.upper()}*",
        f"📅 Data: {now.strftime('%d/%m/%Y')} às {now.strftime('%H:%M')}",
        "",
        "📊 *RESUMO*",
        f"- Total de Itens: {len(items)}",
        f"- Itens Críticos: {len(critical)}",
        _RULE,
        "",
    ]

    if critical:
        lines.append("🚨 *ATENÇÃO - ESTOQUE BAIXO*")
        for i in critical:
            lines.append(f"[ ] {i.name.upper()}")
            lines.append(f"    Qtd: {_qty(i.quantity)} {i.unit} (Mín: {_qty(i.min_quantity)})")
        lines.extend(["", _RULE, ""])

    lines.append("📦 *LISTA GERAL*")
    for i in sorted(items, key=lambda it: it.name.casefold()):
        marker = '🔴' if i.is_low_stock else '🟢'
        label = CRITICAL_LABEL if i.is_low_stock else NORMAL_LABEL
        lines.append(f"{marker} {i.name} ({i.category}) - {label}")
        lines.append(f"    Saldo: {_qty(i.quantity)} {i.unit}")

    return "\n".join(lines) + "\n"
