"""
Quotes - Compose an itemised quote and collapse it into a pipeline project.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Tuple
import uuid

from shopcrm.db.store import RecordStore
from shopcrm.engine import crm, pipeline
from shopcrm.engine.dashboard import format_brl
from shopcrm.engine.notifier import send_notification
from shopcrm.models import Project, Quote, QuoteItem, Result

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Preencha o cliente, título e adicione itens antes de gerar a proposta."


def add_item(items: Tuple[QuoteItem, ...], description: str, quantity: float = 1, unit_price: float = 0) -> Tuple[QuoteItem, ...]:
    """
    Append a line. Blank descriptions, non-positive prices and quantities
    below one are ignored: the original tuple comes back unchanged.
    """
    if not description or not description.strip() or unit_price <= 0 or quantity < 1:
        logger.debug(f"add_item ignored: description={description!r} quantity={quantity} unit_price={unit_price}")
        return items
    item = QuoteItem(id=uuid.uuid4().hex[:9], description=description.strip(),
                     quantity=quantity, unit_price=unit_price)
    return items + (item,)


def remove_item(items: Tuple[QuoteItem, ...], item_id: str) -> Tuple[QuoteItem, ...]:
    return tuple(i for i in items if i.id != item_id)


def quote_total(items) -> float:
    return sum(i.subtotal for i in items)


def format_items(items) -> str:
    """One '- 2x Description (R$ 10.00)' line per item."""
    return "\n".join(f"- {i.quantity:g}x {i.description} (R$ {i.unit_price:.2f})" for i in items)


def is_ready(quote: Quote) -> bool:
    """Client, title and at least one item are present."""
    return bool(quote.client_id and quote.title.strip() and quote.items)


def saved_message(client_name: str, quote: Quote) -> str:
    return (
        f"🛠️ *Novo serviço salvo!* {client_name} aprovou o orçamento "
        f"\"{quote.title}\" ({format_brl(quote.total)})."
    )


def save_quote(
    store: RecordStore,
    quote: Quote,
    now: Optional[datetime] = None,
    notify: Optional[Callable[[str], Result]] = None,
) -> Tuple[Project, Result]:
    """
    Turn a quote into a new project (value = total, description = proposal)
    and announce it on the chat channel.
    Returns: (project, notification result)
    """
    if not is_ready(quote):
        raise ValueError(MISSING_FIELDS_MESSAGE)

    project = pipeline.create_project(
        store,
        client_id=quote.client_id,
        title=quote.title,
        description=quote.proposal,
        value=quote.total,
        now=now,
    )

    client_name = crm.resolve_client_name(store, quote.client_id, default='Cliente')
    notify = notify or send_notification
    result = notify(saved_message(client_name, quote))
    if not result.ok:
        logger.warning(f"save_quote: project {project.id} saved but notification failed: {result.error}")
    return project, result


def reset(quote: Quote) -> Quote:
    """Blank quote, ready for the next one."""
    return replace(quote, client_id=None, title='', items=(), proposal='')
