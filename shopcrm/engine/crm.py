"""
CRM Engine - Client and interaction operations.
Pure Python module with no AI dependency. All writes go through the record store.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from shopcrm.db.store import RecordStore
from shopcrm.models import Client, Interaction, INTERACTION_TYPES
from shopcrm.bus.events import bus, EVENT_CLIENT_CREATED, EVENT_CLIENT_DELETED, EVENT_INTERACTION_LOGGED

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = 'Cliente Desconhecido'


# =============================================================================
# CLIENT OPERATIONS
# =============================================================================

def create_client(store: RecordStore, client: Client) -> Client:
    """
    Create a new client. Name and phone are required.
    Returns: the stored client (with id assigned)
    """
    if not client.name.strip() or not client.phone.strip():
        raise ValueError("Nome e Telefone são obrigatórios")

    new_client = replace(client, id=store.next_id(), interactions=())
    with store.edit('clients') as clients:
        clients.append(new_client)

    logger.info(f"Created client ID {new_client.id}: {new_client.name}")
    bus.emit(EVENT_CLIENT_CREATED, {'client_id': new_client.id, 'client': new_client})
    return new_client


def get_client(store: RecordStore, client_id: str) -> Optional[Client]:
    """Get client by ID."""
    client = store.find('clients', client_id)
    if client is None:
        logger.debug(f"get_client: client_id={client_id} not found")
    return client


def resolve_client_name(store: RecordStore, client_id: Optional[str], default: str = UNKNOWN_CLIENT) -> str:
    """Name for a weak client reference, or `default` when the client is gone."""
    client = store.find('clients', client_id) if client_id else None
    return client.name if client else default


def delete_client(store: RecordStore, client_id: str) -> bool:
    """
    Delete a client together with its interaction history.
    Projects and calendar events that point at the client are left untouched.
    Returns: True if deleted, False if not found
    """
    if store.find('clients', client_id) is None:
        return False

    with store.edit('clients') as clients:
        clients[:] = [c for c in clients if c.id != client_id]

    logger.info(f"Deleted client ID {client_id}")
    bus.emit(EVENT_CLIENT_DELETED, {'client_id': client_id})
    return True


def search_clients(store: RecordStore, term: Optional[str] = None) -> List[Client]:
    """
    Case-insensitive substring search over name, phone and email.
    An empty term returns every client in store order.
    """
    clients = list(store.clients)
    if not term:
        return clients

    needle = term.lower()
    results = [
        c for c in clients
        if needle in c.name.lower() or needle in c.phone.lower() or needle in c.email.lower()
    ]
    logger.debug(f"search_clients: {len(results)} results (term={term!r})")
    return results


# =============================================================================
# INTERACTION OPERATIONS
# =============================================================================

def log_interaction(
    store: RecordStore,
    client_id: str,
    type: str,
    notes: str,
    interaction_date: Optional[datetime] = None,
) -> Optional[Interaction]:
    """
    Record an interaction at the top of the client's history (newest first).
    Returns: the new interaction, or None if the client does not exist
    """
    if type not in INTERACTION_TYPES:
        raise ValueError(f"Invalid interaction type '{type}'. Choose from: {', '.join(INTERACTION_TYPES)}")
    if not notes or not notes.strip():
        raise ValueError("Interaction notes are required")

    client = store.find('clients', client_id)
    if client is None:
        logger.warning(f"log_interaction: client_id={client_id} not found")
        return None

    interaction = Interaction(
        id=store.next_id('int'),
        interaction_date=interaction_date or datetime.now(),
        type=type,
        notes=notes.strip(),
    )
    updated = replace(client, interactions=(interaction,) + client.interactions)

    with store.edit('clients') as clients:
        clients[:] = [updated if c.id == client_id else c for c in clients]

    logger.info(f"Logged interaction ID {interaction.id} for client {client_id}")
    bus.emit(EVENT_INTERACTION_LOGGED, {
        'interaction_id': interaction.id,
        'client_id': client_id,
        'interaction': interaction,
    })
    return interaction


def get_interactions(store: RecordStore, client_id: str) -> List[Interaction]:
    """All interactions for a client, newest first. Empty when the client is unknown."""
    client = store.find('clients', client_id)
    if client is None:
        return []
    return list(client.interactions)
