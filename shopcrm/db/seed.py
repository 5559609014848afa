"""
Demo data loaded into a fresh store so every screen has something to show.
Dates are relative to `now` so the recency filters stay meaningful.
"""

from datetime import datetime, timedelta
import logging
from typing import Optional

from shopcrm.db.store import RecordStore
from shopcrm.models import (
    CalendarEvent, Client, Interaction, InventoryItem, Project, ProjectStatus,
)

logger = logging.getLogger(__name__)


def seed_store(store: RecordStore, now: Optional[datetime] = None) -> RecordStore:
    """Fill every collection with the demo records. Returns the store."""
    now = now or datetime.now()
    today = now.date()

    store.commit('clients', [
        Client(
            id='1', name='Roberto Almeida', phone='(11) 99999-1234',
            email='roberto@email.com', address='Rua das Flores, 123',
            interactions=(
                Interaction(id='int2', interaction_date=now - timedelta(days=6, hours=3),
                            type='Whatsapp', notes='Enviado fotos de modelos de portão.'),
                Interaction(id='int1', interaction_date=now - timedelta(days=8, hours=7),
                            type='Call', notes='Cliente interessado em portão automático.'),
            ),
        ),
        Client(
            id='2', name='Construtora Souza', phone='(11) 98888-5678',
            email='contato@souza.com', address='Av. Industrial, 400',
            interactions=(
                Interaction(id='int3', interaction_date=now - timedelta(days=13),
                            type='Meeting', notes='Reunião presencial para medição da obra.'),
            ),
        ),
        Client(
            id='3', name='Maria Helena', phone='(11) 97777-9999',
            email='maria@email.com', address='Alameda Santos, 50',
        ),
    ])

    store.commit('projects', [
        Project(id='101', client_id='1', title='Portão Automático Basculante',
                description='Portão ferro galvanizado...', value=4500,
                status=ProjectStatus.PRODUCTION, deadline=today + timedelta(days=23),
                last_update=now - timedelta(days=3)),
        Project(id='102', client_id='2', title='Grade de Proteção Janelas',
                description='10 unidades padrão...', value=12000,
                status=ProjectStatus.NEW, deadline=today + timedelta(days=34),
                last_update=now - timedelta(days=2)),
        Project(id='103', client_id='3', title='Corrimão Escada Interna',
                description='Aço inox...', value=2800,
                status=ProjectStatus.COMPLETED, deadline=today - timedelta(days=13),
                last_update=now - timedelta(days=13)),
    ])

    store.commit('inventory', [
        InventoryItem(id='1', name='Barra Chata 1/2 x 1/8', category='Perfis',
                      quantity=50, min_quantity=20, unit='br'),
        InventoryItem(id='2', name='Eletrodo 2.5mm', category='Consumíveis',
                      quantity=2, min_quantity=5, unit='cx'),
        InventoryItem(id='3', name='Tinta Esmalte Preto', category='Pintura',
                      quantity=8, min_quantity=3, unit='lt'),
        InventoryItem(id='4', name='Disco de Corte 4.5"', category='Consumíveis',
                      quantity=15, min_quantity=10, unit='un'),
    ])

    store.commit('events', [
        CalendarEvent(id='ev1', client_id='1', title='Visita: Roberto Almeida',
                      event_date=today, time='14:00', type='TechnicalVisit',
                      notes='Medir vão da garagem'),
        CalendarEvent(id='ev2', client_id='2', title='Instalação: Construtora Souza',
                      event_date=today + timedelta(days=1), time='09:00', type='Installation',
                      notes='Levar equipe completa'),
    ])

    logger.debug("Seeded store with demo clients, projects, inventory and events")
    return store
