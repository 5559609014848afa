"""
Unit tests for the CRM Engine (shopcrm/engine/crm.py).

Strategy: run against a real seeded RecordStore (see conftest.py). Bus events
are verified by patching shopcrm.engine.crm.bus.emit.
"""

from datetime import datetime
from unittest.mock import patch

import pytest

from shopcrm.models import Client
from shopcrm.engine.crm import (
    UNKNOWN_CLIENT,
    create_client,
    delete_client,
    get_client,
    get_interactions,
    log_interaction,
    resolve_client_name,
    search_clients,
)
from shopcrm.bus.events import EVENT_CLIENT_CREATED, EVENT_CLIENT_DELETED, EVENT_INTERACTION_LOGGED


# ---------------------------------------------------------------------------
# create_client
# ---------------------------------------------------------------------------

def test_create_client_appends_with_new_id(store):
    client = create_client(store, Client(name='João Pedro', phone='(11) 95555-0000'))
    assert client.id not in ('1', '2', '3')
    assert store.clients[-1] == client
    assert len(store.clients) == 4


def test_create_client_starts_without_history(store):
    client = create_client(store, Client(name='João', phone='1', interactions=('bogus',)))
    assert client.interactions == ()


@pytest.mark.parametrize('name,phone', [('', '123'), ('Ana', ''), ('   ', '123'), ('Ana', '  ')])
def test_create_client_requires_name_and_phone(store, name, phone):
    with pytest.raises(ValueError, match='Nome e Telefone'):
        create_client(store, Client(name=name, phone=phone))
    assert len(store.clients) == 3


def test_create_client_emits_event(store):
    with patch('shopcrm.engine.crm.bus.emit') as mock_emit:
        client = create_client(store, Client(name='Ana', phone='1'))
    mock_emit.assert_called_once_with(EVENT_CLIENT_CREATED, {'client_id': client.id, 'client': client})


# ---------------------------------------------------------------------------
# get / resolve
# ---------------------------------------------------------------------------

def test_get_client(store):
    assert get_client(store, '2').name == 'Construtora Souza'


def test_get_client_not_found(store):
    assert get_client(store, '999') is None


def test_resolve_client_name(store):
    assert resolve_client_name(store, '1') == 'Roberto Almeida'


def test_resolve_missing_client_uses_placeholder(store):
    assert resolve_client_name(store, '999') == UNKNOWN_CLIENT
    assert resolve_client_name(store, None) == UNKNOWN_CLIENT
    assert resolve_client_name(store, '999', default='Cliente') == 'Cliente'


# ---------------------------------------------------------------------------
# delete_client
# ---------------------------------------------------------------------------

def test_delete_client_removes_client_and_history(store):
    assert delete_client(store, '1') is True
    assert get_client(store, '1') is None
    assert get_interactions(store, '1') == []


def test_delete_client_keeps_projects_and_events(store):
    delete_client(store, '1')
    assert [p.id for p in store.projects if p.client_id == '1'] == ['101']
    assert [e.id for e in store.events if e.client_id == '1'] == ['ev1']
    assert resolve_client_name(store, '1') == UNKNOWN_CLIENT


def test_delete_client_not_found(store):
    with patch('shopcrm.engine.crm.bus.emit') as mock_emit:
        assert delete_client(store, '999') is False
    mock_emit.assert_not_called()


def test_delete_client_emits_event(store):
    with patch('shopcrm.engine.crm.bus.emit') as mock_emit:
        delete_client(store, '3')
    mock_emit.assert_called_once_with(EVENT_CLIENT_DELETED, {'client_id': '3'})


# ---------------------------------------------------------------------------
# search_clients
# ---------------------------------------------------------------------------

def test_search_without_term_returns_all_in_order(store):
    assert [c.id for c in search_clients(store)] == ['1', '2', '3']
    assert [c.id for c in search_clients(store, '')] == ['1', '2', '3']


def test_search_by_name_is_case_insensitive(store):
    assert [c.id for c in search_clients(store, 'souza')] == ['2']


def test_search_by_phone(store):
    assert [c.id for c in search_clients(store, '97777')] == ['3']


def test_search_by_email(store):
    assert [c.id for c in search_clients(store, 'EMAIL.COM')] == ['1', '3']


def test_search_no_match(store):
    assert search_clients(store, 'zzz') == []


# ---------------------------------------------------------------------------
# log_interaction
# ---------------------------------------------------------------------------

def test_log_interaction_prepends(store):
    when = datetime(2026, 3, 10, 15, 0)
    interaction = log_interaction(store, '1', 'Email', 'Orçamento enviado', interaction_date=when)
    history = get_interactions(store, '1')
    assert history[0] == interaction
    assert [i.id for i in history[1:]] == ['int2', 'int1']
    assert interaction.interaction_date == when
    assert interaction.type == 'Email'


def test_log_interaction_strips_notes_and_stamps_now(store):
    interaction = log_interaction(store, '3', 'Note', '  ligar amanhã  ')
    assert interaction.notes == 'ligar amanhã'
    assert interaction.interaction_date is not None


def test_log_interaction_leaves_other_clients_untouched(store):
    before = get_client(store, '2')
    log_interaction(store, '1', 'Call', 'Retorno')
    assert get_client(store, '2') is before


def test_log_interaction_unknown_client_returns_none(store):
    assert log_interaction(store, '999', 'Call', 'x') is None


def test_log_interaction_invalid_type_raises(store):
    with pytest.raises(ValueError, match='Invalid interaction type'):
        log_interaction(store, '1', 'Fax', 'x')


def test_log_interaction_empty_notes_raises(store):
    with pytest.raises(ValueError, match='notes'):
        log_interaction(store, '1', 'Call', '   ')


def test_log_interaction_emits_event(store):
    with patch('shopcrm.engine.crm.bus.emit') as mock_emit:
        interaction = log_interaction(store, '2', 'Meeting', 'Visita')
    name, payload = mock_emit.call_args[0]
    assert name == EVENT_INTERACTION_LOGGED
    assert payload['client_id'] == '2'
    assert payload['interaction'] == interaction


def test_get_interactions_unknown_client(store):
    assert get_interactions(store, '999') == []
