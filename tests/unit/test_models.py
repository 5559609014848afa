"""
Unit tests for shopcrm/models.
Pure dataclasses and the status workflow table, no mocking required.
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from shopcrm.models import (
    Client, InventoryItem, Project, ProjectStatus, Quote, QuoteItem, Result,
    STATUS_ORDER, TERMINAL_STATUS, parse_status, status_index,
)


# ---------------------------------------------------------------------------
# Status workflow
# ---------------------------------------------------------------------------

def test_status_order_is_the_workflow():
    assert [s.value for s in STATUS_ORDER] == ['Novo', 'Medição', 'Produção', 'Instalação', 'Concluído']


def test_terminal_status_is_completed():
    assert TERMINAL_STATUS is ProjectStatus.COMPLETED


def test_status_index():
    assert status_index(ProjectStatus.NEW) == 0
    assert status_index(ProjectStatus.COMPLETED) == 4


@pytest.mark.parametrize('raw,expected', [
    ('PRODUCTION', ProjectStatus.PRODUCTION),
    ('production', ProjectStatus.PRODUCTION),
    ('Produção', ProjectStatus.PRODUCTION),
    ('medição', ProjectStatus.MEASUREMENT),
    ('0', ProjectStatus.NEW),
    ('4', ProjectStatus.COMPLETED),
    ('  Concluído ', ProjectStatus.COMPLETED),
])
def test_parse_status_accepts_name_label_and_index(raw, expected):
    assert parse_status(raw) is expected


@pytest.mark.parametrize('raw', ['Archived', '5', '', '-1'])
def test_parse_status_rejects_unknown(raw):
    with pytest.raises(ValueError, match='Unknown status'):
        parse_status(raw)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def test_records_are_frozen():
    client = Client(id='1', name='Ana', phone='1')
    with pytest.raises(FrozenInstanceError):
        client.name = 'Other'


def test_replace_produces_new_record():
    project = Project(id='1', client_id='1', title='Portão')
    moved = replace(project, status=ProjectStatus.MEASUREMENT)
    assert project.status is ProjectStatus.NEW
    assert moved.status is ProjectStatus.MEASUREMENT


def test_project_defaults():
    project = Project()
    assert project.status is ProjectStatus.NEW
    assert project.value == 0.0


@pytest.mark.parametrize('quantity,minimum,low', [
    (2, 5, True),
    (5, 5, True),
    (8, 3, False),
    (0, 0, True),
])
def test_inventory_low_stock_threshold(quantity, minimum, low):
    assert InventoryItem(name='x', quantity=quantity, min_quantity=minimum).is_low_stock is low


def test_quote_item_subtotal():
    assert QuoteItem(description='Grade', quantity=3, unit_price=150.0).subtotal == 450.0


def test_quote_total_sums_items():
    quote = Quote(items=(
        QuoteItem(description='a', quantity=2, unit_price=10.0),
        QuoteItem(description='b', quantity=1, unit_price=5.5),
    ))
    assert quote.total == 25.5


def test_empty_quote_total_is_zero():
    assert Quote().total == 0


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

def test_result_success():
    result = Result.success('text')
    assert result.ok is True
    assert result.value == 'text'
    assert result.error is None


def test_result_failure_keeps_fallback_value():
    result = Result.failure('timeout', value='placeholder')
    assert result.ok is False
    assert result.error == 'timeout'
    assert result.value == 'placeholder'
