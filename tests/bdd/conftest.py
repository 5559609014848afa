"""
Shared fixtures and step definitions for BDD tests.

- runner, session, context: available to all scenario files in this directory
- no_logging: autouse, prevents log file creation during tests
- demo data, board and output steps: shared across all feature files
"""

import pytest
from unittest.mock import patch
from click.testing import CliRunner
from pytest_bdd import given, when, then, parsers

from shopcrm.cli.main import Session, cli
from shopcrm.db.seed import seed_store
from shopcrm.db.store import RecordStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def session():
    """One seeded shop session shared by every step of a scenario."""
    return Session(seed_store(RecordStore()))


@pytest.fixture
def context():
    """Mutable dict shared between Given/When/Then steps within a scenario."""
    return {}


@pytest.fixture
def run(runner, session, context):
    """Invoke the CLI against the scenario's session and keep the result."""
    def _run(args, input=None):
        context["result"] = runner.invoke(cli, args, obj=session, input=input)
        return context["result"]
    return _run


@pytest.fixture(autouse=True)
def no_logging():
    with patch("shopcrm.cli.main.configure_logging"):
        yield


@given("the shop has its demo data")
def demo_data(session):
    assert len(session.store.clients) == 3


@when("the owner opens the board")
def open_board(run):
    run(["pipeline", "board"])


@then(parsers.parse('the output contains "{text}"'))
def output_contains(context, text):
    assert text in context["result"].output, (
        f"Expected {text!r} in output:\n{context['result'].output}"
    )


@then(parsers.parse('the output does not contain "{text}"'))
def output_does_not_contain(context, text):
    assert text not in context["result"].output, (
        f"Did not expect {text!r} in output:\n{context['result'].output}"
    )
