import psycopg
import pytest

from lifeos.db.helpers import DatabaseError, with_db_retry
from lifeos.features.habits.repository import HabitRepository
from lifeos.features.player.repository import (
    ContactRepository,
    InteractionRepository,
    JournalRepository,
)
from lifeos.features.projects.repository import ProjectRepository
from lifeos.features.thoughts.repository import ThoughtRepository


def _wrapped_failure(cause: Exception) -> DatabaseError:
    error = DatabaseError(f"Query failed: {cause}", operation="fetch_one")
    error.__cause__ = cause
    return error


@pytest.mark.asyncio
async def test_retry_recovers_from_operational_errors():
    calls = []

    @with_db_retry(max_retries=3, base_delay=0)
    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise _wrapped_failure(psycopg.OperationalError("connection lost"))
        return "ok"

    assert await flaky() == "ok"
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_retry_gives_up_after_max_retries():
    calls = []

    @with_db_retry(max_retries=2, base_delay=0)
    async def always_down():
        calls.append(1)
        raise _wrapped_failure(psycopg.OperationalError("connection lost"))

    with pytest.raises(DatabaseError):
        await always_down()

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_non_operational_errors_are_not_retried():
    calls = []

    @with_db_retry(max_retries=3, base_delay=0)
    async def bad_query():
        calls.append(1)
        raise _wrapped_failure(psycopg.errors.UndefinedTable("no such table"))

    with pytest.raises(DatabaseError) as exc_info:
        await bad_query()

    assert len(calls) == 1
    assert exc_info.value.operation == "fetch_one"


@pytest.mark.asyncio
async def test_calls_on_a_callers_connection_are_not_retried():
    calls = []

    @with_db_retry(max_retries=3, base_delay=0)
    async def read_in_transaction(*, connection=None):
        calls.append(connection)
        raise _wrapped_failure(psycopg.OperationalError("connection lost"))

    conn = object()
    with pytest.raises(DatabaseError):
        await read_in_transaction(connection=conn)

    assert calls == [conn]


@pytest.mark.parametrize(
    "repository,method",
    [
        (ContactRepository, "create"),
        (InteractionRepository, "create"),
        (JournalRepository, "create"),
        (HabitRepository, "create"),
        (ThoughtRepository, "create"),
        (ProjectRepository, "create"),
    ],
)
def test_inserts_are_not_wrapped_in_retry(repository, method):
    # with_db_retry uses functools.wraps, which sets __wrapped__
    assert not hasattr(getattr(repository, method), "__wrapped__")


def test_reads_are_wrapped_in_retry():
    assert hasattr(ThoughtRepository.get, "__wrapped__")
