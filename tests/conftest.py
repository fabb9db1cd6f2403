from __future__ import annotations

import pytest
import pytest_asyncio

from chatcal.data import ChatTranscript, EventRepository, SqliteEventBackend
from chatcal.orchestrator import CommandDispatcher
from chatcal.services import EventStore


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "calendar.db"


@pytest_asyncio.fixture
async def backend(db_path):
    backend = SqliteEventBackend(db_path)
    yield backend
    await backend.close()


@pytest_asyncio.fixture
async def store(backend):
    store = EventStore(EventRepository(backend=backend))
    await store.initialize()
    yield store
    await store.flush()


@pytest_asyncio.fixture
async def transcript(backend):
    transcript = ChatTranscript(backend=backend)
    await transcript.initialize()
    return transcript


@pytest.fixture
def dispatcher(store):
    return CommandDispatcher(store)
