"""
Pytest configuration and shared fixtures.
"""
import os

# Must be set before cms modules build the application engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
from typing import AsyncGenerator, List, Tuple
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import cms.models  # noqa: F401
from cms.core.database import Base, get_db
from cms.models.document import Document, TextPage
from cms.models.site import Site
from cms.services.document import DocumentService
from cms.services.document_events import BaseDocumentEventHandler, DocumentEventService
from cms.services.import_documents import ImportDocumentsService
from cms.services.tag import TagService
from cms.services.url_history import UrlHistoryService


# Test database URL (in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingEventHandler(BaseDocumentEventHandler):
    """Collects document events as (event, document) pairs."""

    def __init__(self):
        self.events: List[Tuple[str, Document]] = []

    async def on_document_added(self, document: Document) -> None:
        self.events.append(("added", document))

    async def on_document_deleted(self, document: Document) -> None:
        self.events.append(("deleted", document))

    async def on_document_unpublished(self, document: Document) -> None:
        self.events.append(("unpublished", document))

    def names(self) -> List[str]:
        return [event for event, _ in self.events]


@pytest.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Clean up
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_site(test_db: AsyncSession) -> Site:
    """Create the default test site."""
    site = Site(id=1, name="Test Site", base_url="http://test")
    test_db.add(site)
    await test_db.commit()
    return site


@pytest.fixture
async def other_site(test_db: AsyncSession) -> Site:
    """Create a second site for isolation checks."""
    site = Site(id=2, name="Other Site", base_url="http://other")
    test_db.add(site)
    await test_db.commit()
    return site


@pytest.fixture
def event_handler() -> RecordingEventHandler:
    return RecordingEventHandler()


@pytest.fixture
def event_service(event_handler: RecordingEventHandler) -> DocumentEventService:
    return DocumentEventService([event_handler])


@pytest.fixture
def document_service(test_db, test_site, event_service) -> DocumentService:
    return DocumentService(test_db, test_site, event_service)


@pytest.fixture
async def fresh_document_service(session_factory, test_site, event_service) -> AsyncGenerator[DocumentService, None]:
    """Document service on its own session, loading rows the way a new request does."""
    async with session_factory() as session:
        yield DocumentService(session, test_site, event_service)


@pytest.fixture
def tag_service(test_db, test_site) -> TagService:
    return TagService(test_db, test_site)


@pytest.fixture
def url_history_service(test_db, test_site) -> UrlHistoryService:
    return UrlHistoryService(test_db, test_site)


@pytest.fixture
def import_service(document_service, tag_service, url_history_service) -> ImportDocumentsService:
    return ImportDocumentsService(document_service, tag_service, url_history_service)


@pytest.fixture
def make_page(document_service: DocumentService):
    """Factory adding a TextPage through the document service."""
    async def _make_page(name: str, parent: Document = None, **fields) -> TextPage:
        page = TextPage(name=name, **fields)
        if parent is not None:
            page.parent = parent
        return await document_service.add_document(page)

    return _make_page


@pytest.fixture
async def client(session_factory, test_site, event_service) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test database."""
    from cms.main import app
    from cms.api.deps import get_document_event_service

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_event_service] = lambda: event_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
