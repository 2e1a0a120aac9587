# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

from chrysalis.api.v1.dependencies import get_submission_service_dep  # noqa: E402
from chrysalis.core.errors import MetadataFetchError  # noqa: E402
from chrysalis.core.security import create_access_token  # noqa: E402
from chrysalis.db.session import Base, configure_sqlite  # noqa: E402
from chrysalis.db.session import get_db as app_get_session  # noqa: E402
from chrysalis.main import app as fastapi_app  # noqa: E402
from chrysalis.models import Ballot, Category, Content, Submission, User  # noqa: E402
from chrysalis.services.content import ContentResolver, PageMetadata  # noqa: E402
from chrysalis.services.stages import classify_stage  # noqa: E402
from chrysalis.services.submissions import SubmissionService  # noqa: E402

TEST_DB_URL = "sqlite://"


class FakeMetadataFetcher:
    """Stand-in for the network fetcher that records every call."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.pages: dict[str, PageMetadata] = {}
        self.failing: set[str] = set()

    async def fetch(self, url: str) -> PageMetadata:
        self.calls.append(url)
        if url in self.failing:
            raise MetadataFetchError("We were unable to fetch the submitted URL", url=url)
        return self.pages.get(
            url,
            PageMetadata(
                url=url,
                tags={
                    "og:title": f"Title of {url}",
                    "og:description": "A page worth reading",
                    "og:image": "https://cdn.example.org/teaser.png",
                },
                document_title="Fallback",
            ),
        )


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def fetcher() -> FakeMetadataFetcher:
    return FakeMetadataFetcher()


@pytest.fixture()
def submission_service(fetcher: FakeMetadataFetcher) -> SubmissionService:
    return SubmissionService(resolver=ContentResolver(fetcher))  # type: ignore[arg-type]


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    submission_service: SubmissionService,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_submission_service_dep] = lambda: submission_service
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_submission_service_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with sensible defaults."""

    def _make_user(username: str, *, tokens: int = 1, stage: str | None = None) -> User:
        user = User(
            email=f"{username}@example.org",
            username=username,
            tokens=tokens,
            stage=stage,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("bob")


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper that builds authorization headers for any user."""
    return auth_headers


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def category(db_session: Session) -> Category:
    """Create a default test category."""
    category = Category(title="Reading list")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture()
def make_submission(
    db_session: Session,
    category: Category,
) -> Callable[..., Submission]:
    """Return a factory for submissions with pre-existing yes-ballots.

    The stored stage is kept consistent with the ballot count.
    """

    def _make_submission(
        author: User,
        url: str = "https://example.org/article",
        *,
        voters: list[User] | None = None,
    ) -> Submission:
        content = db_session.query(Content).filter(Content.url == url).first()
        if content is None:
            content = Content(url=url, type="web", title=url, og={})
            db_session.add(content)
            db_session.flush()

        voters = voters or []
        submission = Submission(
            user_id=author.id,
            category_id=category.id,
            content_id=content.id,
            comment="worth a read",
            stage=classify_stage(len(voters)),
        )
        db_session.add(submission)
        db_session.flush()
        for voter in voters:
            db_session.add(
                Ballot(user_id=voter.id, submission_id=submission.id, vote="yes", stage="egg")
            )
        db_session.commit()
        db_session.refresh(submission)
        return submission

    return _make_submission


@pytest.fixture()
def submission(make_submission: Callable[..., Submission], test_user: User) -> Submission:
    """Create a baseline submission with no votes."""
    return make_submission(test_user)
