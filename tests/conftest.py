"""Pytest configuration and fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PROCRASTINATE_DATABASE_URL", "postgresql://localhost/licore")
os.environ.setdefault("BITBUCKET_BASE_URL", "https://bitbucket.example.com")
os.environ.setdefault("BITBUCKET_TOKEN", "test-token")
os.environ.setdefault("BITBUCKET_USER_SLUG", "licore")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from licore.models import Base, Developer, Project, PullRequest, Repository, ReviewJob


@pytest.fixture
def pr_payload() -> dict:
    """A pr:opened webhook payload for MOB/ios-app#42."""
    repository = {
        "slug": "ios-app",
        "name": "iOS App",
        "project": {"key": "MOB", "name": "Mobile"},
    }
    return {
        "eventKey": "pr:opened",
        "pullRequest": {
            "id": 42,
            "title": "Add login screen",
            "state": "OPEN",
            "fromRef": {
                "id": "refs/heads/feature/login",
                "displayId": "feature/login",
                "latestCommit": "f" * 40,
                "repository": repository,
            },
            "toRef": {
                "id": "refs/heads/develop",
                "displayId": "develop",
                "latestCommit": "0" * 40,
                "repository": repository,
            },
            "author": {
                "user": {"name": "jdoe", "slug": "jdoe", "displayName": "Jane Doe"},
                "role": "AUTHOR",
            },
        },
    }


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    # Use SQLite for tests
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
async def project(db_session):
    project = Project(name="Mobile", scm_project_key="MOB", rules=["line_length", "force_cast"])
    db_session.add(project)
    await db_session.flush()
    return project


@pytest.fixture
async def repository(db_session, project):
    repository = Repository(project_id=project.id, name="iOS App", slug="ios-app")
    db_session.add(repository)
    await db_session.flush()
    return repository


@pytest.fixture
async def pull_request(db_session, repository):
    pull_request = PullRequest(
        repository_id=repository.id,
        scm_id=42,
        title="Add login screen",
        author_slug="jdoe",
        latest_commit="a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
    )
    db_session.add(pull_request)
    await db_session.flush()
    return pull_request


@pytest.fixture
async def developer(db_session, repository):
    developer = Developer(repository_id=repository.id, name="Jane Doe", slug="jdoe")
    db_session.add(developer)
    await db_session.flush()
    return developer


@pytest.fixture
async def review_job(db_session, pull_request):
    job = ReviewJob(pull_request_id=pull_request.id, commit=pull_request.latest_commit)
    db_session.add(job)
    await db_session.commit()
    return job
