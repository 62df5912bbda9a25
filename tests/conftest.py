import itertools
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from backend.db.base import Base, build_engine, get_db, make_session_factory
from backend.db.models import Profile, User
from backend.main import create_app
from config.settings import Settings, get_settings
from models.scorer import Intent

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

_phone_numbers = itertools.count(1)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        app_env="test",
        database_url="sqlite://",
        jwt_secret="test-secret",
        discovery_require_verified=False,
    )


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'kindred-test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.close()


def _add_user(session_factory, user_id, verified=True, is_active=True, first_name=None):
    with session_factory() as s:
        s.add(User(
            user_id=user_id,
            first_name=first_name or user_id.upper(),
            last_name="Test",
            phone_number=f"+1555{next(_phone_numbers):07d}",
            verified=verified,
            is_active=is_active,
        ))
        s.commit()
    return user_id


def _add_profile(session_factory, user_id, interests=(), location=None,
                 looking_for=Intent.ALL, created_at=None):
    with session_factory() as s:
        s.add(Profile(
            user_id=user_id,
            interests=list(interests),
            location=location,
            looking_for=looking_for,
            created_at=created_at or NOW,
            updated_at=created_at or NOW,
        ))
        s.commit()
    return user_id


@pytest.fixture
def make_user(session_factory):
    """make_user("alice", verified=False) -> "alice" (committed)."""
    return lambda user_id, **kw: _add_user(session_factory, user_id, **kw)


@pytest.fixture
def make_profile(session_factory):
    """make_profile("alice", interests=[...], location=..., looking_for=..., created_at=...)."""
    return lambda user_id, **kw: _add_profile(session_factory, user_id, **kw)


@pytest.fixture
def make_member(make_user, make_profile):
    """User plus profile in one go."""
    def _make(user_id, verified=True, is_active=True, **profile_fields):
        make_user(user_id, verified=verified, is_active=is_active)
        return make_profile(user_id, **profile_fields)
    return _make


@pytest.fixture
def app(settings, session_factory):
    app = create_app(settings, lifespan=None)

    def _get_db():
        s = session_factory()
        try:
            yield s
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(settings):
    def _headers(user_id, expires_in=timedelta(hours=1)):
        token = jwt.encode(
            {"userId": user_id, "exp": datetime.now(timezone.utc) + expires_in},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers
