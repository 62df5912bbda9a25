import pytest
from sqlalchemy import select

from backend.db.models import Profile, User
from backend.errors import ConflictError, NotFoundError
from backend.services.profiles import ProfileService
from models.scorer import Intent


@pytest.fixture
def service(session):
    return ProfileService(session)


def test_create_profile_defaults(service, make_user):
    make_user("kim")
    profile = service.create_profile("kim", {"bio": "hi", "interests": ["tea"]})

    assert profile.looking_for == Intent.ALL
    assert profile.interests == ["tea"]
    assert service.has_profile("kim")


def test_create_profile_requires_user(service):
    with pytest.raises(NotFoundError, match="User not found"):
        service.create_profile("nobody", {})


def test_one_profile_per_user(service, make_user):
    make_user("kim")
    service.create_profile("kim", {})
    with pytest.raises(ConflictError, match="already exists"):
        service.create_profile("kim", {})


def test_update_only_touches_given_fields(service, make_member):
    make_member("kim", interests=["tea"], location="Oslo", looking_for=Intent.HOBBY)

    profile = service.update_profile("kim", {"location": "Bergen", "looking_for": None})

    assert profile.location == "Bergen"
    assert profile.interests == ["tea"]
    assert profile.looking_for == Intent.HOBBY


def test_update_missing_profile(service, make_user):
    make_user("kim")
    with pytest.raises(NotFoundError):
        service.update_profile("kim", {"bio": "x"})


def test_delete_profile_keeps_user(service, session, make_member):
    make_member("kim")
    service.delete_profile("kim")

    assert not service.has_profile("kim")
    assert session.get(User, "kim") is not None
    with pytest.raises(NotFoundError):
        service.get_profile("kim")


def test_deleting_user_cascades_to_profile(session, make_member):
    make_member("kim")
    session.delete(session.get(User, "kim"))
    session.commit()
    assert session.scalar(select(Profile).where(Profile.user_id == "kim")) is None


def test_get_profile_by_id(service, make_member):
    make_member("kim")
    profile = service.get_profile("kim")
    assert service.get_profile_by_id(profile.profile_id).user_id == "kim"
    with pytest.raises(NotFoundError):
        service.get_profile_by_id("missing")
