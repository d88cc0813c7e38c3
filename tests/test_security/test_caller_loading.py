"""Tests for resolving a bearer token to an active user profile."""

import time

import jwt
import pytest
from starlette.requests import Request

from annual_review.security.auth import extract_bearer_token, load_coachee_ids, load_user, resolve_user_id
from annual_review.security.config import AuthConfig, SecurityConfig, SecurityConfigModel
from annual_review.security.context import AuthzContext
from annual_review.settings import Settings
from annual_review.workflow.errors import Unauthenticated

SECRET = "test-secret-with-enough-length-for-hs256"


def _config(provider: str = "dummy") -> SecurityConfig:
    return SecurityConfig(SecurityConfigModel(auth=AuthConfig(provider=provider)))


def _request(headers: dict[str, str]) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/objectives",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


def test_extract_bearer_token():
    assert extract_bearer_token(_request({"Authorization": "Bearer 12"}), _config()) == "12"
    assert extract_bearer_token(_request({}), _config()) is None


@pytest.mark.parametrize("header", ["Token 12", "Bearer ", "bearer 12"])
def test_malformed_header_is_unauthenticated(header):
    with pytest.raises(Unauthenticated):
        extract_bearer_token(_request({"Authorization": header}), _config())


def test_dummy_provider_reads_user_id():
    assert resolve_user_id("17", _config(), Settings()) == 17
    with pytest.raises(Unauthenticated):
        resolve_user_id("seventeen", _config(), Settings())


def test_jwt_provider_validates_token():
    settings = Settings(jwt_secret=SECRET)
    token = jwt.encode({"sub": "17", "aud": "authenticated", "exp": int(time.time()) + 60}, SECRET, algorithm="HS256")

    assert resolve_user_id(token, _config("jwt"), settings) == 17
    with pytest.raises(Unauthenticated):
        resolve_user_id("17", _config("jwt"), settings)


def test_load_user(db_session, people):
    assert load_user(db_session, people.employee.id).username == "emma"

    with pytest.raises(Unauthenticated):
        load_user(db_session, 9999)


def test_inactive_user_is_unauthenticated(db_session, people):
    people.other.is_active = False
    db_session.commit()

    with pytest.raises(Unauthenticated):
        load_user(db_session, people.other.id)


def test_coachees_and_visibility(db_session, people):
    coachees = load_coachee_ids(db_session, people.coach.id)
    assert coachees == frozenset({people.employee.id})
    assert load_coachee_ids(db_session, people.employee.id) == frozenset()

    authz = AuthzContext(user_id=people.coach.id, role="employee", coachee_ids=coachees, scope_records=True)
    assert authz.visible_employee_ids == {people.coach.id, people.employee.id}
    assert authz.caller.user_id == people.coach.id
    assert not authz.is_admin
