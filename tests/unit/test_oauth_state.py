import jwt
import pytest

from songroom.integrations.spotify.state import (
    InvalidStateError,
    generate_signed_state,
    verify_signed_state,
)
from songroom.settings import Settings

SECRET = "state-secret-for-tests-0123456789abcdef"


def _settings(**overrides) -> Settings:
    return Settings(**{"JWT_SECRET": SECRET, **overrides})


def test_state_round_trip_returns_user_id():
    settings = _settings()
    state = generate_signed_state("u_alice", settings)
    assert verify_signed_state(state, settings) == "u_alice"


def test_states_are_unique_per_call():
    settings = _settings()
    assert generate_signed_state("u_alice", settings) != generate_signed_state(
        "u_alice", settings
    )


def test_tampered_state_is_rejected():
    settings = _settings()
    state = generate_signed_state("u_alice", settings)
    with pytest.raises(InvalidStateError):
        verify_signed_state(state + "x", settings)


def test_state_signed_with_other_secret_is_rejected():
    state = generate_signed_state("u_alice", _settings(JWT_SECRET="another-secret-0123456789abcdef"))
    with pytest.raises(InvalidStateError):
        verify_signed_state(state, _settings())


def test_expired_state_is_rejected():
    settings = _settings(STATE_TTL_SECONDS=-10)
    state = generate_signed_state("u_alice", settings)
    with pytest.raises(InvalidStateError):
        verify_signed_state(state, settings)


def test_session_token_is_not_accepted_as_state():
    token = jwt.encode({"sub": "u_alice", "exp": 9_999_999_999}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidStateError):
        verify_signed_state(token, _settings())


def test_empty_state_is_rejected():
    with pytest.raises(InvalidStateError):
        verify_signed_state("", _settings())


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(RuntimeError):
        generate_signed_state("u_alice", _settings(JWT_SECRET=""))
