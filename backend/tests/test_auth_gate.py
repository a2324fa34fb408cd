"""
PageNotes Backend — Auth Gate Unit Tests
==========================================

What we test:
    ✅ valid 'Bearer <token>' resolves to the user id
    ✅ missing, malformed and invalid credentials raise distinct causes
    ✅ all causes are UnauthenticatedError (same 401 handling)
"""

import pytest

from pagenotes.exceptions import (
    InvalidTokenError,
    MalformedTokenError,
    MissingTokenError,
    UnauthenticatedError,
)
from pagenotes.services.auth_gate import AuthGate


@pytest.fixture
def gate(token_service):
    return AuthGate(token_service)


class TestAuthenticate:

    def test_valid_bearer_token(self, gate, token_service):
        token = token_service.issue(11)
        assert gate.authenticate(f"Bearer {token}") == 11

    def test_scheme_is_case_insensitive(self, gate, token_service):
        token = token_service.issue(11)
        assert gate.authenticate(f"bearer {token}") == 11

    @pytest.mark.parametrize("header", [None, "", "   "])
    def test_missing_header(self, gate, header):
        with pytest.raises(MissingTokenError):
            gate.authenticate(header)

    @pytest.mark.parametrize(
        "header",
        ["Bearer", "Basic dXNlcjpwYXNz", "Token abc", "Bearer a b", "abc.def.ghi"],
    )
    def test_malformed_header(self, gate, header):
        with pytest.raises(MalformedTokenError):
            gate.authenticate(header)

    def test_invalid_token(self, gate):
        with pytest.raises(InvalidTokenError):
            gate.authenticate("Bearer not.a.token")

    @pytest.mark.parametrize("header", [None, "Basic x", "Bearer junk"])
    def test_every_rejection_is_unauthenticated(self, gate, header):
        with pytest.raises(UnauthenticatedError):
            gate.authenticate(header)

    def test_causes_have_distinct_messages(self):
        messages = {
            MissingTokenError().message,
            MalformedTokenError().message,
            InvalidTokenError().message,
        }
        assert len(messages) == 3
