import unittest
from datetime import datetime, timedelta, timezone

from music_search.auth_service import AuthService
from music_search.credential_store import InMemoryCredentialStore
from music_search.errors import DuplicateUser, InvalidCredentials, ValidationError


def _make_service(ttl: int = 3600) -> AuthService:
    return AuthService(InMemoryCredentialStore(), session_ttl_seconds=ttl)


class SignupTests(unittest.TestCase):
    def test_signup_succeeds_once_then_reports_duplicate(self) -> None:
        svc = _make_service()
        svc.signup("fan@example.com", "secret")

        with self.assertRaises(DuplicateUser):
            svc.signup("fan@example.com", "other")
        self.assertEqual(svc.store.find("fan@example.com").email, "fan@example.com")

    def test_signup_duplicate_check_ignores_case_and_whitespace(self) -> None:
        svc = _make_service()
        svc.signup("Fan@Example.com", "secret")

        with self.assertRaises(DuplicateUser):
            svc.signup("  fan@example.com ", "secret")

    def test_signup_stores_hash_not_password(self) -> None:
        svc = _make_service()
        credential = svc.signup("fan@example.com", "secret")

        self.assertNotEqual(credential.password_hash, "secret")
        self.assertEqual(svc.store.find("fan@example.com"), credential)

    def test_signup_rejects_empty_password(self) -> None:
        with self.assertRaises(ValidationError):
            _make_service().signup("fan@example.com", "")

    def test_signup_rejects_malformed_email(self) -> None:
        for email in ("", "not-an-email", "a@b", "a b@example.com"):
            with self.subTest(email=email), self.assertRaises(ValidationError):
                _make_service().signup(email, "secret")


class SigninTests(unittest.TestCase):
    def setUp(self) -> None:
        self.svc = _make_service()
        self.svc.signup("fan@example.com", "secret")

    def test_signin_succeeds_with_matching_password(self) -> None:
        session = self.svc.signin("fan@example.com", "secret")

        self.assertEqual(session.email, "fan@example.com")
        self.assertTrue(session.token)
        self.assertEqual(self.svc.resolve_session(session.token), "fan@example.com")

    def test_signin_fails_with_wrong_password(self) -> None:
        with self.assertRaises(InvalidCredentials):
            self.svc.signin("fan@example.com", "wrong")

    def test_signin_fails_for_unknown_email(self) -> None:
        with self.assertRaises(InvalidCredentials):
            self.svc.signin("nobody@example.com", "secret")

    def test_signin_fails_with_empty_password(self) -> None:
        with self.assertRaises(InvalidCredentials):
            self.svc.signin("fan@example.com", "")

    def test_each_signin_issues_a_new_token(self) -> None:
        first = self.svc.signin("fan@example.com", "secret")
        second = self.svc.signin("fan@example.com", "secret")
        self.assertNotEqual(first.token, second.token)


class SessionTests(unittest.TestCase):
    def test_resolve_session_rejects_unknown_token(self) -> None:
        with self.assertRaises(InvalidCredentials):
            _make_service().resolve_session("nope")

    def test_resolve_session_rejects_expired_token(self) -> None:
        svc = _make_service()
        svc.signup("fan@example.com", "secret")
        session = svc.signin("fan@example.com", "secret")
        session.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

        with self.assertRaises(InvalidCredentials):
            svc.resolve_session(session.token)
        with self.assertRaises(InvalidCredentials):
            svc.resolve_session(session.token)

    def test_signin_sweeps_expired_sessions(self) -> None:
        svc = _make_service()
        svc.signup("fan@example.com", "secret")
        stale = svc.signin("fan@example.com", "secret")
        stale.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

        fresh = svc.signin("fan@example.com", "secret")

        self.assertNotIn(stale.token, svc._sessions)
        self.assertIn(fresh.token, svc._sessions)
        self.assertEqual(len(svc._sessions), 1)

    def test_signout_discards_session(self) -> None:
        svc = _make_service()
        svc.signup("fan@example.com", "secret")
        session = svc.signin("fan@example.com", "secret")

        svc.signout(session.token)

        with self.assertRaises(InvalidCredentials):
            svc.resolve_session(session.token)


if __name__ == "__main__":
    unittest.main()
