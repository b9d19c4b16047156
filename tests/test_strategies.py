"""Tests for the UUID and email/password authentication strategies."""

import unittest
import uuid

from authhub.auth.strategies import EmailPasswordStrategy, UuidStrategy
from authhub.core.errors import InvalidCredentialsError, NotFoundError, ValidationError
from authhub.models import AdminBootstrap
from tests.support import StoreTestCase


class TestUuidValidate(unittest.TestCase):
    def test_empty_input_is_valid(self) -> None:
        self.assertIsNone(UuidStrategy().validate({}).uuid)
        self.assertIsNone(UuidStrategy().validate(None).uuid)

    def test_malformed_identifier_names_field(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            UuidStrategy().validate({"uuid": "not-a-uuid"})
        self.assertEqual(ctx.exception.field, "uuid")


class TestUuidAuthenticate(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.strategy = UuidStrategy()

    def _login(self, raw: dict | None = None):
        return self.strategy.authenticate(self.store, self.strategy.validate(raw or {}))

    def test_first_anonymous_user_is_admin(self) -> None:
        result = self._login()
        self.assertTrue(result.is_new_user)
        self.assertEqual(result.role, "admin")
        self.assertIsNone(result.email)

    def test_anonymous_logins_create_distinct_users(self) -> None:
        self.make_user()  # admin already exists
        first = self._login()
        second = self._login()
        self.assertNotEqual(first.user_id, second.user_id)
        self.assertEqual(first.role, "user")
        self.assertEqual(second.role, "user")
        self.assertEqual(self.store.count_admins(), 1)

    def test_existing_identifier_logs_in(self) -> None:
        user = self.make_user()
        result = self._login({"uuid": user.id})
        self.assertEqual(result.user_id, user.id)
        self.assertFalse(result.is_new_user)

    def test_unknown_identifier_is_rejected(self) -> None:
        with self.assertRaises(NotFoundError):
            self._login({"uuid": str(uuid.uuid4())})
        self.assertEqual(self.store.count_users(), 0)

    def test_claimed_bootstrap_means_no_admin(self) -> None:
        self.session.add(AdminBootstrap(id=1, user_id=None))
        self.session.flush()
        self.assertEqual(self._login().role, "user")


class TestEmailPasswordStrategy(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.strategy = EmailPasswordStrategy()
        self.user = self.make_user(email="ada@example.com", password="correct horse")

    def _login(self, email: str, password: str):
        creds = self.strategy.validate({"email": email, "password": password})
        return self.strategy.authenticate(self.store, creds)

    def test_valid_credentials(self) -> None:
        result = self._login("ada@example.com", "correct horse")
        self.assertEqual(result.user_id, self.user.id)
        self.assertEqual(result.email, "ada@example.com")
        self.assertFalse(result.is_new_user)

    def test_wrong_password_and_unknown_email_look_the_same(self) -> None:
        with self.assertRaises(InvalidCredentialsError) as wrong_pw:
            self._login("ada@example.com", "battery staple")
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self._login("nobody@example.com", "correct horse")
        self.assertEqual(wrong_pw.exception.message, unknown.exception.message)

    def test_user_without_password_cannot_log_in(self) -> None:
        self.store.update_user(self.user, password_hash=None)
        with self.assertRaises(InvalidCredentialsError):
            self._login("ada@example.com", "correct horse")

    def test_validation_names_field(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.strategy.validate({"email": "not-an-email", "password": "x"})
        self.assertEqual(ctx.exception.field, "email")
        with self.assertRaises(ValidationError) as ctx:
            self.strategy.validate({"email": "ada@example.com"})
        self.assertEqual(ctx.exception.field, "password")


if __name__ == "__main__":
    unittest.main()
