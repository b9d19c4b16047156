"""HTTP tests for the API routers, backed by an in-memory SQLite database."""

import unittest

import jwt
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from authhub.core.config import get_settings
from authhub.core.crypto import SecretVault, get_vault
from authhub.core.database import get_db
from authhub.main import app
from tests.support import MASTER_KEY, make_engine

API = get_settings().API_PREFIX


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        SessionLocal = sessionmaker(bind=self.engine, autoflush=False)

        def override_get_db():
            db = SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_vault] = lambda: SecretVault(MASTER_KEY)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.engine.dispose()

    def login_uuid(self, **body) -> dict:
        response = self.client.post(f"{API}/auth/login/uuid", json=body)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestAuthRoutes(ApiTestCase):
    def test_methods(self) -> None:
        response = self.client.get(f"{API}/auth/methods")
        self.assertEqual(response.status_code, 200)
        methods = {m["id"]: m["implemented"] for m in response.json()}
        self.assertTrue(methods["uuid"])
        self.assertFalse(methods["webauthn"])

    def test_register_then_login(self) -> None:
        body = {"email": "ada@example.com", "password": "long-enough"}
        created = self.client.post(f"{API}/auth/register", json=body)
        self.assertEqual(created.status_code, 201, created.text)
        self.assertEqual(created.json()["user"]["role"], "admin")
        self.assertNotIn("password_hash", created.json()["user"])

        duplicate = self.client.post(f"{API}/auth/register", json=body)
        self.assertEqual(duplicate.status_code, 409)

        login = self.client.post(f"{API}/auth/login/email", json={"credentials": body})
        self.assertEqual(login.status_code, 200)
        bad = self.client.post(
            f"{API}/auth/login/email",
            json={"credentials": {"email": "ada@example.com", "password": "wrong-one"}},
        )
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(bad.json()["detail"], "Invalid email or password")

    def test_short_password_rejected(self) -> None:
        response = self.client.post(
            f"{API}/auth/register", json={"email": "ada@example.com", "password": "short"}
        )
        self.assertEqual(response.status_code, 422)

    def test_method_errors(self) -> None:
        self.assertEqual(self.client.post(f"{API}/auth/login/nostr", json={}).status_code, 400)
        self.assertEqual(self.client.post(f"{API}/auth/login/nope", json={}).status_code, 400)
        invalid = self.client.post(
            f"{API}/auth/login/uuid", json={"credentials": {"uuid": "123"}}
        )
        self.assertEqual(invalid.status_code, 422)
        unknown = self.client.post(
            f"{API}/auth/login/uuid",
            json={"credentials": {"uuid": "00000000-0000-4000-8000-000000000000"}},
        )
        self.assertEqual(unknown.status_code, 404)

    def test_unknown_service_on_login(self) -> None:
        response = self.client.post(f"{API}/auth/login/uuid", json={"service_id": "missing"})
        self.assertEqual(response.status_code, 401)


class TestServiceFlow(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.login_uuid()
        self.headers = self.bearer(self.admin["token"])
        created = self.client.post(
            f"{API}/services",
            json={"name": "Wiki", "description": "Team wiki", "url": "https://wiki.example.com"},
            headers=self.headers,
        )
        self.assertEqual(created.status_code, 201, created.text)
        self.service = created.json()

    def test_secret_only_shown_on_creation(self) -> None:
        self.assertTrue(self.service["plaintext_secret"].startswith("sk_"))
        read = self.client.get(f"{API}/services/{self.service['id']}", headers=self.headers)
        self.assertEqual(read.status_code, 200)
        self.assertNotIn("plaintext_secret", read.json())
        self.assertNotIn("secret", read.json())
        self.assertEqual(read.json()["secret_preview"], self.service["secret_preview"])

    def test_requires_token(self) -> None:
        self.assertEqual(self.client.get(f"{API}/services").status_code, 401)
        self.assertEqual(
            self.client.get(f"{API}/services", headers=self.bearer("garbage")).status_code, 401
        )

    def test_service_token_round_trip(self) -> None:
        secret = self.service["plaintext_secret"]
        login = self.login_uuid(
            credentials={"uuid": self.admin["user"]["id"]}, service_id=self.service["id"]
        )
        claims = jwt.decode(login["token"], secret, algorithms=["HS256"])
        self.assertIsNone(claims["rbacModel"])

        verified = self.client.post(
            f"{API}/auth/verify-token",
            json={"token": login["token"], "service_id": self.service["id"], "secret": secret},
        )
        self.assertEqual(verified.status_code, 200)
        self.assertTrue(verified.json()["valid"])

        wrong = self.client.post(
            f"{API}/auth/verify-token",
            json={"token": login["token"], "service_id": self.service["id"], "secret": "sk_x"},
        )
        self.assertEqual(wrong.status_code, 401)

    def test_update_ignores_secret_and_rotation_replaces_it(self) -> None:
        service_id = self.service["id"]
        patched = self.client.patch(
            f"{API}/services/{service_id}",
            json={"name": "Wiki 2", "secret": "sk_mine"},
            headers=self.headers,
        )
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["secret_preview"], self.service["secret_preview"])

        rotated = self.client.post(
            f"{API}/services/{service_id}/rotate-secret", headers=self.headers
        )
        self.assertEqual(rotated.status_code, 200)
        new_secret = rotated.json()["plaintext_secret"]
        check = self.client.post(
            f"{API}/services/verify-secret",
            json={"service_id": service_id, "secret": new_secret},
        )
        self.assertEqual(check.status_code, 200)
        stale = self.client.post(
            f"{API}/services/verify-secret",
            json={"service_id": service_id, "secret": self.service["plaintext_secret"]},
        )
        self.assertEqual(stale.status_code, 401)

    def test_rbac_assignment_shows_in_permissions(self) -> None:
        model = self.client.post(
            f"{API}/rbac/models",
            json={"name": "Wiki", "description": "Wiki roles"},
            headers=self.headers,
        ).json()
        role = self.client.post(
            f"{API}/rbac/models/{model['id']}/roles",
            json={"name": "editor", "description": "Edits pages"},
            headers=self.headers,
        ).json()
        permission = self.client.post(
            f"{API}/rbac/models/{model['id']}/permissions",
            json={"name": "pages:write", "description": "Write pages"},
            headers=self.headers,
        ).json()
        for method, path, body in (
            ("post", f"/rbac/roles/{role['id']}/permissions", {"permission_id": permission["id"]}),
            ("put", f"/rbac/services/{self.service['id']}/model", {"rbac_model_id": model["id"]}),
            (
                "put",
                f"/rbac/services/{self.service['id']}/roles",
                {"user_id": self.admin["user"]["id"], "role_id": role["id"]},
            ),
        ):
            response = self.client.request(method, f"{API}{path}", json=body, headers=self.headers)
            self.assertEqual(response.status_code, 204, response.text)

        snapshot = self.client.get(
            f"{API}/auth/permissions",
            params={"service_id": self.service["id"]},
            headers=self.headers,
        ).json()
        self.assertEqual(snapshot["role"]["name"], "editor")
        self.assertEqual([p["name"] for p in snapshot["permissions"]], ["pages:write"])

        matrix = self.client.get(
            f"{API}/rbac/models/{model['id']}/matrix", headers=self.headers
        ).json()
        self.assertEqual(matrix[0]["role_id"], role["id"])


class TestUserAdmin(ApiTestCase):
    def test_admin_only_and_last_admin(self) -> None:
        admin = self.login_uuid()
        member = self.login_uuid()

        forbidden = self.client.get(f"{API}/users", headers=self.bearer(member["token"]))
        self.assertEqual(forbidden.status_code, 403)

        listed = self.client.get(f"{API}/users", headers=self.bearer(admin["token"]))
        self.assertEqual(listed.status_code, 200)
        self.assertEqual(len(listed.json()["users"]), 2)

        demote = self.client.patch(
            f"{API}/users/{admin['user']['id']}",
            json={"role": "user"},
            headers=self.bearer(admin["token"]),
        )
        self.assertEqual(demote.status_code, 409)


class TestApiKeyRoutes(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        body = {"email": "ada@example.com", "password": "long-enough"}
        registered = self.client.post(f"{API}/auth/register", json=body)
        self.assertEqual(registered.status_code, 201, registered.text)
        self.admin = registered.json()
        self.headers = self.bearer(self.admin["token"])
        created = self.client.post(f"{API}/keys", json={"name": "CRM"}, headers=self.headers)
        self.assertEqual(created.status_code, 201, created.text)
        self.key = created.json()

    def test_key_only_shown_on_creation(self) -> None:
        self.assertTrue(self.key["key"].startswith("ak_"))
        listed = self.client.get(f"{API}/keys", headers=self.headers)
        self.assertEqual(listed.status_code, 200)
        self.assertEqual([k["id"] for k in listed.json()], [self.key["id"]])
        self.assertNotIn("key", listed.json()[0])
        self.assertEqual(listed.json()[0]["key_preview"], self.key["key_preview"])

    def test_key_routes_require_token(self) -> None:
        self.assertEqual(self.client.get(f"{API}/keys").status_code, 401)
        self.assertEqual(self.client.post(f"{API}/keys", json={"name": "x"}).status_code, 401)

    def test_keys_are_per_user(self) -> None:
        member = self.login_uuid()
        listed = self.client.get(f"{API}/keys", headers=self.bearer(member["token"]))
        self.assertEqual(listed.json(), [])
        deleted = self.client.delete(
            f"{API}/keys/{self.key['id']}", headers=self.bearer(member["token"])
        )
        self.assertEqual(deleted.status_code, 404)

    def test_verify_credentials_with_api_key(self) -> None:
        api_key = {"X-API-Key": self.key["key"]}
        ok = self.client.post(
            f"{API}/auth/verify",
            json={"email": "ada@example.com", "password": "long-enough"},
            headers=api_key,
        )
        self.assertEqual(ok.status_code, 200, ok.text)
        self.assertEqual(
            ok.json(),
            {"valid": True, "user_id": self.admin["user"]["id"], "email": "ada@example.com"},
        )

        wrong = self.client.post(
            f"{API}/auth/verify",
            json={"email": "ada@example.com", "password": "wrong-one"},
            headers=api_key,
        )
        self.assertEqual(wrong.status_code, 200)
        self.assertFalse(wrong.json()["valid"])
        self.assertIsNone(wrong.json()["user_id"])

    def test_verify_credentials_requires_api_key(self) -> None:
        body = {"email": "ada@example.com", "password": "long-enough"}
        missing = self.client.post(f"{API}/auth/verify", json=body)
        self.assertEqual(missing.status_code, 401)
        self.assertEqual(missing.json()["detail"], "API key is required")
        bad = self.client.post(f"{API}/auth/verify", json=body, headers={"X-API-Key": "ak_nope"})
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(bad.json()["detail"], "Invalid API key")
        bearer_only = self.client.post(f"{API}/auth/verify", json=body, headers=self.headers)
        self.assertEqual(bearer_only.status_code, 401)

    def test_revoked_key_stops_working(self) -> None:
        deleted = self.client.delete(f"{API}/keys/{self.key['id']}", headers=self.headers)
        self.assertEqual(deleted.status_code, 200)
        response = self.client.get(
            f"{API}/users/{self.admin['user']['id']}", headers={"X-API-Key": self.key["key"]}
        )
        self.assertEqual(response.status_code, 401)

    def test_get_user_with_api_key_or_admin_token(self) -> None:
        member = self.login_uuid()
        path = f"{API}/users/{member['user']['id']}"

        by_key = self.client.get(path, headers={"X-API-Key": self.key["key"]})
        self.assertEqual(by_key.status_code, 200, by_key.text)
        self.assertEqual(by_key.json()["id"], member["user"]["id"])
        self.assertNotIn("password_hash", by_key.json())

        self.assertEqual(self.client.get(path, headers=self.headers).status_code, 200)
        self.assertEqual(
            self.client.get(path, headers=self.bearer(member["token"])).status_code, 403
        )
        self.assertEqual(self.client.get(path).status_code, 401)
        self.assertEqual(
            self.client.get(path, headers={"X-API-Key": "ak_nope"}).status_code, 401
        )
        missing = self.client.get(
            f"{API}/users/missing", headers={"X-API-Key": self.key["key"]}
        )
        self.assertEqual(missing.status_code, 404)


class TestAdminServiceListing(ApiTestCase):
    def test_admin_sees_every_service(self) -> None:
        admin = self.login_uuid()
        member = self.login_uuid()
        for owner, name in ((admin, "Wiki"), (member, "Chat")):
            created = self.client.post(
                f"{API}/services",
                json={"name": name, "description": name, "url": "https://example.com"},
                headers=self.bearer(owner["token"]),
            )
            self.assertEqual(created.status_code, 201, created.text)

        own = self.client.get(f"{API}/services", headers=self.bearer(admin["token"])).json()
        listed = self.client.get(f"{API}/services/admin", headers=self.bearer(admin["token"]))
        self.assertEqual(listed.status_code, 200)
        names = {s["name"] for s in listed.json()}
        self.assertIn("Wiki", names)
        self.assertIn("Chat", names)
        self.assertGreater(len(listed.json()), len(own))
        self.assertTrue(all("secret" not in s for s in listed.json()))

        forbidden = self.client.get(
            f"{API}/services/admin", headers=self.bearer(member["token"])
        )
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(self.client.get(f"{API}/services/admin").status_code, 401)


class TestHealth(ApiTestCase):
    def test_health(self) -> None:
        response = self.client.get(f"{API}/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "connected")
        self.assertIn("uuid", response.json()["auth_methods"])


if __name__ == "__main__":
    unittest.main()
