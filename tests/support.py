"""Test support: in-memory SQLite store, vault, issuer and orchestrator builders."""

import unittest

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from authhub.auth import AuthenticationOrchestrator, build_default_registry
from authhub.auth.hooks import PostAuthHook, default_hooks
from authhub.core.crypto import SecretVault
from authhub.core.security import hash_password
from authhub.models import Base, User
from authhub.schemas.service import ServiceCreate
from authhub.services.credentials import CredentialIssuer
from authhub.services.rbac import RbacResolver
from authhub.services.service_catalog import create_service
from authhub.services.storage import Storage

GLOBAL_SECRET = "test-global-signing-key-0123456789abcdef"
MASTER_KEY = "test-vault-master-key-0123456789abcdef"
HUB_URL = "http://hub.test"


def make_engine() -> Engine:
    """Shared-connection SQLite with foreign keys and working SAVEPOINTs."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself; pysqlite's implicit BEGIN breaks SAVEPOINT.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    return engine


def make_issuer(store: Storage, vault: SecretVault) -> CredentialIssuer:
    return CredentialIssuer(store, vault, RbacResolver(store), GLOBAL_SECRET, "HS256")


def make_orchestrator(
    store: Storage, vault: SecretVault, hooks: list[PostAuthHook] | None = None
) -> AuthenticationOrchestrator:
    return AuthenticationOrchestrator(
        store,
        build_default_registry(),
        make_issuer(store, vault),
        vault,
        hooks=default_hooks(HUB_URL) if hooks is None else hooks,
    )


class StoreTestCase(unittest.TestCase):
    """Fresh database, session, Storage and SecretVault per test."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False)
        self.session = self.SessionLocal()
        self.store = Storage(self.session)
        self.vault = SecretVault(MASTER_KEY)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def make_user(self, email: str | None = None, password: str | None = None) -> User:
        password_hash = hash_password(password, rounds=4) if password else None
        return self.store.create_user(email=email, password_hash=password_hash)

    def make_service(self, owner_id: str | None, name: str = "Docs") -> tuple:
        return create_service(
            self.store,
            self.vault,
            owner_id,
            ServiceCreate(name=name, description=f"{name} service", url="https://docs.example.com"),
        )
