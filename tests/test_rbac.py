"""Tests for RBAC resolution and administration."""

from authhub.core.errors import NotFoundError, RbacConsistencyError
from authhub.services.rbac import (
    RbacResolver,
    add_permission,
    add_role,
    assign_rbac_model,
    assign_user_role,
    create_rbac_model,
    grant_permission,
    revoke_permission,
    unassign_user_role,
)
from authhub.services.users import delete_user, update_user
from authhub.models import UserServiceRole
from tests.support import StoreTestCase


class RbacTestCase(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.make_user(email="admin@example.com")
        self.member = self.make_user(email="member@example.com")
        self.service, _ = self.make_service(self.admin.id)
        self.model = create_rbac_model(self.store, "Blog", "Blog roles", self.admin.id)
        self.editor = add_role(self.store, self.model.id, "editor", "Edits posts")
        self.viewer = add_role(self.store, self.model.id, "viewer", "Reads posts")
        self.write = add_permission(self.store, self.model.id, "posts:write", "Write posts")
        self.read = add_permission(self.store, self.model.id, "posts:read", "Read posts")
        self.resolver = RbacResolver(self.store)


class TestResolve(RbacTestCase):
    def test_no_model_assigned(self) -> None:
        snapshot = self.resolver.resolve(self.member.id, self.service.id)
        self.assertIsNone(snapshot.role)
        self.assertEqual(snapshot.permissions, [])
        self.assertIsNone(snapshot.rbac_model)

    def test_model_but_no_role(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        snapshot = self.resolver.resolve(self.member.id, self.service.id)
        self.assertIsNone(snapshot.role)
        self.assertEqual(snapshot.permissions, [])
        self.assertEqual(snapshot.rbac_model.id, self.model.id)

    def test_role_with_permissions(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        grant_permission(self.store, self.editor.id, self.write.id)
        grant_permission(self.store, self.editor.id, self.read.id)
        assign_user_role(self.store, self.member.id, self.service.id, self.editor.id)

        snapshot = self.resolver.resolve(self.member.id, self.service.id)
        self.assertEqual(snapshot.role.name, "editor")
        self.assertEqual(
            sorted(p.name for p in snapshot.permissions), ["posts:read", "posts:write"]
        )
        claims = snapshot.to_claims()
        self.assertEqual(claims["rbacRole"]["id"], self.editor.id)
        self.assertEqual(claims["rbacModel"]["name"], "Blog")

    def test_granting_twice_does_not_duplicate(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        grant_permission(self.store, self.viewer.id, self.read.id)
        grant_permission(self.store, self.viewer.id, self.read.id)
        assign_user_role(self.store, self.member.id, self.service.id, self.viewer.id)
        snapshot = self.resolver.resolve(self.member.id, self.service.id)
        self.assertEqual([p.id for p in snapshot.permissions], [self.read.id])

    def test_stale_role_from_other_model_is_ignored(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        other = create_rbac_model(self.store, "Other", "Other roles", self.admin.id)
        foreign_role = add_role(self.store, other.id, "boss", "Other model role")
        # Written directly to simulate data left behind by an older assignment.
        self.store.add(
            UserServiceRole(
                user_id=self.member.id, service_id=self.service.id, role_id=foreign_role.id
            )
        )
        with self.assertLogs("authhub.services.rbac", level="WARNING"):
            snapshot = self.resolver.resolve(self.member.id, self.service.id)
        self.assertIsNone(snapshot.role)
        self.assertEqual(snapshot.permissions, [])
        self.assertEqual(snapshot.rbac_model.id, self.model.id)


class TestMappings(RbacTestCase):
    def test_every_role_listed(self) -> None:
        grant_permission(self.store, self.editor.id, self.write.id)
        mappings = {m.role_id: m for m in self.resolver.mappings_for_model(self.model.id)}
        self.assertEqual(set(mappings), {self.editor.id, self.viewer.id})
        self.assertEqual([p.id for p in mappings[self.editor.id].permissions], [self.write.id])
        self.assertEqual(mappings[self.viewer.id].permissions, [])

    def test_unknown_model(self) -> None:
        with self.assertRaises(NotFoundError):
            self.resolver.mappings_for_model("missing")


class TestAdministration(RbacTestCase):
    def test_cross_model_grant_rejected(self) -> None:
        other = create_rbac_model(self.store, "Other", "Other roles", self.admin.id)
        foreign = add_permission(self.store, other.id, "x:y", "Foreign")
        with self.assertRaises(RbacConsistencyError):
            grant_permission(self.store, self.editor.id, foreign.id)

    def test_revoke(self) -> None:
        grant_permission(self.store, self.editor.id, self.write.id)
        revoke_permission(self.store, self.editor.id, self.write.id)
        self.assertEqual(self.store.permissions_for_role(self.editor.id, self.model.id), [])

    def test_role_requires_assigned_model(self) -> None:
        with self.assertRaises(RbacConsistencyError):
            assign_user_role(self.store, self.member.id, self.service.id, self.editor.id)

    def test_role_from_other_model_rejected(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        other = create_rbac_model(self.store, "Other", "Other roles", self.admin.id)
        foreign_role = add_role(self.store, other.id, "boss", "Other model role")
        with self.assertRaises(RbacConsistencyError):
            assign_user_role(self.store, self.member.id, self.service.id, foreign_role.id)

    def test_one_role_per_user_and_service(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        assign_user_role(self.store, self.member.id, self.service.id, self.editor.id)
        assign_user_role(self.store, self.member.id, self.service.id, self.viewer.id)
        assignment = self.store.get_user_service_role(self.member.id, self.service.id)
        self.assertEqual(assignment.role_id, self.viewer.id)

    def test_model_change_removes_stale_roles(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        assign_user_role(self.store, self.member.id, self.service.id, self.editor.id)
        other = create_rbac_model(self.store, "Other", "Other roles", self.admin.id)
        assign_rbac_model(self.store, self.service.id, other.id)

        self.assertEqual(
            self.store.get_service_rbac_model(self.service.id).rbac_model_id, other.id
        )
        self.assertIsNone(self.store.get_user_service_role(self.member.id, self.service.id))

    def test_unassign(self) -> None:
        assign_rbac_model(self.store, self.service.id, self.model.id)
        assign_user_role(self.store, self.member.id, self.service.id, self.editor.id)
        unassign_user_role(self.store, self.member.id, self.service.id)
        with self.assertRaises(NotFoundError):
            unassign_user_role(self.store, self.member.id, self.service.id)

    def test_unknown_references(self) -> None:
        with self.assertRaises(NotFoundError):
            assign_rbac_model(self.store, "missing", self.model.id)
        with self.assertRaises(NotFoundError):
            assign_rbac_model(self.store, self.service.id, "missing")
        with self.assertRaises(NotFoundError):
            add_role(self.store, "missing", "x", "y")

    def test_model_survives_deletion_of_its_creator(self) -> None:
        update_user(self.store, self.member.id, role="admin")
        service, _ = self.make_service(self.member.id, name="Wiki")
        service_id, model_id = service.id, self.model.id
        assign_rbac_model(self.store, service_id, model_id)

        delete_user(self.store, self.admin.id)
        self.session.expunge_all()

        model = self.store.get_rbac_model(model_id)
        self.assertIsNotNone(model)
        self.assertIsNone(model.created_by)
        self.assertEqual(self.store.get_service_rbac_model(service_id).rbac_model_id, model_id)
