"""Default provisioning: per-user service bundle, the hub service, default RBAC models."""

import logging

from sqlalchemy.exc import IntegrityError

from authhub.core.crypto import SecretVault
from authhub.models import Service, User
from authhub.schemas.service import ServiceCreate
from authhub.services.rbac import add_permission, add_role, create_rbac_model, grant_permission
from authhub.services.service_catalog import create_service
from authhub.services.storage import Storage

logger = logging.getLogger(__name__)

# Fixed id of the hub's own service, shared by every user.
HUB_SERVICE_ID = "550e8400-e29b-41d4-a716-446655440000"

HUB_SERVICE = {
    "name": "AuthHub",
    "description": "Centralized authentication and user management system",
    "icon": "Shield",
    "color": "hsl(248, 100%, 28%)",
}

DEFAULT_SERVICES: list[dict[str, str]] = [
    {
        "name": "Git Garden",
        "description": "Git-based portfolio-as-a-service platform",
        "url": "https://ts-git-garden.replit.app",
        "icon": "Sprout",
        "color": "#4f46e5",
    },
    {
        "name": "Iron Path",
        "description": "Fitness tracking and workout planning platform",
        "url": "https://ts-iron-path.replit.app",
        "icon": "TrendingUp",
        "color": "#059669",
    },
    {
        "name": "PurpleGreen",
        "description": "Wealth management system for financial and accounting",
        "url": "https://ts-purple-green.replit.app",
        "icon": "DollarSign",
        "color": "#8b5cf6",
    },
    {
        "name": "BTCPay Dashboard",
        "description": "Bitcoin payment processing and merchant tools",
        "url": "https://ts-btcpay-dashboard.replit.app",
        "icon": "Bitcoin",
        "color": "#f59e0b",
    },
    {
        "name": "Quest Armory",
        "description": "Questing system with challenges and achievements",
        "url": "https://ts-quest-armory.replit.app",
        "icon": "Swords",
        "color": "hsl(var(--primary))",
    },
    {
        "name": "Git Healthz",
        "description": "Service-wide health checks and monitoring",
        "url": "https://ts-git-healthz.replit.app",
        "icon": "Activity",
        "color": "hsl(var(--primary))",
    },
    {
        "name": "Academia Vault",
        "description": "Academic resources and knowledge management",
        "url": "https://ts-academia-vault.replit.app",
        "icon": "BookOpen",
        "color": "hsl(var(--primary))",
    },
]

# name -> (description, roles {name: (description, [permission names])}, permissions {name: description})
DEFAULT_RBAC_MODELS: dict[str, tuple[str, dict[str, tuple[str, list[str]]], dict[str, str]]] = {
    "Content Management": (
        "Roles for publishing platforms: authors write, editors review, admins manage",
        {
            "admin": (
                "Full control over content and members",
                ["content:read", "content:write", "content:publish", "content:delete", "members:manage"],
            ),
            "editor": (
                "Reviews and publishes content",
                ["content:read", "content:write", "content:publish"],
            ),
            "viewer": ("Read-only access", ["content:read"]),
        },
        {
            "content:read": "Read content",
            "content:write": "Create and edit content",
            "content:publish": "Publish content",
            "content:delete": "Delete content",
            "members:manage": "Invite and remove members",
        },
    ),
    "Project Management": (
        "Roles for task and project tracking",
        {
            "owner": (
                "Owns the project",
                ["projects:read", "projects:write", "tasks:read", "tasks:write", "tasks:assign"],
            ),
            "member": ("Works on tasks", ["projects:read", "tasks:read", "tasks:write"]),
            "guest": ("Can follow progress", ["projects:read", "tasks:read"]),
        },
        {
            "projects:read": "View projects",
            "projects:write": "Create and edit projects",
            "tasks:read": "View tasks",
            "tasks:write": "Create and edit tasks",
            "tasks:assign": "Assign tasks to members",
        },
    ),
}


def seed_services(store: Storage, vault: SecretVault, user_id: str) -> list[Service]:
    """Create the default service bundle for a user, skipping names they already own."""
    created = []
    for defaults in DEFAULT_SERVICES:
        if store.find_service_by_name(user_id, defaults["name"]) is not None:
            logger.debug(
                "Service %r already exists for user %s, skipping", defaults["name"], user_id
            )
            continue
        service, _ = create_service(store, vault, user_id, ServiceCreate(**defaults))
        created.append(service)
    logger.info("Seeded %s default services for user %s", len(created), user_id)
    return created


def ensure_hub_service(store: Storage, vault: SecretVault, hub_url: str) -> Service:
    """Create the hub's own service once; it has no owner and cannot be deleted."""
    existing = store.get_service_by_id(HUB_SERVICE_ID)
    if existing is not None:
        return existing
    data = ServiceCreate(url=hub_url, **HUB_SERVICE)
    try:
        with store.savepoint():
            service, _ = create_service(
                store, vault, None, data, service_id=HUB_SERVICE_ID, is_system=True
            )
    except IntegrityError:
        # Another request created it first.
        service = store.get_service_by_id(HUB_SERVICE_ID)
        if service is None:
            raise
        return service
    logger.info("Created hub service %s", HUB_SERVICE_ID)
    return service


def seed_default_rbac_models(store: Storage, admin: User) -> int:
    """Create the default RBAC models that do not exist yet. Returns how many were created."""
    created = 0
    for name, (description, roles, permissions) in DEFAULT_RBAC_MODELS.items():
        if store.find_rbac_model_by_name(name) is not None:
            continue
        model = create_rbac_model(store, name, description, admin.id)
        permission_ids = {
            perm_name: add_permission(store, model.id, perm_name, perm_desc).id
            for perm_name, perm_desc in permissions.items()
        }
        for role_name, (role_desc, granted) in roles.items():
            role = add_role(store, model.id, role_name, role_desc)
            for perm_name in granted:
                grant_permission(store, role.id, permission_ids[perm_name])
        created += 1
    if created:
        logger.info("Seeded %s default RBAC models for admin %s", created, admin.id)
    return created
