"""Login, registration, token verification and shared auth dependencies."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from authhub.auth import AuthenticationOrchestrator, get_strategy_registry
from authhub.auth.hooks import default_hooks
from authhub.core.config import get_settings
from authhub.core.crypto import SecretVault, get_vault
from authhub.core.database import get_db
from authhub.core.errors import AuthHubError, InvalidTokenError
from authhub.models import ApiKey
from authhub.schemas.api_key import CredentialCheckResult
from authhub.schemas.auth import (
    AuthMethodMetadata,
    AuthResponse,
    CurrentUser,
    EmailPasswordCredentials,
    LoginRequest,
    RegisterRequest,
    TokenVerificationResult,
    VerifyTokenRequest,
)
from authhub.schemas.rbac import PermissionSnapshot
from authhub.services.api_keys import authenticate_api_key
from authhub.services.credentials import CredentialIssuer
from authhub.services.rbac import RbacResolver
from authhub.services.storage import Storage

router = APIRouter()
security = HTTPBearer(auto_error=False)
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def http_error(e: AuthHubError) -> HTTPException:
    """Map a core error onto an HTTP error with the same status and message."""
    headers = {"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None
    return HTTPException(status_code=e.status_code, detail=e.message, headers=headers)


def get_store(db: Annotated[Session, Depends(get_db)]) -> Storage:
    return Storage(db)


def get_issuer(
    store: Annotated[Storage, Depends(get_store)],
    vault: Annotated[SecretVault, Depends(get_vault)],
) -> CredentialIssuer:
    settings = get_settings()
    return CredentialIssuer(
        store,
        vault,
        RbacResolver(store),
        settings.SESSION_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
    )


def get_orchestrator(
    store: Annotated[Storage, Depends(get_store)],
    issuer: Annotated[CredentialIssuer, Depends(get_issuer)],
    vault: Annotated[SecretVault, Depends(get_vault)],
) -> AuthenticationOrchestrator:
    settings = get_settings()
    return AuthenticationOrchestrator(
        store,
        get_strategy_registry(),
        issuer,
        vault,
        hooks=default_hooks(settings.HUB_SERVICE_URL, settings.SEED_DEFAULT_SERVICES),
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[CredentialIssuer, Depends(get_issuer)],
    store: Annotated[Storage, Depends(get_store)],
) -> CurrentUser:
    """Dependency: require a valid hub (global-key) Bearer token. Raises 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = issuer.verify_global(credentials.credentials)
    except InvalidTokenError as e:
        raise http_error(e)
    user_id = payload.get("id")
    user = store.get_user(user_id) if isinstance(user_id, str) else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser(id=user.id, email=user.email, role=user.role)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


def require_api_key(
    api_key: Annotated[str | None, Depends(api_key_header)],
    store: Annotated[Storage, Depends(get_store)],
) -> ApiKey:
    """Dependency: require a known X-API-Key header. Raises 401 otherwise."""
    try:
        return authenticate_api_key(store, api_key)
    except AuthHubError as e:
        raise http_error(e)


def require_admin_or_api_key(
    api_key: Annotated[str | None, Depends(api_key_header)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[CredentialIssuer, Depends(get_issuer)],
    store: Annotated[Storage, Depends(get_store)],
) -> None:
    """
    Dependency: accept an X-API-Key header or an admin Bearer token.
    When the header is present it alone decides; a bad key is a 401.
    """
    if api_key is not None:
        require_api_key(api_key, store)
        return
    require_admin(get_current_user(credentials, issuer, store))


@router.get("/methods", response_model=list[AuthMethodMetadata])
def list_auth_methods() -> list[AuthMethodMetadata]:
    """Implemented and placeholder login methods, for login-page rendering."""
    return get_strategy_registry().list_metadata()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    orchestrator: Annotated[AuthenticationOrchestrator, Depends(get_orchestrator)],
) -> AuthResponse:
    """Create an email/password account; the first account ever is an admin."""
    try:
        return orchestrator.register(body.email, body.password, body.service_id)
    except AuthHubError as e:
        raise http_error(e)


@router.post("/login/{method_id}", response_model=AuthResponse)
def login(
    method_id: str,
    body: LoginRequest,
    orchestrator: Annotated[AuthenticationOrchestrator, Depends(get_orchestrator)],
) -> AuthResponse:
    """
    Authenticate with any implemented method, e.g. ``uuid`` or ``email``.
    With service_id the token is signed with that service's secret and carries RBAC data.
    """
    try:
        return orchestrator.authenticate(method_id, body.credentials, body.service_id)
    except AuthHubError as e:
        raise http_error(e)


@router.post("/verify", response_model=CredentialCheckResult)
def verify_credentials(
    body: EmailPasswordCredentials,
    _api_key: Annotated[ApiKey, Depends(require_api_key)],
    orchestrator: Annotated[AuthenticationOrchestrator, Depends(get_orchestrator)],
) -> CredentialCheckResult:
    """For external products holding an API key: check an email and password."""
    try:
        return orchestrator.check_credentials(body.email, body.password)
    except AuthHubError as e:
        raise http_error(e)


@router.post("/verify-token", response_model=TokenVerificationResult)
def verify_token(
    body: VerifyTokenRequest,
    issuer: Annotated[CredentialIssuer, Depends(get_issuer)],
) -> TokenVerificationResult:
    """For client services: check a token using the service id and its secret."""
    try:
        return issuer.verify_for_service(body.token, body.service_id, body.secret)
    except AuthHubError as e:
        raise http_error(e)


@router.get("/permissions", response_model=PermissionSnapshot)
def resolve_permissions(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
    service_id: Annotated[str, Query(min_length=1)],
) -> PermissionSnapshot:
    """The caller's current role and permissions in a service."""
    return RbacResolver(store).resolve(current_user.id, service_id)
