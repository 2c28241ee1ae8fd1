import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, Path, Request

from storefront.config import Settings
from storefront.db import MAX_ROW_ID
from storefront.errors import Forbidden, Unauthenticated
from storefront.rbac import Permission, has_permission
from storefront.services.token_service import Identity, TokenService

log = logging.getLogger("storefront.auth")

# path parameter for row ids; out-of-range values fail validation before any query
RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _bearer_credential(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credential = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credential.strip() or None


def authenticate(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    """Require a valid bearer token and record the caller on request.state.identity."""
    token = _bearer_credential(authorization)
    if token is None:
        raise Unauthenticated()
    identity = TokenService(settings).verify(token)
    request.state.identity = identity
    return identity


def optional_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> Optional[Identity]:
    """Like authenticate, but callers without a bearer token get None. A bad bearer token is still rejected."""
    if _bearer_credential(authorization) is None:
        request.state.identity = None
        return None
    return authenticate(request, authorization, settings)


def require_permission(permission: Permission):
    def _gate(identity: Identity = Depends(authenticate)) -> Identity:
        if not has_permission(identity.role, permission):
            log.warning(
                "Denied %s to user %s with role %s",
                permission.value,
                identity.user_id,
                identity.role.value,
            )
            raise Forbidden()
        return identity

    return _gate
