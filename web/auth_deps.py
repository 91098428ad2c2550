"""
FastAPI dependencies for authentication and authorization.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool

from minbar.app import MinbarApp
from minbar.auth.authenticators import Credentials
from minbar.models.user import ROLE_ADMIN, ROLE_SUPERADMIN, Principal
from minbar.utils.exceptions import ForbiddenError

ADMIN_ROLES = (ROLE_SUPERADMIN, ROLE_ADMIN)


def get_minbar(request: Request) -> MinbarApp:
    """Dependency to get the application container"""
    return request.app.state.minbar


def get_session_token(request: Request) -> Optional[str]:
    """Extract session token from request (x-auth-token or Authorization header)"""
    token = request.headers.get("x-auth-token")
    if token:
        return token.strip()

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()

    return None


async def _body_password(request: Request) -> Optional[str]:
    """The legacy "password" field of a JSON or form body, if any"""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            body = await request.json()
            value = body.get("password") if isinstance(body, dict) else None
        elif content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
            form = await request.form()
            value = form.get("password")
        else:
            return None
    except ValueError:
        return None
    return value if isinstance(value, str) else None


async def get_credentials(request: Request) -> Credentials:
    admin_pass = request.headers.get("x-admin-pass")
    if admin_pass is None:
        admin_pass = await _body_password(request)

    return Credentials(
        admin_pass=admin_pass,
        username=request.headers.get("x-username"),
        password=request.headers.get("x-password"),
        token=get_session_token(request),
    )


async def get_current_principal(
    request: Request,
    credentials: Credentials = Depends(get_credentials),
) -> Principal:
    """Dependency to get the authenticated caller (401/403 otherwise)"""
    minbar = get_minbar(request)
    # bcrypt verification is CPU bound
    principal = await run_in_threadpool(minbar.auth.authenticate, credentials)
    request.state.principal = principal
    return principal


def require_role(role: str):
    """Dependency factory for role-based access control (exact match)"""
    async def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != role:
            raise ForbiddenError(f"Requires {role} role")
        return principal

    return role_checker


async def require_any_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Content routes: superadmin and admin are equivalent"""
    if principal.role not in ADMIN_ROLES:
        raise ForbiddenError("Admin access required")
    return principal


require_superadmin = require_role(ROLE_SUPERADMIN)
