"""
FastAPI routes for admin authentication and account management.

Prefix: /auth

What a login returns depends on the configured strategy: a session token
for "token", only username and role for "shared_secret" and
"credentialed".
"""

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from minbar.auth.authenticators import Credentials
from minbar.models.user import Principal
from .auth_deps import get_credentials, get_minbar, require_any_admin, require_superadmin
from .content_routes import ok
from .models import ChangePasswordRequest, CreateAdminRequest, LoginRequest, SetPasswordRequest


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(payload: LoginRequest, request: Request):
    """Login with username and password"""
    auth = get_minbar(request).auth
    result = await run_in_threadpool(auth.login, payload.username, payload.password)
    return {"ok": True, "message": "Login successful", **result.to_public()}


@router.post("/logout")
async def logout(request: Request, credentials: Credentials = Depends(get_credentials)):
    """Destroy the current session (idempotent)"""
    await run_in_threadpool(get_minbar(request).auth.logout, credentials)
    return ok(message="Logged out")


@router.get("/me")
async def me(principal: Principal = Depends(require_any_admin)):
    return ok({"username": principal.username, "role": principal.role})


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    principal: Principal = Depends(require_any_admin),
):
    """Change the caller's own password (or the shared secret)"""
    auth = get_minbar(request).auth
    await run_in_threadpool(
        auth.change_own_password, principal, payload.current_password, payload.new_password
    )
    return ok(message="Password changed successfully")


@router.post("/change-password/{username}")
async def change_user_password(
    username: str,
    payload: SetPasswordRequest,
    request: Request,
    principal: Principal = Depends(require_superadmin),
):
    """Reset another admin's password (superadmin only)"""
    auth = get_minbar(request).auth
    user = await run_in_threadpool(auth.change_user_password, principal, username, payload.new_password)
    return ok(user.to_public(), "Password changed successfully")


@router.post("/create-admin")
async def create_admin(
    payload: CreateAdminRequest,
    request: Request,
    principal: Principal = Depends(require_superadmin),
):
    """Create a new admin account (superadmin only)"""
    auth = get_minbar(request).auth
    user = await run_in_threadpool(
        auth.create_admin, principal, payload.username, payload.password, payload.role
    )
    return ok(user.to_public(), "Admin created successfully")


@router.get("/users")
async def list_users(request: Request, principal: Principal = Depends(require_superadmin)):
    """List all admin accounts without password hashes (superadmin only)"""
    users = await run_in_threadpool(get_minbar(request).auth.list_users)
    return ok([user.to_public() for user in users])


@router.delete("/users/{username}")
async def delete_user(
    username: str,
    request: Request,
    principal: Principal = Depends(require_superadmin),
):
    """Delete an admin account and its sessions (superadmin only)"""
    user = await run_in_threadpool(get_minbar(request).auth.delete_user, principal, username)
    return ok(user.to_public(), "User deleted successfully")
