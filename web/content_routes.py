"""
Public content routes: books, tips and posts.

Listing and reading are public; create, update and delete require an
admin (superadmin or admin).
"""

from typing import Any, Dict, Type

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from minbar.models.user import Principal
from minbar.services.content_service import ContentService
from .auth_deps import get_minbar, require_any_admin
from .models import BookCreate, BookUpdate, PostCreate, PostUpdate, TipCreate, TipUpdate


def ok(data: Any = None, message: str = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"ok": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def build_content_router(
    collection: str,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
) -> APIRouter:
    """CRUD router for one content collection of the application container"""
    router = APIRouter(prefix=f"/{collection}", tags=[collection])

    def service(request: Request) -> ContentService:
        return getattr(get_minbar(request), collection)

    @router.get("")
    async def list_items(request: Request):
        items = await run_in_threadpool(service(request).list)
        return ok([item.to_public() for item in items])

    @router.get("/{item_id}")
    async def get_item(item_id: str, request: Request):
        item = await run_in_threadpool(service(request).get, item_id)
        return ok(item.to_public())

    @router.post("")
    async def create_item(
        payload: create_model,
        request: Request,
        principal: Principal = Depends(require_any_admin),
    ):
        svc = service(request)
        item = await run_in_threadpool(svc.create, **payload.model_dump())
        return ok(item.to_public(), f"{svc.label} added successfully")

    @router.put("/{item_id}")
    async def update_item(
        item_id: str,
        payload: update_model,
        request: Request,
        principal: Principal = Depends(require_any_admin),
    ):
        svc = service(request)
        item = await run_in_threadpool(svc.update, item_id, **payload.model_dump(exclude_unset=True))
        return ok(item.to_public(), f"{svc.label} updated")

    @router.delete("/{item_id}")
    async def delete_item(
        item_id: str,
        request: Request,
        principal: Principal = Depends(require_any_admin),
    ):
        svc = service(request)
        item = await run_in_threadpool(svc.delete, item_id)
        return ok(item.to_public(), f"{svc.label} deleted")

    return router


books_router = build_content_router("books", BookCreate, BookUpdate)
tips_router = build_content_router("tips", TipCreate, TipUpdate)
posts_router = build_content_router("posts", PostCreate, PostUpdate)
