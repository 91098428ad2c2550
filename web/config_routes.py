"""Site configuration routes (maintenance flag)"""

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from minbar.models.user import Principal
from .auth_deps import get_minbar, require_superadmin
from .content_routes import ok
from .models import MaintenanceRequest


router = APIRouter(prefix="/config", tags=["config"])


@router.get("/status")
async def get_status(request: Request):
    maintenance = await run_in_threadpool(get_minbar(request).maintenance.get)
    return ok({"maintenance": maintenance})


@router.post("/maintenance")
async def set_maintenance(
    payload: MaintenanceRequest,
    request: Request,
    principal: Principal = Depends(require_superadmin),
):
    maintenance = await run_in_threadpool(get_minbar(request).maintenance.set, payload.maintenance)
    message = "Maintenance mode enabled" if maintenance else "Maintenance mode disabled"
    return ok({"maintenance": maintenance}, message)
