"""FunnelScope — Platform Connection Routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from funnelscope.core.errors import (
    PlatformNotConnectedError,
    PlatformOperationError,
    UnknownPlatformError,
)
from funnelscope.database import get_store
from funnelscope.services.platform_service import PlatformService

router = APIRouter(prefix="/platforms", tags=["Platforms"])


# ── Request Models ──


class ConnectRequest(BaseModel):
    """Request body for POST /platforms."""

    platform: str
    credentials: Dict[str, Any]


def get_service() -> PlatformService:
    """Dependency — platform service over the configured document store."""
    return PlatformService(get_store())


# ── Endpoints ──


@router.get("")
async def list_platforms(service: PlatformService = Depends(get_service)):
    """Connection status and preview metrics for every platform."""
    metrics = service.load_metrics()
    return {
        "statuses": service.list_statuses(),
        "last_synced_at": metrics.last_synced_at,
    }


@router.post("")
async def connect_platform(
    request: ConnectRequest, service: PlatformService = Depends(get_service)
):
    """Save credentials after a successful live test fetch."""
    try:
        statuses = await service.connect(request.platform, request.credentials)
    except UnknownPlatformError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid credentials: {e.errors(include_url=False)}"
        )
    except PlatformOperationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"ok": True, "statuses": statuses}


@router.post("/sync")
async def sync_all_platforms(service: PlatformService = Depends(get_service)):
    """Refresh every connected platform; failures are skipped, not reported."""
    statuses = await service.sync_all()
    return {
        "ok": True,
        "statuses": statuses,
        "last_synced_at": service.load_metrics().last_synced_at,
    }


@router.get("/prompt-context")
async def prompt_context(service: PlatformService = Depends(get_service)):
    """Cached metrics rendered for the report prompt ("" when none)."""
    return {"context": service.get_prompt_context()}


@router.post("/{platform}/sync")
async def sync_platform(platform: str, service: PlatformService = Depends(get_service)):
    """Fetch fresh metrics for one connected platform."""
    try:
        statuses = await service.sync(platform)
    except UnknownPlatformError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PlatformNotConnectedError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PlatformOperationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {
        "ok": True,
        "statuses": statuses,
        "metrics": service.cached_metrics(platform),
    }


@router.delete("/{platform}")
async def disconnect_platform(
    platform: str, service: PlatformService = Depends(get_service)
):
    """Remove a platform's credentials and cached metrics."""
    try:
        statuses = service.disconnect(platform)
    except UnknownPlatformError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "statuses": statuses}
