"""Update check REST API endpoints.

Each request runs the plugins' update hooks once; ``force-check=1`` makes
the first metadata lookup of the request skip the cache.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from api.dependencies import get_plugin_manager
from api.models.requests import UpgradeCompleteRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/updates", tags=["updates"])


@router.get("/")
async def check_updates(force_check: bool = Query(False, alias="force-check")):
    """Return the update transient for every started plugin."""
    manager = get_plugin_manager()
    transient = await manager.check_updates(force_check=force_check)
    return transient.model_dump()


@router.get("/plugin-information/{slug}")
async def plugin_information(slug: str, force_check: bool = Query(False, alias="force-check")):
    """Return display information for the plugin installed in directory ``slug``."""
    manager = get_plugin_manager()
    info = await manager.plugin_information(slug, force_check=force_check)
    if info is None:
        raise HTTPException(status_code=404, detail=f"No plugin information for '{slug}'")
    return info.model_dump() if hasattr(info, "model_dump") else info


@router.post("/complete")
async def upgrade_complete(body: UpgradeCompleteRequest):
    """Report a finished upgrade run so plugins can drop stale update data."""
    manager = get_plugin_manager()
    await manager.upgrade_complete(body.to_options())
    logger.info(f"Upgrade complete: action={body.action}, type={body.type}, plugins={body.plugins}")
    return {"message": "Upgrade completion processed"}
