"""Installed plugin REST API endpoints."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from api.dependencies import get_plugin_manager
from api.plugins.registry import PluginInstance
from api.plugins.settings import missing_required

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/plugins", tags=["plugins"])


class PluginSettingsUpdate(BaseModel):
    """New settings for a plugin, e.g. its GitHub username and repository."""

    config: Dict[str, Any]


def _find(plugin_id: str) -> PluginInstance:
    instance = get_plugin_manager().registry.get(plugin_id)
    if instance is None:
        raise HTTPException(status_code=404, detail=f"Plugin '{plugin_id}' not found")
    return instance


@router.get("/")
async def list_plugins():
    """Installed plugins with their state and the basename updates are reported under."""
    return {"plugins": get_plugin_manager().list_plugins()}


@router.get("/{plugin_id}")
async def get_plugin(plugin_id: str):
    _find(plugin_id)
    return get_plugin_manager().get_plugin_info(plugin_id)


@router.post("/{plugin_id}/enable")
async def enable_plugin(plugin_id: str):
    _find(plugin_id)
    instance = await get_plugin_manager().enable_plugin(plugin_id)
    return {"plugin": instance.describe()}


@router.post("/{plugin_id}/disable")
async def disable_plugin(plugin_id: str):
    _find(plugin_id)
    instance = await get_plugin_manager().disable_plugin(plugin_id)
    return {"plugin": instance.describe()}


@router.put("/{plugin_id}/config")
async def update_plugin_settings(plugin_id: str, body: PluginSettingsUpdate):
    """Replace a plugin's settings. Takes effect once the plugin is re-enabled."""
    instance = _find(plugin_id)
    missing = missing_required(body.config, instance.manifest.config_schema)
    if missing:
        raise HTTPException(status_code=422, detail=f"Missing required settings: {', '.join(missing)}")

    get_plugin_manager().update_plugin_settings(plugin_id, body.config)
    logger.info(f"Settings of plugin '{plugin_id}' replaced")
    return {"plugin": plugin_id, "config": body.config}
