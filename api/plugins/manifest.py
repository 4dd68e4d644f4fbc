"""plugin.json - what a plugin declares about itself."""

import re
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ENTRY_POINT = re.compile(r"^[A-Za-z_]\w*:[A-Za-z_]\w*$")


class PluginManifest(BaseModel):
    """Manifest of an installed plugin.

    ``version`` is the installed version the update check compares against;
    ``entry_point`` names the function that builds the plugin.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Unique plugin identifier (kebab-case)")
    name: str = Field(..., description="Human-readable plugin name")
    version: str = Field(..., min_length=1, description="Installed version, e.g. '1.0.1'")
    description: str = ""
    author: str = ""
    plugin_uri: str = ""
    type: Literal["hook"] = "hook"
    entry_point: str = Field(..., description="'module:function' in the plugin directory")
    config_schema: Optional[Dict[str, Any]] = Field(
        default=None,
        description="JSON Schema of the plugin's settings; 'required' keys are checked",
    )

    @field_validator("entry_point")
    @classmethod
    def check_entry_point(cls, v: str) -> str:
        if not _ENTRY_POINT.match(v):
            raise ValueError(f"expected 'module:function', got {v!r}")
        return v

    @property
    def entry_module(self) -> str:
        return self.entry_point.partition(":")[0]
