"""Request models for API endpoints."""

from typing import List

from pydantic import BaseModel, Field, field_validator

from api.updater.models import UpgradeOptions


class UpgradeCompleteRequest(BaseModel):
    """Report of a finished upgrade run."""

    action: str = Field(..., description="Upgrade action, e.g. 'update' or 'install'")
    type: str = Field(..., description="What was upgraded: 'plugin', 'theme', 'core'...")
    plugins: List[str] = Field(default_factory=list, description="Affected plugin basenames")

    @field_validator('action', 'type')
    @classmethod
    def strip_value(cls, v: str) -> str:
        return v.strip()

    @field_validator('plugins')
    @classmethod
    def drop_blank_plugins(cls, v: List[str]) -> List[str]:
        return [p.strip() for p in v if p and p.strip()]

    def to_options(self) -> UpgradeOptions:
        return UpgradeOptions(action=self.action, type=self.type, plugins=self.plugins)

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "action": "update",
                    "type": "plugin",
                    "plugins": ["wp-plugin-self-hosted-test/plugin.py"],
                }
            ]
        }
