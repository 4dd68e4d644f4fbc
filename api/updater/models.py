"""Update metadata and host-facing update records."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TEXT_FIELDS = (
    "name",
    "slug",
    "version",
    "tested",
    "requires",
    "requires_php",
    "author",
    "author_profile",
    "download_url",
    "last_updated",
)


class MetadataSections(BaseModel):
    """Long-form texts shown in the plugin details dialog."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    description: str = ""
    installation: str = ""
    changelog: str = ""
    upgrade_notice: str = ""

    @field_validator("description", "installation", "changelog", "upgrade_notice", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class RemoteMetadata(BaseModel):
    """Metadata published in the repository's ``wp-dist/data.json``.

    Every field is optional on the wire; missing or null values become "".
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: str = ""
    slug: str = ""
    version: str = ""
    tested: str = ""
    requires: str = ""
    requires_php: str = ""
    author: str = ""
    author_profile: str = ""
    download_url: str = ""
    last_updated: str = ""
    sections: MetadataSections = Field(default_factory=MetadataSections)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("sections", mode="before")
    @classmethod
    def sections_as_mapping(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}


class PluginInformation(BaseModel):
    """Answer to a ``plugin_information`` request."""

    name: str = ""
    slug: str = ""
    version: str = ""
    tested: str = ""
    requires: str = ""
    requires_php: str = ""
    author: str = ""
    author_profile: str = ""
    download_link: str = ""
    trunk: str = ""
    last_updated: str = ""
    sections: Dict[str, str] = Field(default_factory=dict)


class PluginUpdateData(BaseModel):
    """Per-plugin entry stored in the update transient."""

    slug: str
    plugin: str
    new_version: str = ""
    tested: str = ""
    package: str = ""


class UpdateTransient(BaseModel):
    """Aggregate update state the host passes through ``site_transient_update_plugins``.

    ``response`` is None until the host is ready to collect results.
    """

    last_checked: Optional[float] = None
    checked: Dict[str, str] = Field(default_factory=dict)
    response: Optional[Dict[str, PluginUpdateData]] = None
    no_update: Optional[Dict[str, PluginUpdateData]] = None


class PluginsApiArgs(BaseModel):
    """Arguments of a ``plugins_api`` request."""

    model_config = ConfigDict(extra="allow")

    slug: str = ""


class UpgradeOptions(BaseModel):
    """What the host reports after an upgrade run."""

    action: Optional[str] = None
    type: Optional[str] = None
    plugins: Optional[List[str]] = None
