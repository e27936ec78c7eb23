"""Scrape request and result models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from ..core.postprocessors import is_known


class FieldKind(str, Enum):
    """What a field descriptor extracts from its matched elements."""
    TEXT = "text"
    INNER_TEXT = "innerText"
    HTML = "html"
    ATTRIBUTE = "attribute"
    COUNT = "count"
    EXISTS = "exists"


class FieldDescriptor(BaseModel):
    """One named extraction rule: a CSS selector plus what to read from it.

    ``kind`` is the tag of the descriptor. ``attribute`` is required for the
    ``attribute`` kind and dropped for every other kind.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(min_length=1)
    query: str = Field(min_length=1)
    kind: FieldKind = Field(
        default=FieldKind.TEXT,
        validation_alias=AliasChoices("type", "kind"),
        serialization_alias="type",
    )
    multiple: bool = False
    attribute: Optional[str] = None
    postprocess: Optional[str] = None

    @field_validator("name", "query")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("postprocess")
    @classmethod
    def validate_postprocess(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_known(v):
            raise ValueError(f"unknown post-processor '{v}'")
        return v

    @model_validator(mode="before")
    @classmethod
    def drop_unused_attribute(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        kind = data.get("type", data.get("kind", FieldKind.TEXT))
        if kind not in (FieldKind.ATTRIBUTE, FieldKind.ATTRIBUTE.value):
            data = {k: v for k, v in data.items() if k != "attribute"}
        return data

    @model_validator(mode="after")
    def validate_attribute(self) -> "FieldDescriptor":
        if self.kind == FieldKind.ATTRIBUTE and not self.attribute:
            raise ValueError("'attribute' is required when type is 'attribute'")
        return self

    @property
    def empty_value(self) -> Any:
        """Value reported when the descriptor cannot be resolved."""
        return [] if self.multiple else None

    def fingerprint_payload(self) -> Dict[str, Any]:
        """Serializable fields that determine the extracted value."""
        return {
            "name": self.name,
            "query": self.query,
            "type": self.kind.value,
            "multiple": self.multiple,
            "attribute": self.attribute,
            "postprocess": self.postprocess,
        }


class ScrapeOptions(BaseModel):
    """Per-request scrape behaviour. Missing fields take their defaults."""
    model_config = ConfigDict(populate_by_name=True)

    timeout_ms: int = Field(
        default=30000,
        gt=0,
        validation_alias=AliasChoices("timeout_ms", "timeoutMs", "timeout"),
    )
    wait_for_idle: bool = Field(
        default=True,
        validation_alias=AliasChoices("wait_for_idle", "waitForIdle", "waitForNetworkIdle"),
    )
    use_cache: bool = Field(
        default=True,
        validation_alias=AliasChoices("use_cache", "useCache"),
    )
    block_ads: bool = Field(
        default=True,
        validation_alias=AliasChoices("block_ads", "blockAds"),
    )
    block_trackers: bool = Field(
        default=True,
        validation_alias=AliasChoices("block_trackers", "blockTrackers"),
    )
    block_media: bool = Field(
        default=False,
        validation_alias=AliasChoices("block_media", "blockMedia"),
    )
    user_agent: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("user_agent", "userAgent"),
    )


class ScrapeRequest(BaseModel):
    """Body of the scrape endpoints."""
    url: HttpUrl
    selectors: List[FieldDescriptor] = Field(default_factory=list)
    options: ScrapeOptions = Field(default_factory=ScrapeOptions)

    @field_validator("selectors")
    @classmethod
    def validate_unique_names(cls, v: List[FieldDescriptor]) -> List[FieldDescriptor]:
        seen = set()
        for descriptor in v:
            if descriptor.name in seen:
                raise ValueError(f"duplicate selector name '{descriptor.name}'")
            seen.add(descriptor.name)
        return v


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResultBundle(BaseModel):
    """Outcome of one scrape call."""
    url: str
    title: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)
    from_cache: bool = False
    error: Optional[str] = None
    execution_time: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None
