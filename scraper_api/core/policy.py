"""Blocking and browser launch policy loaded from YAML."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .config import get_settings
from .exceptions import PolicyError
from .logging import get_logger

logger = get_logger(__name__)


class BlockPolicy(BaseModel):
    """Request blocking rules shared by every page."""
    keywords: List[str] = Field(default_factory=list)
    media_resource_types: List[str] = Field(
        default_factory=lambda: ["image", "media", "font"]
    )


class LaunchPolicy(BaseModel):
    """Chromium command line flags."""
    args: List[str] = Field(default_factory=list)


class ScrapePolicy(BaseModel):
    """Complete policy table."""
    blocking: BlockPolicy = Field(default_factory=BlockPolicy)
    launch: LaunchPolicy = Field(default_factory=LaunchPolicy)


def load_policy(policy_file: Path) -> ScrapePolicy:
    """Load a policy table from a YAML file."""
    try:
        with open(policy_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise PolicyError(f"Failed to read policy file {policy_file}: {e}") from e

    try:
        policy = ScrapePolicy.model_validate(data)
    except ValidationError as e:
        raise PolicyError(f"Invalid policy file {policy_file}: {e}") from e

    logger.info(
        "Loaded scrape policy",
        policy_file=str(policy_file),
        keywords=len(policy.blocking.keywords),
        launch_args=len(policy.launch.args),
    )
    return policy


@lru_cache()
def get_policy(policy_file: Optional[Path] = None) -> ScrapePolicy:
    """Get cached policy instance."""
    return load_policy(policy_file or get_settings().policy_file)
