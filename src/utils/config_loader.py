"""
Configuration loader for partner insurance settings
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Iterable, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator
import logging

logger = logging.getLogger(__name__)


class UnknownBranchError(ValueError):
    """Raised when a branch has no insurance configuration."""

    def __init__(self, branch: Optional[str]) -> None:
        super().__init__(f"No insurance config found for branch: {branch}")
        self.branch = branch


class BranchInsuranceConfig(BaseModel):
    """Promo/event/partner triple the insurer expects for one branch"""

    promo_code: str = Field(min_length=1)
    event_name: str = Field(min_length=1)
    partner: str = Field(min_length=1)


class InsuranceConfig(BaseModel):
    """Complete partner insurance configuration"""

    product_plan_type: str = "ACTIVITIES_1"
    document_type: str = "ICPP"
    domestic_nationality: str = "MY"
    branches: Dict[str, BranchInsuranceConfig] = Field(default_factory=dict)

    @field_validator("branches")
    @classmethod
    def _branches_not_empty(cls, value: Dict[str, BranchInsuranceConfig]) -> Dict[str, BranchInsuranceConfig]:
        if not value:
            raise ValueError("at least one branch must be configured")
        return value

    def for_branch(self, branch: Optional[str]) -> BranchInsuranceConfig:
        """Exact-match lookup; branch names are free text from the form."""
        if branch is None or branch not in self.branches:
            raise UnknownBranchError(branch)
        return self.branches[branch]


def default_config_path() -> Path:
    override = os.getenv("INSURANCE_CONFIG_PATH")
    if override:
        return Path(override)
    return Path(__file__).parent.parent.parent / "config" / "insurance_branches.yml"


def load_insurance_config(config_path: Optional[Path] = None) -> InsuranceConfig:
    """
    Load and validate insurance configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/insurance_branches.yml
            (or INSURANCE_CONFIG_PATH when set)

    Returns:
        Validated InsuranceConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = default_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    try:
        config = InsuranceConfig(**config_data)
        logger.info(f"Successfully loaded insurance config from {config_path}")
        return config
    except ValidationError as e:
        logger.error(f"Insurance config validation failed: {e}")
        raise


def known_branches_from_env() -> list[str]:
    raw = os.getenv("KNOWN_BRANCHES", "")
    return [b.strip() for b in raw.split(",") if b.strip()]


def validate_branches(config: InsuranceConfig, known_branches: Iterable[str]) -> None:
    """Fail fast when a branch the park operates has no insurance entry."""
    missing = [b for b in known_branches if b not in config.branches]
    if missing:
        raise UnknownBranchError(", ".join(missing))
