"""Configuration management for the approval engine.

Runtime flags come from the environment (``APPROVED_REVS_*``) through
pydantic-settings. The permission policy is a YAML document loaded into a
``PolicyConfig``; rule entries are kept raw here and normalized when the
permission registry is built.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    # App
    app_name: str = "Approved Revisions"
    debug: bool = False
    base_url: str = "http://localhost/wiki"  # used in audit-log links

    # Database
    database_url: str = "sqlite:///approved_revs.db"
    read_database_url: Optional[str] = None  # replica for read paths

    # Behaviour flags
    blank_content_when_unapproved: bool = False
    automatic_approvals_enabled: bool = True
    show_approve_latest_link: bool = False
    show_not_approved_banner: bool = False

    # Policy
    permissions_file: Optional[str] = None

    # Webhooks
    webhook_urls: str = ""
    webhook_timeout: int = 30
    webhook_max_retries: int = 3

    # Logging
    log_level: str = "INFO"
    log_dir: str = "/var/log/approved_revs"
    file_logging: bool = False

    @property
    def webhook_urls_list(self) -> List[str]:
        return [url.strip() for url in self.webhook_urls.split(",") if url.strip()]

    model_config = SettingsConfigDict(
        env_prefix="APPROVED_REVS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Keys accepted for each zone: the spaced form used by wiki configuration
# and a snake_case form for YAML files.
ZONE_KEYS = {
    "all_pages": ("All Pages", "all_pages"),
    "namespace_permissions": ("Namespace Permissions", "namespace_permissions"),
    "category_permissions": ("Category Permissions", "category_permissions"),
    "page_permissions": ("Page Permissions", "page_permissions"),
}


@dataclass
class PolicyConfig:
    """Raw permission policy, one entry per zone."""

    all_pages: Any = field(default_factory=dict)
    namespace_permissions: Dict[Any, Any] = field(default_factory=dict)
    category_permissions: Dict[str, Any] = field(default_factory=dict)
    page_permissions: Dict[str, Any] = field(default_factory=dict)


DEFAULT_POLICY: Dict[str, Any] = {
    "All Pages": {"group": "sysop"},
    "Namespace Permissions": {
        "Main": {},
        "User": {},
        "Template": {},
        "Help": {},
        "Project": {},
    },
    "Category Permissions": {},
    "Page Permissions": {},
}


def _zone_value(policy_dict: Dict[str, Any], zone: str) -> Any:
    for key in ZONE_KEYS[zone]:
        if key in policy_dict:
            return policy_dict[key]
    return None


def _as_mapping(value: Any) -> Dict[Any, Any]:
    # A zone given as a list of names means "these keys, default rule".
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, (list, tuple)):
        return {key: {} for key in value}
    return {}


def parse_policy_config(policy_dict: Optional[Dict[str, Any]]) -> PolicyConfig:
    """Parse a policy dictionary into a PolicyConfig.

    Args:
        policy_dict: Policy mapping with zone keys (spaced or snake_case)

    Returns:
        PolicyConfig instance
    """
    policy_dict = policy_dict or {}
    all_pages = _zone_value(policy_dict, "all_pages")
    return PolicyConfig(
        all_pages=all_pages if all_pages is not None else {},
        namespace_permissions=_as_mapping(_zone_value(policy_dict, "namespace_permissions")),
        category_permissions=_as_mapping(_zone_value(policy_dict, "category_permissions")),
        page_permissions=_as_mapping(_zone_value(policy_dict, "page_permissions")),
    )


def load_policy_config(config_path: str) -> PolicyConfig:
    """Load the permission policy from a YAML file.

    Args:
        config_path: Path to the policy file

    Returns:
        PolicyConfig instance

    Raises:
        ConfigurationError: If the file is missing, invalid YAML, or not a mapping
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise ConfigurationError(f"Permissions file not found: {config_path}")

    try:
        with config_file.open("r") as f:
            policy = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if policy is None:
        policy = {}

    if not isinstance(policy, dict):
        raise ConfigurationError(
            f"Permissions root must be a mapping, got {type(policy).__name__}"
        )

    return parse_policy_config(_expand_env_vars(policy))


def load_default_policy(settings: Settings) -> PolicyConfig:
    """Policy from ``settings.permissions_file``, or the built-in default."""
    if settings.permissions_file:
        return load_policy_config(settings.permissions_file)
    return parse_policy_config(DEFAULT_POLICY)


def _expand_env_vars(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj
