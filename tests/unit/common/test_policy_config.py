"""Tests for settings and policy configuration loading."""

import pytest

from approved_revs.core.config import (
    DEFAULT_POLICY,
    PolicyConfig,
    Settings,
    load_default_policy,
    load_policy_config,
    parse_policy_config,
)
from approved_revs.core.exceptions import ConfigurationError


class TestSettings:
    """Tests for runtime settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.blank_content_when_unapproved is False
        assert settings.automatic_approvals_enabled is True
        assert settings.show_approve_latest_link is False
        assert settings.show_not_approved_banner is False
        assert settings.webhook_urls_list == []

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("APPROVED_REVS_BLANK_CONTENT_WHEN_UNAPPROVED", "true")
        monkeypatch.setenv("APPROVED_REVS_WEBHOOK_URLS", "https://a.example.org,https://b.example.org")

        settings = Settings(_env_file=None)

        assert settings.blank_content_when_unapproved is True
        assert settings.webhook_urls_list == ["https://a.example.org", "https://b.example.org"]


class TestParsePolicyConfig:
    """Tests for policy dictionary parsing."""

    def test_spaced_keys(self):
        policy = parse_policy_config(DEFAULT_POLICY)

        assert policy.all_pages == {"group": "sysop"}
        assert set(policy.namespace_permissions) == {"Main", "User", "Template", "Help", "Project"}

    def test_snake_case_keys(self):
        policy = parse_policy_config({
            "all_pages": {"group": "sysop"},
            "category_permissions": {"Reviewed": {"user": "Carol"}},
            "page_permissions": ["Main:Foo"],
        })

        assert policy.category_permissions == {"Reviewed": {"user": "Carol"}}
        assert policy.page_permissions == {"Main:Foo": {}}

    def test_empty(self):
        assert parse_policy_config(None) == PolicyConfig()


class TestLoadPolicyConfig:
    """Tests for YAML policy loading."""

    def test_load_file(self, tmp_path):
        path = tmp_path / "permissions.yaml"
        path.write_text(
            "All Pages:\n"
            "  group: [sysop, bureaucrat]\n"
            "Namespace Permissions:\n"
            "  Main: {}\n"
            "Page Permissions:\n"
            "  Help:Contents:\n"
            "    user: Dave\n"
            "    override: false\n"
        )

        policy = load_policy_config(str(path))

        assert policy.all_pages == {"group": ["sysop", "bureaucrat"]}
        assert policy.page_permissions == {"Help:Contents": {"user": "Dave", "override": False}}

    def test_env_vars_expanded(self, tmp_path, monkeypatch):
        monkeypatch.setenv("APPROVER_GROUP", "qa")
        path = tmp_path / "permissions.yaml"
        path.write_text("All Pages:\n  group: ${APPROVER_GROUP}\n")

        assert load_policy_config(str(path)).all_pages == {"group": "qa"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_policy_config(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "permissions.yaml"
        path.write_text("All Pages: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_policy_config(str(path))

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "permissions.yaml"
        path.write_text("- sysop\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_policy_config(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "permissions.yaml"
        path.write_text("")

        assert load_policy_config(str(path)) == PolicyConfig()

    def test_default_policy_without_file(self):
        policy = load_default_policy(Settings(_env_file=None, permissions_file=None))
        assert policy == parse_policy_config(DEFAULT_POLICY)
