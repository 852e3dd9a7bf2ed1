"""Tests for the Sitecore configuration adapter."""

import pytest

from src.bridge.sitecore import (
    REDACTED,
    SitecoreConfig,
    environment_summary,
    redact,
    to_config_document,
    to_environment,
)
from src.config import settings


@pytest.fixture
def arguments() -> dict:
    return {
        "instanceUrl": "https://cm.example.com",
        "username": "admin",
        "password": "b",
        "domain": "extranet",
        "database": "web",
        "path": "/sitecore/content/Home",
    }


class TestSitecoreConfig:
    """Tests for building the canonical configuration."""

    def test_derives_graphql_endpoint_from_instance(self, arguments):
        config = SitecoreConfig.from_arguments(arguments)
        assert config.graphql_endpoint == "https://cm.example.com/sitecore/api/graph/"
        assert config.instance_url == "https://cm.example.com"
        assert config.domain == "extranet"
        assert config.database == "web"

    def test_explicit_graphql_endpoint_wins(self, arguments):
        arguments["graphqlEndpoint"] = "https://gql.example.com/graph"
        config = SitecoreConfig.from_arguments(arguments)
        assert config.graphql_endpoint == "https://gql.example.com/graph"

    def test_api_key_precedence(self, arguments):
        arguments["apiKey"] = "api-key"
        assert SitecoreConfig.from_arguments(arguments).api_key == "api-key"

        arguments["authToken"] = "token"
        assert SitecoreConfig.from_arguments(arguments).api_key == "token"

    def test_defaults(self):
        config = SitecoreConfig.from_arguments({})
        assert config.api_key == settings.DEFAULT_SITECORE_API_KEY
        assert config.domain == "sitecore"
        assert config.database == "master"
        assert config.instance_url is None
        assert config.graphql_endpoint is None
        assert config.username is None


class TestConfigDocument:
    """Tests for the config file layout."""

    def test_sections(self, arguments):
        document = to_config_document(SitecoreConfig.from_arguments(arguments))

        assert document["graphQL"] == {
            "endpoint": "https://cm.example.com/sitecore/api/graph/",
            "apiKey": settings.DEFAULT_SITECORE_API_KEY,
        }
        expected_service = {
            "domain": "extranet",
            "username": "admin",
            "password": "b",
            "serverUrl": "https://cm.example.com",
        }
        assert document["itemService"] == expected_service
        assert document["powershell"] == expected_service

    def test_sections_are_independent(self, arguments):
        document = to_config_document(SitecoreConfig.from_arguments(arguments))
        document["itemService"]["username"] = "changed"
        assert document["powershell"]["username"] == "admin"


class TestEnvironment:
    """Tests for the environment variable mapping."""

    def test_all_naming_schemes_carry_the_same_values(self, arguments):
        env = to_environment(SitecoreConfig.from_arguments(arguments), "/tmp/cfg.json")

        for name in ("SITECORE_ITEMSERVICE_URL", "SITECORE_SERVER_URL",
                     "POWERSHELL_SERVER_URL", "SITECORE_INSTANCE_URL"):
            assert env[name] == "https://cm.example.com"
        for name in ("SITECORE_ITEMSERVICE_USERNAME", "SITECORE_USERNAME", "POWERSHELL_USERNAME"):
            assert env[name] == "admin"
        for name in ("SITECORE_ITEMSERVICE_PASSWORD", "SITECORE_PASSWORD", "POWERSHELL_PASSWORD"):
            assert env[name] == "b"
        for name in ("SITECORE_ITEMSERVICE_DOMAIN", "SITECORE_DOMAIN", "POWERSHELL_DOMAIN"):
            assert env[name] == "extranet"

        assert env["SITECORE_DATABASE"] == "web"
        assert env["SITECORE_GRAPHQL_ENDPOINT"] == "https://cm.example.com/sitecore/api/graph/"
        assert env["MCP_CONFIG_FILE"] == "/tmp/cfg.json"
        assert env["SITECORE_CONFIG_FILE"] == "/tmp/cfg.json"

    def test_unset_values_are_omitted(self):
        env = to_environment(SitecoreConfig.from_arguments({}))

        assert "SITECORE_USERNAME" not in env
        assert "SITECORE_SERVER_URL" not in env
        assert "MCP_CONFIG_FILE" not in env
        assert env["SITECORE_DOMAIN"] == "sitecore"
        assert all(isinstance(value, str) for value in env.values())


class TestRedaction:
    """Tests for secret masking in logs."""

    def test_redact_masks_nested_secrets(self, arguments):
        document = to_config_document(SitecoreConfig.from_arguments(arguments))
        masked = redact(document)

        assert masked["itemService"]["password"] == REDACTED
        assert masked["powershell"]["password"] == REDACTED
        assert masked["graphQL"]["apiKey"] == REDACTED
        assert masked["itemService"]["username"] == "admin"
        # original untouched
        assert document["itemService"]["password"] == "b"

    def test_environment_summary_hides_credentials(self, arguments):
        env = to_environment(SitecoreConfig.from_arguments(arguments))
        summary = environment_summary(env)

        assert summary["SITECORE_USERNAME"] == REDACTED
        assert summary["HAS_PASSWORD"] == "yes"
        assert "b" not in summary.values()
