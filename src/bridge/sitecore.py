"""
Sitecore configuration adapter.

Builds one canonical configuration from the arguments of a tool call and
maps it onto the two surfaces the Sitecore MCP server reads: a JSON config
file and environment variables.

Environment variable names written by `to_environment`:

    GraphQL:       SITECORE_GRAPHQL_ENDPOINT, SITECORE_API_KEY
    Item Service:  SITECORE_ITEMSERVICE_URL, SITECORE_ITEMSERVICE_USERNAME,
                   SITECORE_ITEMSERVICE_PASSWORD, SITECORE_ITEMSERVICE_DOMAIN
    Legacy:        SITECORE_SERVER_URL, SITECORE_USERNAME,
                   SITECORE_PASSWORD, SITECORE_DOMAIN
    PowerShell:    POWERSHELL_SERVER_URL, POWERSHELL_USERNAME,
                   POWERSHELL_PASSWORD, POWERSHELL_DOMAIN
    Other:         SITECORE_DATABASE, SITECORE_INSTANCE_URL,
                   MCP_CONFIG_FILE, SITECORE_CONFIG_FILE

Values the request does not supply are not written at all, so the child
keeps whatever the host environment already holds under that name (for
example a host-level SITECORE_PASSWORD when the call carries no password).
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from src.config import settings

REDACTED = "***"
SECRET_KEYS = {"password", "apiKey", "api_key", "authToken"}


class SitecoreConfig(BaseModel):
    """Canonical connection settings for one Sitecore instance."""

    instance_url: Optional[str] = None
    graphql_endpoint: Optional[str] = None
    api_key: str
    domain: str
    username: Optional[str] = None
    password: Optional[str] = None
    database: str

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "SitecoreConfig":
        """
        Derive the configuration from tool-call arguments.

        Args:
            arguments: Raw arguments of the tool call (camelCase keys)

        Returns:
            SitecoreConfig with defaults applied
        """
        instance_url = _as_str(arguments.get("instanceUrl"))
        graphql_endpoint = _as_str(arguments.get("graphqlEndpoint"))
        if not graphql_endpoint and instance_url:
            graphql_endpoint = f"{instance_url}/sitecore/api/graph/"

        return cls(
            instance_url=instance_url,
            graphql_endpoint=graphql_endpoint,
            api_key=(
                _as_str(arguments.get("authToken"))
                or _as_str(arguments.get("apiKey"))
                or settings.DEFAULT_SITECORE_API_KEY
            ),
            domain=_as_str(arguments.get("domain")) or settings.DEFAULT_SITECORE_DOMAIN,
            username=_as_str(arguments.get("username")),
            password=_as_str(arguments.get("password")),
            database=_as_str(arguments.get("database")) or settings.DEFAULT_SITECORE_DATABASE,
        )


def _as_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def to_config_document(config: SitecoreConfig) -> Dict[str, Any]:
    """Config file layout expected by the Sitecore MCP server."""
    service = {
        "domain": config.domain,
        "username": config.username,
        "password": config.password,
        "serverUrl": config.instance_url,
    }
    return {
        "graphQL": {
            "endpoint": config.graphql_endpoint,
            "apiKey": config.api_key,
        },
        "itemService": dict(service),
        "powershell": dict(service),
    }


def to_environment(config: SitecoreConfig, config_path: Optional[str] = None) -> Dict[str, str]:
    """
    Map the configuration onto the environment variable names the server reads.

    Unset values are left out, so the host environment shows through for them.
    """
    values = {
        "SITECORE_GRAPHQL_ENDPOINT": config.graphql_endpoint,
        "SITECORE_API_KEY": config.api_key,

        "SITECORE_ITEMSERVICE_URL": config.instance_url,
        "SITECORE_ITEMSERVICE_USERNAME": config.username,
        "SITECORE_ITEMSERVICE_PASSWORD": config.password,
        "SITECORE_ITEMSERVICE_DOMAIN": config.domain,

        "SITECORE_SERVER_URL": config.instance_url,
        "SITECORE_USERNAME": config.username,
        "SITECORE_PASSWORD": config.password,
        "SITECORE_DOMAIN": config.domain,

        "POWERSHELL_SERVER_URL": config.instance_url,
        "POWERSHELL_USERNAME": config.username,
        "POWERSHELL_PASSWORD": config.password,
        "POWERSHELL_DOMAIN": config.domain,

        "SITECORE_DATABASE": config.database,
        "SITECORE_INSTANCE_URL": config.instance_url,

        "MCP_CONFIG_FILE": config_path,
        "SITECORE_CONFIG_FILE": config_path,
    }
    return {name: value for name, value in values.items() if value is not None}


def redact(document: Any) -> Any:
    """Copy of a config document with secrets masked, for logging."""
    if isinstance(document, dict):
        return {
            key: (REDACTED if key in SECRET_KEYS and value else redact(value))
            for key, value in document.items()
        }
    if isinstance(document, list):
        return [redact(item) for item in document]
    return document


def environment_summary(env: Mapping[str, str]) -> Dict[str, str]:
    """Short, secret-free view of the child environment for logging."""
    return {
        "SITECORE_SERVER_URL": env.get("SITECORE_SERVER_URL", "not set"),
        "SITECORE_DATABASE": env.get("SITECORE_DATABASE", "not set"),
        "SITECORE_USERNAME": REDACTED if env.get("SITECORE_USERNAME") else "not set",
        "SITECORE_DOMAIN": env.get("SITECORE_DOMAIN", "not set"),
        "HAS_PASSWORD": "yes" if env.get("SITECORE_PASSWORD") else "no",
    }
