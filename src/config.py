import tempfile
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # API Settings
    PORT: int = 3001
    HOST: str = "0.0.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "SMART MCP Sitecore Server"
    ENVIRONMENT: str = Field(
        "production",
        validation_alias=AliasChoices("NODE_ENV", "ENVIRONMENT"),
    )

    # MCP Server Settings
    MCP_COMMAND: List[str] = ["npx", "@antonytm/mcp-sitecore-server"]
    MCP_TIMEOUT_SECONDS: float = 30.0
    MCP_KILL_GRACE_SECONDS: float = 5.0
    MCP_CONFIG_DIR: str = tempfile.gettempdir()
    MAX_CONCURRENT_PROCESSES: Optional[int] = None  # None = unbounded

    # Sitecore Defaults
    DEFAULT_SITECORE_API_KEY: str = "{6D3F291E-66A5-4703-887A-D549AF83D859}"
    DEFAULT_SITECORE_DOMAIN: str = "sitecore"
    DEFAULT_SITECORE_DATABASE: str = "master"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
