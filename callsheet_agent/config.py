"""
Configuration management for the call-sheet extraction agent.

Loads all configuration from environment variables with sensible defaults
for local development. A ``.env`` file in the working directory is honoured.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class ProviderConfig:
    """Configuration for the chat-completions provider."""
    base_url: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    model: str = os.getenv("OPENROUTER_MODEL", "google/gemini-2.0-flash-001")
    api_key: str = os.getenv("OPENROUTER_API_KEY", "")
    http_referer: str = os.getenv("OPENROUTER_HTTP_REFERER", "https://fahrtenbuch-pro.app")
    title: str = os.getenv("OPENROUTER_TITLE", "Fahrtenbuch Pro")
    timeout: float = float(os.getenv("PROVIDER_TIMEOUT", "60"))


@dataclass
class AgentConfig:
    """Configuration for the extraction loop."""
    max_turns: int = int(os.getenv("AGENT_MAX_TURNS", "10"))
    schema: str = os.getenv("CALLSHEET_SCHEMA", "basic")
    # Optional YAML file defining a custom target schema; overrides ``schema``
    schema_file: str = os.getenv("CALLSHEET_SCHEMA_FILE", "")


@dataclass
class ToolConfig:
    """Configuration for tool endpoints."""
    google_maps_api_key: str = os.getenv(
        "GOOGLE_MAPS_API_KEY", os.getenv("VITE_GOOGLE_MAPS_API_KEY", "")
    )
    geocode_endpoint: str = os.getenv(
        "GEOCODE_ENDPOINT", "https://maps.googleapis.com/maps/api/geocode/json"
    )
    timeout: float = float(os.getenv("TOOL_TIMEOUT", "15"))
    parallel: bool = os.getenv("TOOL_PARALLEL", "false").lower() == "true"


@dataclass
class ServerConfig:
    """Configuration for the FastAPI server."""
    host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    port: int = int(os.getenv("SERVER_PORT", "8000"))
    workers: int = int(os.getenv("SERVER_WORKERS", "1"))
    reload: bool = os.getenv("SERVER_RELOAD", "false").lower() == "true"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = os.getenv("LANGFUSE_PUBLIC_KEY", "")
    secret_key: str = os.getenv("LANGFUSE_SECRET_KEY", "")
    host: str = os.getenv("LANGFUSE_HOST", "")
    debug: bool = os.getenv("LANGFUSE_DEBUG", "false").lower() == "true"

    @property
    def enabled(self) -> bool:
        """Auto-enable when both keys are configured."""
        return bool(self.public_key and self.secret_key)


@dataclass
class Config:
    """Main configuration container."""
    provider: ProviderConfig
    agent: AgentConfig
    tools: ToolConfig
    server: ServerConfig
    langfuse: LangfuseConfig
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def get_config() -> Config:
    """Get the application configuration."""
    return Config(
        provider=ProviderConfig(),
        agent=AgentConfig(),
        tools=ToolConfig(),
        server=ServerConfig(),
        langfuse=LangfuseConfig(),
    )


# Global config instance
config = get_config()
