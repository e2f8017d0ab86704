# canvasbridge/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Manages the application's settings, loading from environment variables
    and .env files.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    # Application settings
    LOG_LEVEL: str = "INFO"

    # Renderer websocket (outbound transport)
    RENDERER_HOST: str = "localhost"
    RENDERER_PORT: int = 3333

    # HTTP command API (inbound transport)
    API_HOST: str = "localhost"
    API_PORT: int = 3334

    # Bridge behavior
    REQUEST_TIMEOUT: float = 10.0
    FAIL_PENDING_ON_DISCONNECT: bool = False

    # Serve the MCP tools over stdin/stdout alongside the HTTP API
    MCP_STDIO: bool = False

    # Headless renderer
    RENDERER_URL: str = "ws://localhost:3333"
    RECONNECT_DELAY: float = 2.0


# Create a single, globally accessible instance of the settings.
settings = Settings()
