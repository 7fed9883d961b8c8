import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings, loaded from environment variables and .env file.

    Required env vars for production:
        GEMINI_API_KEY      - Google Gemini API key (also read directly by litellm)
        FIRECRAWL_API_KEY   - Firecrawl key for LinkedIn profile scraping
        ELEVENLABS_API_KEY  - ElevenLabs key for speech synthesis
        CORS_ORIGINS        - Comma-separated allowed origins (the web front end)
    """

    model_config = {"env_file": ".env", "extra": "ignore"}

    # LLM provider (litellm format)
    default_llm_model: str = "gemini/gemini-2.5-flash"
    gemini_api_key: str = ""

    # Profile scraping
    firecrawl_api_key: str = ""
    firecrawl_base_url: str = "https://api.firecrawl.dev"
    scrape_timeout_seconds: float = 60.0

    # Speech synthesis
    elevenlabs_api_key: str = ""
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"  # Rachel
    elevenlabs_model_id: str = "eleven_turbo_v2_5"
    elevenlabs_output_format: str = "mp3_44100_128"

    # Environment (development | staging | production)
    environment: str = "development"

    # Langfuse observability
    langfuse_enabled: bool = False
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_host: str = "https://us.cloud.langfuse.com"

    # Server
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"  # comma-separated origins
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def missing_api_keys(self) -> list[str]:
        """Names of external-service keys that are not configured."""
        keys = {
            "GEMINI_API_KEY": self.gemini_api_key,
            "FIRECRAWL_API_KEY": self.firecrawl_api_key,
            "ELEVENLABS_API_KEY": self.elevenlabs_api_key,
        }
        return [name for name, value in keys.items() if not value]


settings = Settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# Warn about missing config outside development
if not settings.is_development:
    for _key in settings.missing_api_keys():
        logger.warning("%s is not set; the matching pipeline stage will fail", _key)
