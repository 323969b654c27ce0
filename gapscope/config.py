"""
Configuration settings for the gapscope backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ollama Configuration (narrative summaries)
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_LLM_MODEL: str = "qwen2.5:3b"

    # Groq Configuration (used instead of Ollama when GROQ_API is set)
    GROQ_API: Optional[str] = None
    GROQ_MODEL: str = "llama-3.1-8b-instant"

    # Narrative Summary Configuration
    NARRATIVE_TIMEOUT: float = 10.0  # seconds; the summary falls back after this
    NARRATIVE_MAX_TOKENS: int = 600
    SUMMARY_WORD_LIMIT: int = 300
    SUMMARY_TOP_GAPS: int = 5  # findings embedded in the narrative prompt

    # Gap Analysis Configuration
    MAX_GAPS: int = 20
    RUN_DETECTORS_CONCURRENTLY: bool = True

    # Corpus Configuration
    CORPUS_PATH: Optional[str] = None  # JSON file served by GET /api/gaps

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
