"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # MongoDB
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "requestdesk_dev"
    
    # AI classification service (any OpenAI-compatible chat completions endpoint)
    ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    ai_api_key: str = ""
    ai_fallback_models: str = "gemini-1.5-flash,gemini-1.5-pro,gemini-pro"
    ai_timeout_seconds: float = 10.0
    ai_temperature: float = 0.2
    ai_max_tokens: int = 600
    
    # Triage & review policy
    escalation_hours: int = 24
    fallback_confidence: float = 70.0
    
    # Requester directory cache
    directory_cache_ttl_seconds: int = 300
    
    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"
    
    # CORS - set to "*" to allow all origins (simpler for internal/VM deployment)
    cors_origins: str = "*"
    
    # Environment
    environment: str = "development"
    debug: bool = True
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]
    
    @property
    def ai_fallback_models_list(self) -> List[str]:
        """Parse fallback model list, in preference order"""
        return [m.strip() for m in self.ai_fallback_models.split(",") if m.strip()]
    
    @property
    def ai_enabled(self) -> bool:
        """AI triage is attempted only when a key is configured"""
        return bool(self.ai_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
