"""
Configuration settings for the Uwazi eligibility proof service
"""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # MongoDB Configuration (ledger persistence)
    use_mongodb: bool = Field(default=False, env="USE_MONGODB")
    mongodb_url: str = Field(default="mongodb://localhost:27017", env="MONGODB_URL")
    mongodb_db_name: str = Field(default="uwazi_db", env="MONGODB_DB_NAME")

    # OpenRouter API Configuration
    openrouter_api_key: str = Field(default="", env="OPENROUTER_API_KEY")
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        env="OPENROUTER_BASE_URL"
    )
    openrouter_model: str = Field(
        default="google/gemini-2.5-flash",
        env="OPENROUTER_MODEL"
    )
    llm_timeout_seconds: float = Field(default=60.0, env="LLM_TIMEOUT_SECONDS")

    # Application Configuration
    app_name: str = Field(default="Uwazi Proofs", env="APP_NAME")
    app_version: str = Field(default="1.0.0", env="APP_VERSION")
    debug: bool = Field(default=False, env="DEBUG")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Proof ledger
    ledger_key: str = Field(default="uwazi-proofs", env="LEDGER_KEY")
    ledger_capacity: int = Field(default=10, ge=1, env="LEDGER_CAPACITY")

    # File Upload Configuration
    max_file_size: int = Field(default=10485760, env="MAX_FILE_SIZE")  # 10MB
    allowed_extensions: str = Field(default="pdf,jpg,jpeg,png", env="ALLOWED_EXTENSIONS")

    # API Configuration
    api_prefix: str = Field(default="/api/v1", env="API_PREFIX")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        env="CORS_ORIGINS"
    )

    def get_allowed_extensions_list(self) -> List[str]:
        """Get allowed extensions as a list of dotted suffixes"""
        return [
            f".{ext.strip().lstrip('.').lower()}"
            for ext in self.allowed_extensions.split(',')
            if ext.strip()
        ]

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        if ',' in self.cors_origins:
            return [origin.strip() for origin in self.cors_origins.split(',')]
        return [self.cors_origins.strip()]

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create global settings instance
settings = Settings()
