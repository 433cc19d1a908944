"""
Configuration management for the Flowchart Graph API
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Storage Backend
    store_backend: str = Field(default="memory", description="memory or neo4j")

    # Neo4j
    neo4j_uri: Optional[str] = Field(default=None)
    neo4j_user: Optional[str] = Field(default="neo4j")
    neo4j_password: Optional[str] = Field(default=None)

    # Server
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    debug: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    cors_origins: List[str] = Field(default=["*"])

    # Data Paths (empty string disables the memory backend cache)
    flowchart_cache_path: str = Field(default="data/flowcharts.pkl")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


STORE_BACKENDS = ["memory", "neo4j"]
