"""
Configuration settings for the senseBox fleet API
"""

from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    """Application settings"""

    # Database
    db_host: str = "postgres"
    db_port: str = "5432"
    db_name: str = "sensebox_db"
    db_user: str = "sensebox_user"
    db_password: str = "sensebox_password"
    database_url: Optional[str] = None

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # Boxes
    default_box_status: str = "INACTIVE"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Build database_url from components unless given explicitly
        if not self.database_url:
            self.database_url = f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

# Global settings instance
settings = Settings()
