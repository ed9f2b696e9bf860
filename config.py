from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DB_FILE: str = "./data.db"
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.DB_FILE}"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
