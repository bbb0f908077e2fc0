from pydantic_settings import BaseSettings

APP_NAME = "Hoarding Rental Management API"
APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./data/hoardings.sqlite3"
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 30
    host: str = "0.0.0.0"
    port: int = 5000
    upload_dir: str = "./uploads"
    max_upload_size_bytes: int = 5 * 1024 * 1024  # 5MB
    bcrypt_rounds: int = 12
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8080"]
    seed_on_startup: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
