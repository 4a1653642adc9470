from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    sql_echo: bool = False
    log_level: str = "INFO"

    # Редактирование эссе
    autosave_interval_seconds: float = 3.0
    words_per_minute: int = 200
    privileged_roles: list[str] = ["admin", "editor"]
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
