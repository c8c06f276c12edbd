from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Trello
    TRELLO_API_KEY: str = ""
    TRELLO_TOKEN: str = ""
    TRELLO_API_URL: str = "https://api.trello.com/1"
    TRELLO_TIMEOUT: float = 30.0

    # Output
    OUTPUT_DIR: str = "."

    # HTTP API
    ALLOWED_ORIGINS: str = "*"
    SLOW_REQUEST_MS: float = 10000.0

    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
