from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    log_level: str = "WARNING"

    # REPL
    prompt: str = "> "
    result_prefix: str = "  "

    model_config = SettingsConfigDict(env_prefix="TCALC_", env_file=".env", extra="ignore")
