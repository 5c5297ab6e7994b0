from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Plugin Host"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["*"]

    # Plugin loading
    backend_base_url: str | None = None
    active_plugins_path: str = "/plugins/active"
    local_plugins: list[str] = []
    request_timeout_seconds: float = 10.0
    strict_components: bool = False

    # Slot rendering
    slot_container_tag: str = "div"

    # i18n settings
    default_locale: str = "en"
    supported_languages: list[str] = ["en", "fr", "de", "es", "zh", "ja"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_prefix="PLUGIN_HOST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
