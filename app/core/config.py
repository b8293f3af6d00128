from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SUPERVISOR_PASSWORD_LENGTH = 8


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "property-bookings"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Supabase configuration (required)
    supabase_url: str
    supabase_service_key: str
    bookings_table: str = "bookings"

    # Supervisor account
    supervisor_username: str = "supervisor"
    supervisor_password: str

    # JWT configuration
    jwt_secret: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12

    @model_validator(mode="after")
    def validate_settings(self):
        if not self.supabase_url or not self.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required. "
                "Get these from your Supabase project settings."
            )

        if not self.supabase_url.rstrip("/").endswith(".supabase.co"):
            raise ValueError(
                "SUPABASE_URL must be a valid Supabase project URL "
                "(e.g., https://<project>.supabase.co)"
            )

        if not self.supervisor_username.strip():
            raise ValueError("SUPERVISOR_USERNAME must not be blank.")

        if len(self.supervisor_password) < MIN_SUPERVISOR_PASSWORD_LENGTH:
            raise ValueError(
                f"SUPERVISOR_PASSWORD must be at least "
                f"{MIN_SUPERVISOR_PASSWORD_LENGTH} characters."
            )

        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
