from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SUPABASE_URL: str = ""
    # Public anon key, safe to ship to clients
    SUPABASE_KEY: str = ""
    # Server-only key for admin operations such as listing users
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")
    SUPABASE_JWT_SECRET: str = ""
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # Role resolution
    ROLE_RESOLUTION_MAX_ATTEMPTS: int = 3
    ROLE_RESOLUTION_RETRY_DELAY_SECONDS: float = 0.7

    @property
    def has_service_role(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value())
