from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for seeding and admin-only writes
    storage_bucket: str = "service-images"

    # AWS S3 for service images (optional, Supabase Storage is used otherwise)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Catalog
    popular_services_limit: int = 8
    popular_cache_path: str = ".cache/popular_services.json"
    search_debounce_ms: int = 300
    related_services_limit: int = 4

    # Admin signup gate
    admin_signup_code: str = ""

    # App
    app_name: str = "SubBill"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:8000,http://127.0.0.1:3000,http://127.0.0.1:8000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    session_cookie_name: str = "subbill_session"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
