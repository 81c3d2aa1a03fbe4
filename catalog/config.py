from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # 🎯 Application
    APP_NAME: str = "Catalog API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    SECRET_KEY: str  # ⚠️ Required, must come from env
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # 🌐 Server
    HOST: str = '0.0.0.0'
    PORT: int = 5000

    # 🗄️ Database
    DATABASE_URL: str  # ⚠️ Required, must come from env
    DB_ECHO: bool = False

    # 🔒 CORS
    ALLOWED_ORIGINS: str = "*"

    # 📦 Image storage: 'local' (PHOTOS_DIR) or 'r2'
    STORAGE_TYPE: str = 'local'
    PHOTOS_DIR: str = 'photos'
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB

    # ☁️ Cloudflare R2 Configuration
    R2_ACCOUNT_ID: Optional[str] = None
    R2_ACCESS_KEY_ID: Optional[str] = None
    R2_SECRET_ACCESS_KEY: Optional[str] = None
    R2_BUCKET_NAME: Optional[str] = "catalog-media"
    R2_PUBLIC_URL: Optional[str] = None
    R2_ENDPOINT: Optional[str] = None

    # 📊 Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = 'ignore'
        frozen = True

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',')]

    @property
    def r2_endpoint_url(self) -> Optional[str]:
        """Construct R2 endpoint URL from account ID"""
        if self.R2_ACCOUNT_ID:
            return f"https://{self.R2_ACCOUNT_ID}.r2.cloudflarestorage.com"
        return self.R2_ENDPOINT

    @property
    def is_r2_enabled(self) -> bool:
        """Check if Cloudflare R2 is enabled"""
        return bool(
            (self.R2_ACCOUNT_ID or self.R2_ENDPOINT)
            and self.R2_ACCESS_KEY_ID
            and self.R2_SECRET_ACCESS_KEY
            and self.R2_BUCKET_NAME
            and self.R2_PUBLIC_URL
        )

settings = Settings()


def get_settings() -> Settings:
    """Settings dependency; the snapshot is built once at import and never mutated."""
    return settings
