import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv


#################
# Configuration
#################
@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, assembled once at startup"""
    secret_key: str = "your-secret-key-change-this"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    mongodb_url: str = "mongodb://localhost:27017"
    database_name: str = "blog"

    cloudinary_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    upload_folder: str = "uploads"

    allowed_origins: List[str] = field(default_factory=lambda: ["*"])

    log_level: str = "INFO"
    log_file: str = ""


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings() -> Settings:
    """Build Settings from the environment (and .env if present)"""
    load_dotenv()
    return Settings(
        secret_key=os.getenv("SECRET_KEY", Settings.secret_key),
        algorithm=os.getenv("ALGORITHM", Settings.algorithm),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
        mongodb_url=os.getenv("MONGO_URI", Settings.mongodb_url),
        database_name=os.getenv("DATABASE_NAME", Settings.database_name),
        cloudinary_name=os.getenv("CLOUDINARY_NAME", ""),
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY", ""),
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET", ""),
        upload_folder=os.getenv("UPLOAD_FOLDER", Settings.upload_folder),
        allowed_origins=_split_list(os.getenv("ALLOWED_ORIGINS", "*")),
        log_level=os.getenv("LOG_LEVEL", Settings.log_level).upper(),
        log_file=os.getenv("LOG_FILE", ""),
    )
