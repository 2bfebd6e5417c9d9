from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

ROOT_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = True
    cors_origins: Annotated[List[str], NoDecode] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = "INFO"

    storage_backend: Literal["json", "dynamodb"] = "json"
    data_dir: Path = ROOT_DIR / "data"

    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    dynamodb_meetings_table: str = "pitch-meetings"
    dynamodb_users_table: str = "pitch-users"
    dynamodb_users_email_index: str = "email-index"
    dynamodb_endpoint_url: str | None = None

    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_ttl_seconds: int = 60 * 60 * 24

    meeting_link_base: str = "https://meet.google.com"
    virtual_pitch_path: str = "/virtual-pitch"

    @field_validator("data_dir")
    @classmethod
    def anchor_data_dir(cls, value: Path) -> Path:
        return value if value.is_absolute() else ROOT_DIR / value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            items = [item.strip() for item in value.split(",") if item.strip()]
            default_value = cls.model_fields["cors_origins"].default  # type: ignore[index]
            return items or default_value
        return value

    class Config:
        env_file = str(ROOT_DIR / ".env")
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
