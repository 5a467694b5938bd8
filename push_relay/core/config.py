from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


class Settings(BaseSettings):
    app_name: str = Field(default="FCM Push Relay", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_allow_origins: list[str] = Field(default=["*"], alias="CORS_ALLOW_ORIGINS")
    static_dir: Path = Field(default=STATIC_DIR, alias="STATIC_DIR")

    firebase_service_account_path: str | None = Field(
        default=None,
        alias="FIREBASE_SERVICE_ACCOUNT_PATH",
    )
    firebase_service_account: str | None = Field(default=None, alias="FIREBASE_SERVICE_ACCOUNT")
    firebase_project_id: str | None = Field(default=None, alias="FIREBASE_PROJECT_ID")
    firebase_private_key: str | None = Field(default=None, alias="FIREBASE_PRIVATE_KEY")
    firebase_client_email: str | None = Field(default=None, alias="FIREBASE_CLIENT_EMAIL")

    default_notification_title: str = Field(
        default="Test Notification",
        alias="DEFAULT_NOTIFICATION_TITLE",
    )
    default_notification_body: str = Field(
        default="This is a push message test.",
        alias="DEFAULT_NOTIFICATION_BODY",
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def has_individual_credentials(self) -> bool:
        return bool(
            self.firebase_project_id
            and self.firebase_private_key
            and self.firebase_client_email
        )


settings = Settings()
