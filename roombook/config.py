from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings as _BaseSettings
from pydantic_settings import SettingsConfigDict
from sqlalchemy import URL

from roombook.utils.time import TIME_PATTERN, to_minutes


class BaseSettings(_BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )


class PostgresConfig(BaseSettings, env_prefix="POSTGRES_"):
    """Database connection settings"""

    host: str = Field(
        ..., description="Host the database listens on", examples=["123.52.13.16"]
    )
    port: int = Field(..., description="Database port", examples=[5432])
    user: str = Field(..., description="Database user", examples=["roombook"])
    password: SecretStr = Field(
        ...,
        description="Database user password",
        examples=["123***********"],
    )
    db: str = Field(..., description="Database name", examples=["roombook"])
    dsn: str | None = Field(
        default=None,
        description="Full SQLAlchemy async URL, overrides the fields above",
    )

    def build_dsn(self) -> str:
        if self.dsn:
            return self.dsn
        return URL.create(
            drivername="postgresql+psycopg",
            username=self.user,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.db,
        ).render_as_string(hide_password=False)


class AuthConfig(BaseSettings, env_prefix="AUTH_"):
    """Authentication settings"""

    secret_key: SecretStr = Field(
        ...,
        description="JWT signing key",
        examples=["your-256-bit-secret-key-change-in-production"],
    )
    algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(
        default=30, description="Access token lifetime in minutes"
    )
    refresh_token_expire_days: int = Field(
        default=7, description="Refresh token lifetime in days"
    )

    cookie_secure: bool = Field(
        default=True,
        description="Send cookies over HTTPS only",
    )
    cookie_httponly: bool = Field(default=True, description="HttpOnly cookie flag")
    cookie_samesite: str = Field(default="none", description="SameSite cookie policy")
    cookie_domain: str | None = Field(default=None, description="Cookie domain")


class BookingConfig(BaseSettings, env_prefix="BOOKING_"):
    """Operating window and calendar settings"""

    opening_time: str = Field(
        default="08:00", pattern=TIME_PATTERN, description="First bookable minute"
    )
    closing_time: str = Field(
        default="18:00", pattern=TIME_PATTERN, description="End of the bookable day"
    )
    slot_minutes: int = Field(
        default=60, gt=0, description="Granularity of the slot grid in minutes"
    )
    timezone: str = Field(
        default="UTC", description="Canonical zone that booking days are pinned to"
    )

    @model_validator(mode="after")
    def check_window(self) -> "BookingConfig":
        if to_minutes(self.opening_time) >= to_minutes(self.closing_time):
            raise ValueError("opening_time must be before closing_time")
        return self


class LoggingConfig(BaseSettings, env_prefix="LOG_"):
    """Logging settings"""

    level: str = Field(default="INFO", description="Root log level")
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging.Formatter format string",
    )

    @field_validator("level")
    @classmethod
    def upper_level(cls, value: str) -> str:
        return value.upper()


class Config(BaseSettings):
    """
    Top level settings object
    """

    auth: AuthConfig = Field(default_factory=AuthConfig)
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    booking: BookingConfig = Field(default_factory=BookingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


settings = Config()
