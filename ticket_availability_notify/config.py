"""Configuration settings using Pydantic with environment variables."""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
VALID_CHANNELS = {'whatsapp', 'sms', 'email', 'ntfy'}
VALID_CLASSIFIERS = {'booking-link', 'text-marker'}


class Settings(BaseSettings):
    """Application settings with environment variable loading and validation."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore',
    )

    # Store and schedule
    STORE_PATH: str = Field(
        "concerts.json",
        description="JSON file holding the monitored items"
    )
    CHECK_CRON: str = Field(
        "0 * * * *",
        description="Cron expression for the standard check"
    )
    PRIORITY_INTERVAL_MIN: int = Field(
        15,
        description="Minutes between checks of items happening soon"
    )
    PRIORITY_WINDOW_DAYS: int = Field(
        3,
        description="Items dated within this many days get the priority check"
    )
    LOG_LEVEL: str = Field(
        "INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Probing
    REQUEST_TIMEOUT: float = Field(
        30.0,
        description="HTTP timeout in seconds for page requests"
    )
    USER_AGENT: Optional[str] = Field(
        None,
        description="User agent sent with page requests"
    )
    CLASSIFIER: str = Field(
        "booking-link",
        description="Page classifier (booking-link or text-marker)"
    )
    BOOKING_PATH: str = Field(
        "/book",
        description="Link fragment identifying booking links"
    )

    # Notifications
    NOTIFY_CHANNEL: str = Field(
        "whatsapp",
        description="Notification channel (whatsapp, sms, email, ntfy)"
    )
    NOTIFY_TO: Optional[str] = Field(None, description="Recipient number or address")
    NOTIFY_FROM: Optional[str] = Field(None, description="Sender number or address")
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    NTFY_TOPIC: Optional[str] = None

    @field_validator('CHECK_CRON')
    @classmethod
    def validate_check_cron(cls, v):
        """Validate the cron expression has five fields."""
        if len(v.split()) != 5:
            raise ValueError('CHECK_CRON must be a five-field cron expression (e.g., "0 * * * *")')
        return v

    @field_validator('PRIORITY_INTERVAL_MIN', 'PRIORITY_WINDOW_DAYS', 'REQUEST_TIMEOUT')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError('must be greater than zero')
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Validate LOG_LEVEL is a valid logging level."""
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS}')
        return v.upper()

    @field_validator('NOTIFY_CHANNEL')
    @classmethod
    def validate_channel(cls, v):
        if v.lower() not in VALID_CHANNELS:
            raise ValueError(f'NOTIFY_CHANNEL must be one of {VALID_CHANNELS}')
        return v.lower()

    @field_validator('CLASSIFIER')
    @classmethod
    def validate_classifier(cls, v):
        if v.lower() not in VALID_CLASSIFIERS:
            raise ValueError(f'CLASSIFIER must be one of {VALID_CLASSIFIERS}')
        return v.lower()
