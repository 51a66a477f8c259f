"""
Pydantic-based configuration models for the DirectChat relay.

Server settings are read from ``DIRECTCHAT_*`` environment variables (or a
``.env`` file); logging settings from ``LOGGING_*``.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PASSWORD = "changeme"


class RelayServerConfig(BaseSettings):
    """Relay server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=36679, description="Server port")
    password: str = Field(default=DEFAULT_PASSWORD, description="Shared secret players authenticate with")
    require_https: bool = Field(default=False, description="Advisory flag; transport security is the deployer's job")
    captcha_provider: str = Field(default="none", description="Captcha provider name")
    message_history_size: int = Field(default=100, description="Number of messages kept for catch-up fetches")
    token_expiry: int = Field(default=3600, description="Token lifetime in seconds (<= 0 never expires)")
    max_message_length: int = Field(default=256, description="Messages longer than this are truncated")
    debug: bool = Field(default=False, description="Enable debug logging")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            logger.error("Invalid server port", port=v, valid_range="1-65535")
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("captcha_provider")
    @classmethod
    def validate_captcha_provider(cls, v: str) -> str:
        """Normalize the captcha provider name and check it is registered."""
        from ..server.auth.captcha import registered_captcha_providers

        v_lower = v.strip().lower()
        known = registered_captcha_providers()
        if v_lower not in known:
            raise ValueError(f"Captcha provider must be one of {list(known)}, got '{v}'")
        return v_lower

    @field_validator("message_history_size", "max_message_length")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate sizes are positive."""
        if v < 1:
            raise ValueError("Size values must be at least 1")
        return v

    @property
    def uses_default_password(self) -> bool:
        return self.password == DEFAULT_PASSWORD

    model_config = {"env_prefix": "DIRECTCHAT_", "case_sensitive": False, "extra": "ignore"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="human", description="Log format")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "human"]
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}, got '{v}'")
        return v

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Access via the get_config() function.
    """

    relay: RelayServerConfig = Field(default_factory=RelayServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}

    @property
    def effective_log_level(self) -> str:
        """DEBUG when the relay debug flag is on, otherwise the configured level."""
        return "DEBUG" if self.relay.debug else self.logging.level
