"""
Core Configuration - Environment variables and app settings
Uses Pydantic BaseSettings for type-safe configuration management
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator
from typing import Dict, List, Optional


# Minimum connection time per airport (hours)
DEFAULT_CONNECTION_BUFFERS: Dict[str, float] = {
    "SAN": 2, "TIJ": 2, "BCN": 2, "ORY": 2, "KUL": 2,
    "SCL": 0.5, "PUQ": 1.5, "PTY": 2, "LIS": 2, "SFO": 2,
    "MIA": 2, "JFK": 2, "LAX": 2, "YYZ": 2.8, "DFW": 1.7,
    "MAD": 2, "LHR": 2.1, "CDG": 1.8, "FRA": 2.5, "AMS": 2.0,
    "CMN": 2, "JNB": 2.7, "LOS": 1.9, "CAI": 2, "ADD": 1.5,
    "DOH": 1.5, "DXB": 2, "DEL": 1.6, "SIN": 2.3, "HND": 2.0,
    "PER": 2, "SYD": 2.8, "MEL": 1.9, "BNE": 2.5, "ADL": 1.7,
}

# South America, North America, Europe, Africa, Asia, Australia
DEFAULT_REGIONS: List[List[str]] = [
    ["SCL"],
    ["MIA", "PTY", "LAX", "SFO", "SAN", "TIJ"],
    ["MAD", "LIS", "BCN", "ORY"],
    ["CMN", "CAI"],
    ["DOH", "DXB", "KUL"],
    ["PER"],
]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables

    Dict/list settings (connection_buffers, regions) are read as JSON from the environment
    """

    # Application settings
    app_name: str = Field(default="Itinerary Planner", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=5000, description="HTTP listening port")

    # Amadeus Flight Offers Search
    amadeus_client_id: str = Field(..., description="Amadeus OAuth client ID")
    amadeus_client_secret: str = Field(..., description="Amadeus OAuth client secret")
    amadeus_base_url: str = Field(default="https://test.api.amadeus.com", description="Amadeus API base URL")
    amadeus_currency: str = Field(default="USD", description="Currency requested for offer prices")
    amadeus_max_offers: int = Field(default=100, ge=1, le=250, description="Maximum offers per query")

    # API Configuration
    api_timeout: int = Field(default=30, ge=1, description="Flight search request timeout in seconds")

    # Email delivery
    email_address: Optional[str] = Field(default=None, description="Sender account for itinerary emails")
    email_password: Optional[str] = Field(default=None, description="Sender account password")
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP server host")
    smtp_port: int = Field(default=465, description="SMTP SSL port")

    # Itinerary search
    connection_buffers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_CONNECTION_BUFFERS),
        description="Minimum connection time in hours, keyed by IATA code"
    )
    default_connection_buffer_hours: float = Field(
        default=2.0,
        ge=0.0,
        description="Connection buffer for airports missing from connection_buffers"
    )
    extra_travel_time_hours: float = Field(
        default=2.5,
        ge=0.0,
        description="Padding added to every itinerary's total travel time"
    )
    regions: List[List[str]] = Field(
        default_factory=lambda: [list(region) for region in DEFAULT_REGIONS],
        description="Candidate destinations per region, in travel order"
    )
    max_workers: int = Field(default=8, ge=1, le=64, description="Concurrent sequence simulations")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    # CORS Settings (for frontend integration)
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5000"],
        description="Allowed CORS origins"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value"""
        allowed = ["development", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("connection_buffers")
    @classmethod
    def validate_connection_buffers(cls, v):
        """Normalize IATA keys and reject negative buffers"""
        normalized = {}
        for code, hours in v.items():
            if hours < 0:
                raise ValueError(f"connection buffer for {code} must be >= 0, got {hours}")
            normalized[code.strip().upper()] = float(hours)
        return normalized

    @field_validator("regions")
    @classmethod
    def validate_regions(cls, v):
        """Every region needs at least one destination and no code may appear twice"""
        if not v:
            raise ValueError("regions must contain at least one region")

        seen = set()
        normalized = []
        for index, region in enumerate(v):
            if not region:
                raise ValueError(f"region {index} has no destinations")
            codes = [code.strip().upper() for code in region]
            for code in codes:
                if code in seen:
                    raise ValueError(f"destination {code} appears in more than one region")
                seen.add(code)
            normalized.append(codes)
        return normalized

    @model_validator(mode="after")
    def validate_email_credentials(self):
        """Sender address and password must be configured together"""
        if bool(self.email_address) != bool(self.email_password):
            raise ValueError("email_address and email_password must be set together")
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == "development"

    def email_enabled(self) -> bool:
        return bool(self.email_address and self.email_password)

    def get_log_config(self) -> dict:
        """Get logging configuration"""
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": self.log_format
                },
                "json": {
                    "()": "pythonjsonlogger.json.JsonFormatter",
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": self.log_level,
                    "formatter": "json" if self.is_production() else "default",
                    "stream": "ext://sys.stdout"
                }
            },
            "loggers": {
                "urllib3": {"level": "WARNING"}
            },
            "root": {
                "level": self.log_level,
                "handlers": ["console"]
            }
        }


# Singleton settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton)

    Returns:
        Settings instance

    Raises:
        ValueError: If required environment variables are missing
    """
    global _settings

    if _settings is None:
        try:
            _settings = Settings()
        except Exception as e:
            # Provide helpful error message
            raise ValueError(
                f"Failed to load settings. Please check your .env file. Error: {str(e)}"
            )

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing)

    Returns:
        New Settings instance
    """
    global _settings
    _settings = None
    return get_settings()
