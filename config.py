"""
Mirathi - Configuration

Centralized configuration for the family domain core.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_set(name: str, default: str = "") -> FrozenSet[str]:
    raw = os.getenv(name, default)
    return frozenset(part.strip().upper() for part in raw.split(",") if part.strip())


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    json_format: bool = field(default_factory=lambda: _env_bool("LOG_JSON", "false"))
    log_trace_context: bool = field(default_factory=lambda: _env_bool("LOG_TRACE_CONTEXT", "true"))


@dataclass
class ObservabilityConfig:
    """
    OpenTelemetry tracing configuration.

    Exporting is console-only; an OTLP exporter can be added by the
    hosting service when it installs its own tracer provider.
    """
    service_name: str = field(
        default_factory=lambda: os.getenv("OTEL_SERVICE_NAME", "mirathi-family-core")
    )
    service_version: str = field(
        default_factory=lambda: os.getenv("OTEL_SERVICE_VERSION", "1.0.0")
    )
    tracing_enabled: bool = field(
        default_factory=lambda: _env_bool("OTEL_TRACING_ENABLED", "true")
    )
    trace_console_export: bool = field(
        default_factory=lambda: _env_bool("OTEL_TRACE_CONSOLE", "false")
    )
    environment: str = field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "development")
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "service_name": self.service_name,
            "service_version": self.service_version,
            "tracing_enabled": self.tracing_enabled,
            "environment": self.environment,
        }


@dataclass
class StatutoryConfig:
    """
    Thresholds taken from the Law of Succession Act (Cap 160) and the
    Children Act 2022.

    Changing these changes legal outcomes; override only for testing or
    after a statutory amendment.
    """
    # Age bands
    age_of_majority: int = field(default_factory=lambda: int(os.getenv("AGE_OF_MAJORITY", "18")))
    student_age_max: int = field(default_factory=lambda: int(os.getenv("STUDENT_AGE_MAX", "25")))
    elderly_age: int = field(default_factory=lambda: int(os.getenv("ELDERLY_AGE", "65")))
    max_human_age: int = field(default_factory=lambda: int(os.getenv("MAX_HUMAN_AGE", "130")))

    # Presumption of death (Evidence Act S.118A)
    presumption_of_death_years: int = field(
        default_factory=lambda: int(os.getenv("PRESUMPTION_OF_DEATH_YEARS", "7"))
    )

    # Adoption (Children Act 2022)
    adoption_min_age: int = field(default_factory=lambda: int(os.getenv("ADOPTION_MIN_AGE", "25")))
    adoption_max_age: int = field(default_factory=lambda: int(os.getenv("ADOPTION_MAX_AGE", "65")))
    adoption_min_age_gap: int = field(default_factory=lambda: int(os.getenv("ADOPTION_MIN_AGE_GAP", "21")))

    # Guardianship
    guardian_min_age: int = field(default_factory=lambda: int(os.getenv("GUARDIAN_MIN_AGE", "18")))
    guardian_max_age: int = field(default_factory=lambda: int(os.getenv("GUARDIAN_MAX_AGE", "70")))
    guardian_min_age_gap: int = field(default_factory=lambda: int(os.getenv("GUARDIAN_MIN_AGE_GAP", "18")))

    # Cohabitation (S.3(5) / S.29(5))
    cohabitation_min_years: int = field(
        default_factory=lambda: int(os.getenv("COHABITATION_MIN_YEARS", "5"))
    )
    cohabitation_min_evidence_score: int = field(
        default_factory=lambda: int(os.getenv("COHABITATION_MIN_EVIDENCE_SCORE", "50"))
    )

    # Polygamous houses (S.40); empty disables the gender rule
    house_head_genders: FrozenSet[str] = field(
        default_factory=lambda: _env_set("HOUSE_HEAD_GENDERS", "FEMALE")
    )


@dataclass
class DataQualityConfig:
    """
    Boundary between advisory data-quality anomalies and hard errors.

    ``escalate`` lists anomaly codes (see ``domain.value_objects.base.DataQualityIssue``)
    that must fail construction instead of being recorded as advisories.
    """
    escalate: FrozenSet[str] = field(default_factory=lambda: _env_set("DATA_QUALITY_ESCALATE"))
    low_accuracy_meters: float = field(
        default_factory=lambda: float(os.getenv("GPS_LOW_ACCURACY_METERS", "100"))
    )
    late_registration_days: int = field(
        default_factory=lambda: int(os.getenv("LATE_REGISTRATION_DAYS", "183"))
    )
    preferred_email_domains: FrozenSet[str] = field(
        default_factory=lambda: frozenset(
            d.strip().lower()
            for d in os.getenv(
                "PREFERRED_EMAIL_DOMAINS",
                "gmail.com,yahoo.com,outlook.com,hotmail.com,ke,go.ke,ac.ke,co.ke",
            ).split(",")
            if d.strip()
        )
    )

    def is_escalated(self, code: str) -> bool:
        return code.upper() in self.escalate


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(default_factory=lambda: Environment(os.getenv("ENVIRONMENT", "development")))
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", "false"))

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    statutory: StatutoryConfig = field(default_factory=StatutoryConfig)
    data_quality: DataQualityConfig = field(default_factory=DataQualityConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "env": self.env.value,
            "debug": self.debug,
            "observability": self.observability.to_dict(),
            "statutory": {
                "age_of_majority": self.statutory.age_of_majority,
                "adoption_min_age": self.statutory.adoption_min_age,
                "adoption_max_age": self.statutory.adoption_max_age,
                "house_head_genders": sorted(self.statutory.house_head_genders),
            },
            "data_quality": {
                "escalate": sorted(self.data_quality.escalate),
            },
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config


def set_config(config: Config) -> Config:
    """Install an explicit configuration (used by tests and embedding services)."""
    global _config
    _config = config
    return _config
