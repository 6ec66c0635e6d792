"""
Startup Validation Module

Checks configuration before the app serves requests:
1. Required settings - fail fast in production when they are missing
2. Session secret strength
3. Database connectivity
4. Optional features (Google sign-in) - reported as degraded, never fatal
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    name: str
    passed: bool
    message: str
    severity: str = "error"  # error, warning, info
    remediation: Optional[str] = None


@dataclass
class StartupReport:
    """Startup validation report."""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    environment: str = "unknown"
    validations: List[ValidationResult] = field(default_factory=list)
    features_loaded: List[str] = field(default_factory=list)
    features_degraded: List[str] = field(default_factory=list)
    ready: bool = False

    def add_validation(self, result: ValidationResult):
        self.validations.append(result)

    def add_feature_loaded(self, name: str):
        self.features_loaded.append(name)

    def add_feature_degraded(self, name: str, reason: str):
        self.features_degraded.append(f"{name}: {reason}")

    def has_critical_failures(self) -> bool:
        return any(v.severity == "error" and not v.passed for v in self.validations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "environment": self.environment,
            "ready": self.ready,
            "validations": [
                {
                    "name": v.name,
                    "passed": v.passed,
                    "message": v.message,
                    "severity": v.severity,
                    "remediation": v.remediation
                }
                for v in self.validations
            ],
            "features": {
                "loaded": self.features_loaded,
                "degraded": self.features_degraded
            },
            "summary": {
                "total_validations": len(self.validations),
                "passed": sum(1 for v in self.validations if v.passed),
                "failed": sum(1 for v in self.validations if not v.passed),
            }
        }


class StartupValidator:
    """
    Validates an application's configuration.

    Args:
        config: the Flask app config (or any mapping with the same keys)
        environ: environment used to tell explicit settings from defaults
    """

    REQUIRED_ENV_VARS = [
        ("SESSION_SECRET", "Signs the session cookie - CRITICAL for security"),
        ("DATABASE_URL", "Database connection string"),
    ]

    MIN_SECRET_LENGTH = 32

    def __init__(self, config: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None):
        self.config = config
        self.environ = os.environ if environ is None else environ
        self.report = StartupReport(environment=config.get("ENV_NAME", "development"))

    def is_production(self) -> bool:
        return self.report.environment == "production"

    def validate_required_env_vars(self) -> None:
        """Check required variables were set explicitly rather than defaulted."""
        for var_name, description in self.REQUIRED_ENV_VARS:
            if self.environ.get(var_name):
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=True,
                    message=f"{var_name} is configured",
                ))
            else:
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=not self.is_production(),
                    message=f"Missing required: {var_name}",
                    severity="error" if self.is_production() else "warning",
                    remediation=f"Set {var_name} environment variable. {description}"
                ))

    def validate_secret_key_strength(self) -> None:
        """Validate session secret key meets length requirements."""
        secret = self.config.get("SECRET_KEY") or ""
        if len(secret) < self.MIN_SECRET_LENGTH:
            self.report.add_validation(ValidationResult(
                name="security:session_secret",
                passed=not self.is_production(),
                message=f"SESSION_SECRET too short ({len(secret)} chars, need {self.MIN_SECRET_LENGTH}+)",
                severity="error" if self.is_production() else "warning",
                remediation="Generate one with: python -c 'import secrets; print(secrets.token_hex(32))'"
            ))
        else:
            self.report.add_validation(ValidationResult(
                name="security:session_secret",
                passed=True,
                message="SESSION_SECRET meets length requirements",
            ))

    def validate_database_connection(self, engine=None) -> None:
        """Run `SELECT 1` against the configured database."""
        if engine is None:
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=True,
                message="Database connectivity not checked",
                severity="info"
            ))
            return

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=True,
                message="Database connection successful",
            ))
        except Exception as e:
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=False,
                message=f"Database connection failed: {str(e)[:100]}",
                severity="error",
                remediation="Check DATABASE_URL and ensure the database is reachable"
            ))

    def validate_google_oauth(self) -> None:
        """Google sign-in is the only login path; without it nobody can log in."""
        if self.config.get("GOOGLE_OAUTH_CLIENT_ID") and self.config.get("GOOGLE_OAUTH_CLIENT_SECRET"):
            self.report.add_feature_loaded("google_oauth")
            self.report.add_validation(ValidationResult(
                name="oauth:google",
                passed=True,
                message="Google OAuth credentials configured",
                severity="warning"
            ))
        else:
            self.report.add_feature_degraded("google_oauth", "credentials missing")
            self.report.add_validation(ValidationResult(
                name="oauth:google",
                passed=True,  # Pass but warn
                message="Google OAuth not configured - sign-in is disabled",
                severity="warning",
                remediation="Set GOOGLE_OAUTH_CLIENT_ID and GOOGLE_OAUTH_CLIENT_SECRET"
            ))

    def run_all_validations(self, engine=None) -> StartupReport:
        """Run all validation checks and return the report."""
        logger.info(f"Startup validation (environment: {self.report.environment})")

        self.validate_required_env_vars()
        self.validate_secret_key_strength()
        self.validate_database_connection(engine)
        self.validate_google_oauth()

        self.report.ready = not self.report.has_critical_failures()

        summary = self.report.to_dict()["summary"]
        logger.info(f"Validations: {summary['passed']}/{summary['total_validations']} passed")

        for v in self.report.validations:
            if not v.passed and v.severity == "error":
                logger.error(f"  - {v.name}: {v.message}")
                if v.remediation:
                    logger.error(f"    Fix: {v.remediation}")
            elif v.severity == "warning" and v.remediation:
                logger.warning(f"  - {v.name}: {v.message}")

        return self.report

    def fail_if_not_ready(self) -> None:
        """
        Fail fast if critical validations fail in production.

        In development, log warnings but continue.
        """
        if not self.report.ready:
            if self.is_production():
                logger.critical("Application cannot start - critical configuration missing")
                sys.exit(1)
            else:
                logger.warning("Continuing despite validation failures")


def run_startup_validation(app, engine=None) -> StartupReport:
    """Validate `app`'s configuration; exits the process on fatal production failures."""
    validator = StartupValidator(app.config)
    report = validator.run_all_validations(engine)
    validator.fail_if_not_ready()
    return report
