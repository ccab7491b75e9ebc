"""
Configuration validation for the Brytashop API.

These checks run at startup so that misconfiguration shows up in the logs
before the first customer hits it.
"""

from __future__ import annotations

from typing import Any

from .config import settings
from .database.connection import check_database_connection
from .logging import get_logger
from .payments import get_paystack_provider, get_stripe_provider

logger = get_logger(__name__)

PRODUCTION_ENVIRONMENTS = ("production", "prod")


class ValidationError(Exception):
    """Raised when application validation fails."""

    pass


def _is_production() -> bool:
    return settings.environment.lower() in PRODUCTION_ENVIRONMENTS


def _new_results(**extra: Any) -> dict[str, Any]:
    return {"valid": True, "warnings": [], "errors": [], **extra}


async def validate_database_connection() -> dict[str, Any]:
    """Validate that the database is accessible and responsive."""
    results = _new_results(connection_info=None)

    success, error_message = await check_database_connection()

    if success:
        results["connection_info"] = {
            "status": "connected",
            "message": "Database connection successful",
        }
        logger.info("Database connection validation successful")
    else:
        results["valid"] = False
        results["errors"].append(error_message)
        logger.error("Database connection validation failed", error=error_message)

    return results


def validate_auth_configuration() -> dict[str, Any]:
    """Validate the session secret and cookie settings."""
    results = _new_results()

    if not settings.app_secret:
        results["valid"] = False
        results["errors"].append(
            "BRYTASHOP_APP_SECRET is not configured; users cannot sign in"
        )
    elif len(settings.app_secret) < 32:
        results["warnings"].append("BRYTASHOP_APP_SECRET is shorter than 32 characters")

    if _is_production() and not settings.session_cookie_secure:
        results["warnings"].append(
            "Session cookie is not marked Secure in production"
        )

    return results


def validate_payment_configuration() -> dict[str, Any]:
    """Check that at least one payment provider can take money."""
    stripe_provider = get_stripe_provider()
    paystack_provider = get_paystack_provider()

    results = _new_results(
        payment_info={
            "stripe": stripe_provider.configured,
            "paystack": paystack_provider.configured,
            "currency": settings.currency,
        }
    )

    if not stripe_provider.configured:
        results["warnings"].append("Stripe secret key not configured; createOrder is disabled")
    if not paystack_provider.configured:
        results["warnings"].append(
            "Paystack secret key not configured; createOrderPaystack is disabled"
        )

    if not stripe_provider.configured and not paystack_provider.configured:
        if _is_production():
            results["valid"] = False
            results["errors"].append("No payment provider configured")

    return results


def validate_mail_configuration() -> dict[str, Any]:
    """Check the mail transport used for password resets."""
    results = _new_results(mail_info={"backend": settings.mail_backend})

    if settings.mail_backend not in ("console", "smtp"):
        results["valid"] = False
        results["errors"].append(f"Unsupported mail backend: {settings.mail_backend}")
    elif settings.mail_backend == "console" and _is_production():
        results["warnings"].append(
            "Console mail backend in production; reset emails will only be logged"
        )

    return results


async def validate_startup_configuration() -> dict[str, Any]:
    """
    Comprehensive startup validation.

    Returns the per-area results plus an ``overall_valid`` flag.
    """
    logger.info("Starting application configuration validation")

    sections = {
        "database": await validate_database_connection(),
        "auth": validate_auth_configuration(),
        "payments": validate_payment_configuration(),
        "mail": validate_mail_configuration(),
    }

    combined_results: dict[str, Any] = {
        "overall_valid": all(section["valid"] for section in sections.values()),
        **sections,
        "environment": {
            "environment": settings.environment,
            "debug": settings.debug,
        },
    }

    all_errors = [e for section in sections.values() for e in section["errors"]]
    all_warnings = [w for section in sections.values() for w in section["warnings"]]

    if combined_results["overall_valid"]:
        logger.info("Application configuration validation completed successfully")
    else:
        logger.error("Application configuration validation failed", errors=all_errors)

    if all_warnings:
        logger.warning("Configuration warnings detected", warnings=all_warnings)

    return combined_results


def get_startup_recommendations(validation_results: dict[str, Any]) -> list[str]:
    """Generate startup recommendations based on validation results."""
    recommendations = []

    if not validation_results.get("database", {}).get("valid", False):
        recommendations.append(
            "Database connection failed - check that PostgreSQL is running "
            "and run `brytashop-migrate upgrade`"
        )
        return recommendations

    if not validation_results.get("auth", {}).get("valid", False):
        recommendations.append("Set BRYTASHOP_APP_SECRET to a long random string")

    payment_info = validation_results.get("payments", {}).get("payment_info", {})
    if not payment_info.get("stripe") and not payment_info.get("paystack"):
        recommendations.append("Configure a Stripe or Paystack secret key to accept orders")

    if not validation_results["overall_valid"]:
        recommendations.append("Fix configuration errors before deploying to production")

    return recommendations
