#!/usr/bin/env python3
"""
Main CLI entry point for the Brytashop API server.
"""

import asyncio
import os
import sys

import click
import uvicorn

from brytashop import __version__
from brytashop.auth.permissions import PermissionName
from brytashop.config import settings
from brytashop.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="brytashop")
def cli() -> None:
    """Brytashop CLI - run the API server and manage users."""
    pass


@cli.command()
@click.option("--host", default=settings.api_host, help="Host to bind to")
@click.option("--port", default=settings.api_port, type=int, help="Port to bind to")
@click.option(
    "--reload",
    is_flag=True,
    default=settings.api_reload,
    help="Enable auto-reload for development",
)
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (default: 1)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Start the Brytashop API server."""
    configure_logging(debug=(log_level == "debug"), level=log_level)

    logger.info(
        "Starting Brytashop API server",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )

    # Worker processes import the app fresh and read settings from the environment
    if log_level == "debug":
        os.environ["BRYTASHOP_DEBUG"] = "true"
        os.environ["BRYTASHOP_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("BRYTASHOP_DEBUG", "false")
        os.environ.setdefault("BRYTASHOP_LOG_LEVEL", log_level)

    try:
        uvicorn.run(
            "brytashop.api.app:app",
            host=host,
            port=port,
            reload=reload,
            workers=(workers if not reload else 1),
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.group()
def users() -> None:
    """Manage shop users."""
    pass


async def grant_permissions(email: str, permissions: list[str]) -> list[str]:
    """Add permissions to a user, returning the resulting permission list."""
    from sqlalchemy import select

    from brytashop.database.connection import get_async_session
    from brytashop.dbmodels import Users

    async with get_async_session() as db:
        result = await db.execute(select(Users).where(Users.email == email.strip().lower()))
        user = result.scalar_one_or_none()
        if not user:
            raise click.ClickException(f"No such user found for email {email}")

        user.permissions = list(dict.fromkeys([*(user.permissions or []), *permissions]))
        logger.info("Permissions granted", user_id=str(user.id), permissions=permissions)
        return list(user.permissions)


@users.command("grant")
@click.argument("email")
@click.argument(
    "permissions",
    nargs=-1,
    required=True,
    type=click.Choice([p.value for p in PermissionName], case_sensitive=False),
)
def grant(email: str, permissions: tuple[str, ...]) -> None:
    """Grant PERMISSIONS to the user with EMAIL (e.g. to bootstrap the first ADMIN)."""
    configure_logging()

    names = [p.upper() for p in permissions]
    current = asyncio.run(grant_permissions(email, names))
    click.echo(f"✓ {email}: {', '.join(current)}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
