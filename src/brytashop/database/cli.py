"""
`brytashop-migrate`: apply and inspect the shop's schema migrations.
"""

import os
from pathlib import Path

import click

from alembic import command
from alembic.config import Config
from brytashop import __version__
from brytashop.logging import configure_logging, get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_alembic_config() -> Config:
    """Load alembic.ini from the project root and point it at the migration scripts."""
    alembic_ini = PROJECT_ROOT / "alembic.ini"
    if not alembic_ini.exists():
        raise click.ClickException(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    # structlog is already configured; keep alembic.ini from replacing it
    config.attributes["configure_logger"] = False
    return config


def _run(action: str, func, *args, **kwargs) -> None:
    try:
        func(get_alembic_config(), *args, **kwargs)
    except click.ClickException:
        raise
    except Exception as e:
        logger.error("Migration command failed", action=action, error=str(e))
        raise click.ClickException(f"{action} failed: {e}") from e


@click.group()
@click.option(
    "--database-url",
    envvar="BRYTASHOP_DATABASE_URL",
    help="Database to migrate (default: BRYTASHOP_DATABASE_URL or settings)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
@click.version_option(version=__version__, prog_name="brytashop-migrate")
def main(database_url: str | None, log_level: str) -> None:
    """Brytashop database migrations."""
    configure_logging(debug=(log_level == "debug"), level=log_level)
    if database_url:
        os.environ["BRYTASHOP_DATABASE_URL"] = database_url


@main.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Upgrade the database to REVISION (default: head)."""
    logger.info("Upgrading database", revision=revision)
    _run("upgrade", command.upgrade, revision)
    logger.info("Database upgraded", revision=revision)


@main.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Downgrade the database to REVISION (default: one step back)."""
    logger.info("Downgrading database", revision=revision)
    _run("downgrade", command.downgrade, revision)
    logger.info("Database downgraded", revision=revision)


@main.command()
def current() -> None:
    """Show the database's current revision."""
    _run("current", command.current)


if __name__ == "__main__":
    main()
