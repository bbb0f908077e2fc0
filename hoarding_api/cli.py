"""
Command line entry point: ``hoarding-api serve`` and ``hoarding-api seed``.
"""

import asyncio

import click
import uvicorn

from hoarding_api.config import settings
from hoarding_api.database import async_session, create_tables, drop_tables, engine
from hoarding_api.logging_config import setup_logging
from hoarding_api.seed import seed_data
from hoarding_api.services.storage import init_storage_dirs


@click.group()
def cli():
    """Hoarding Rental Management API"""
    setup_logging(settings.log_level)


@cli.command()
@click.option("--host", default=settings.host, show_default=True)
@click.option("--port", default=settings.port, type=int, show_default=True)
@click.option("--reload", is_flag=True, help="Restart on code changes.")
def serve(host, port, reload):
    """Run the API server"""
    click.echo(f"Starting API on {host}:{port}")
    uvicorn.run("hoarding_api.main:app", host=host, port=port, reload=reload, log_config=None)


async def _seed(reset: bool) -> None:
    if reset:
        await drop_tables()
    await create_tables()
    init_storage_dirs()
    async with async_session() as session:
        await seed_data(session)
    await engine.dispose()


@cli.command()
@click.option("--reset", is_flag=True, help="Drop and recreate all tables first.")
def seed(reset):
    """Clear the database and load the demo fixtures"""
    if reset and not click.confirm("This will drop every table. Are you sure?"):
        return
    asyncio.run(_seed(reset))
    click.echo("Database seeded successfully!")


def main():
    cli()


if __name__ == "__main__":
    main()
