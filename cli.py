# Simple CLI for Tradebook
import asyncio
import click


@click.group()
def cli():
    """Tradebook CLI"""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (overrides API__HOST)")
@click.option("--port", default=None, type=int, help="Listen port (overrides API__PORT)")
def api(host, port):
    """Run the API server"""
    from core.config.settings import Settings
    from api.main import run as run_api

    settings = Settings()
    overrides = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if overrides:
        settings = settings.model_copy(
            update={"api": settings.api.model_copy(update=overrides)}
        )

    click.echo(f"Starting Tradebook API server on {settings.api.host}:{settings.api.port}...")
    run_api(settings)


@cli.command("init-db")
def init_db():
    """Create database tables"""
    from core.config.settings import Settings
    from core.database.connection import DatabaseManager
    from core.logging import configure_logging

    settings = Settings()
    configure_logging(settings)

    async def _init():
        db_manager = DatabaseManager(
            db_url=settings.database.url,
            environment=settings.environment.value,
            schema_management="create_all",
            echo=settings.database.echo,
        )
        try:
            await db_manager.wait_for_ready(timeout=30)
            await db_manager.init()
        finally:
            await db_manager.shutdown()

    click.echo("Creating database tables...")
    asyncio.run(_init())
    click.echo("Database initialized.")


if __name__ == "__main__":
    cli()
