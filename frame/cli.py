import asyncio
import logging
import os
from typing import Optional

import typer

from config.settings import settings

from .core.client import FrameClient
from .database import DatabaseManager
from .providers import RedisSettingBroadcaster, SQLAlchemyProvider
from .types import DEFAULT_TYPES

app = typer.Typer(
    name="frame",
    help="Command framework for hikari bots",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def build_client(commands_directory: str | None = None) -> FrameClient:
    """Create a client with the default commands and the database-backed settings provider."""
    broadcaster = RedisSettingBroadcaster() if settings.redis_url else None
    client = FrameClient(provider=SQLAlchemyProvider(broadcaster=broadcaster))
    client.registry.register_defaults()

    directory = commands_directory or settings.commands_directory
    if directory:
        client.registry.register_commands_in(directory)
    return client


@app.command()
def run(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Set log level"),
    commands_directory: Optional[str] = typer.Option(None, "--commands", help="Directory of command modules to load"),
    sync: bool = typer.Option(False, "--sync", help="Publish slash commands once started"),
) -> None:
    """Run the bot."""
    if log_level:
        os.environ["LOG_LEVEL"] = log_level

    setup_logging(log_level or settings.log_level)
    client = build_client(commands_directory)

    if sync:

        @client.event_system.listen("ready")
        async def publish_commands(ready_client) -> None:
            await ready_client.sync_application_commands()

    client.run()


@app.command()
def db(
    action: str = typer.Argument(help="Action: create, reset"),
) -> None:
    """Settings database management commands."""

    async def run_db_command() -> None:
        db_manager = DatabaseManager()
        try:
            if action == "create":
                await db_manager.create_tables()
                typer.echo("Database tables created")
            elif action == "reset":
                confirm = typer.confirm("This will delete all stored settings. Continue?")
                if confirm:
                    await db_manager.drop_tables()
                    await db_manager.create_tables()
                    typer.echo("Database reset completed")
            else:
                typer.echo(f"Unknown action: {action}")
                raise typer.Exit(code=1)
        finally:
            await db_manager.close()

    asyncio.run(run_db_command())


@app.command()
def types() -> None:
    """List the built-in argument types."""
    for type_id, argument_type in DEFAULT_TYPES.items():
        typer.echo(f"{type_id:<18} {argument_type.option_type.name}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
