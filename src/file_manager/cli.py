# cli.py
import logging

import click

from file_manager.aws_clients import create_s3_client
from file_manager.errors import FileManagerError
from file_manager.registry import FileRegistry
from file_manager.settings import get_settings
from file_manager.storage import MetadataStore

# Configure logging
logger = logging.getLogger(__name__)


def build_registry() -> FileRegistry:
    settings = get_settings()
    store = MetadataStore(
        s3_client=create_s3_client(settings),
        bucket_name=settings.s3_bucket_name,
        presigned_url_expiry_seconds=settings.presigned_url_expiry_seconds,
    )
    return FileRegistry(store)


def print_files(files) -> None:
    if not files:
        click.echo("No files found")
        return
    for file_info in files:
        click.echo(f"{file_info.key}\t{file_info.original_name}\t{file_info.size}\t{file_info.last_modified.isoformat()}")


@click.group()
def cli():
    """CLI commands for the File Manager API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  Path-style Addressing: {settings.s3_force_path_style}")
    click.echo(f"  Presigned URL Expiry: {settings.presigned_url_expiry_seconds}s")
    click.echo(f"  Log Level: {settings.log_level}")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
def serve(host, port):
    """Run the API with uvicorn"""
    import uvicorn

    from file_manager.main import create_app

    uvicorn.run(create_app(get_settings()), host=host, port=port)


@cli.command()
def list_files():
    """List stored files"""
    try:
        print_files(build_registry().list_files())
    except FileManagerError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("query")
def search(query):
    """Search stored files by name or key"""
    try:
        print_files(build_registry().search_files(query))
    except FileManagerError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
