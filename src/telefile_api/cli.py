# cli.py
import logging

import click

from telefile_api.entities import FILES
from telefile_api.main import build_store, seed_demo_data
from telefile_api.pipeline import normalize_folder_id
from telefile_api.settings import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
def cli():
    """CLI commands for the TeleFile API"""
    configure_logging(get_settings().log_level)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    settings = get_settings()
    logger.info(f"Starting TeleFile API in {settings.deployment_mode} mode on {host}:{port}")
    uvicorn.run(
        "telefile_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    print(f"  Deployment Mode: {settings.deployment_mode}")
    print(f"  SQLite Path: {settings.db_path}")
    print(f"  S3 Bucket: {settings.s3_bucket_name}")
    print(f"  S3 Key Prefix: {settings.s3_key_prefix or '(none)'}")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  Max Upload Bytes: {settings.max_upload_bytes}")
    print(f"  Telegram API: {settings.telegram_api_base}")
    print(f"  Seed Demo Data: {settings.seed_demo_data}")
    print(f"  Log Level: {settings.log_level}")


@cli.command()
def seed():
    """Seed demo folders and files into an empty store"""
    store = build_store(get_settings())
    seeded = seed_demo_data(store)
    if seeded:
        print(f"✅ Seeded {seeded} records")
    else:
        print("Store already has data, nothing seeded")


@cli.command()
@click.option("--folder-id", default=None, help="Folder to list; the root when omitted")
def list_files(folder_id):
    """List the files of one folder"""
    store = build_store(get_settings())
    folder_id = normalize_folder_id(folder_id)
    files = [f for f in store.list_all(FILES) if f.folder_id == folder_id]
    if not files:
        print("No files found")
        return
    for f in files:
        marker = " [telegram]" if f.telegram else ""
        print(f"{f.id}\t{f.name}\t{f.size} bytes\t{f.mime}{marker}")


if __name__ == "__main__":
    cli()
