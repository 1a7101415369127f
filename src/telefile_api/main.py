from textwrap import dedent
import logging

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from entity_store import IndexedEntityStore, StoreError, get_kv_adapter

from telefile_api.entities import SEEDED_KINDS
from telefile_api.errors import (
    TeleFileError,
    handle_broad_exceptions,
    handle_http_exceptions,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
    handle_store_errors,
    handle_telefile_errors,
)
from telefile_api.fetch import RemoteFetcher
from telefile_api.pipeline import FilePipeline
from telefile_api.routers.files import router as files_router
from telefile_api.routers.folders import router as folders_router
from telefile_api.routers.health import router as health_router
from telefile_api.routers.settings import router as settings_router
from telefile_api.settings import Settings
from telefile_api.telegram import TelegramClient

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> IndexedEntityStore:
    """Entity store over the key-value backend selected by the deployment mode."""
    adapter = get_kv_adapter(
        deployment_mode=settings.deployment_mode,
        db_path=settings.db_path,
        bucket_name=settings.s3_bucket_name,
        key_prefix=settings.s3_key_prefix,
        aws_region=settings.aws_region,
        aws_endpoint_url=settings.aws_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )
    return IndexedEntityStore(adapter)


def seed_demo_data(store: IndexedEntityStore) -> int:
    return sum(store.ensure_seed(kind) for kind in SEEDED_KINDS)


def create_app(
    settings: Settings | None = None,
    telegram: TelegramClient | None = None,
    fetcher: RemoteFetcher | None = None,
) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()

    app = FastAPI(
        title="TeleFile API",
        summary="Manage folders and files, and forward them to Telegram",
        version="v1",
        description=dedent(
            """\
        Files are kept as base64 records in a key-value store (SQLite locally, S3 in AWS).

        Every JSON response uses the envelope `{"success": bool, "data": ..., "error": str}`.
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = build_store(settings)
    telegram = telegram or TelegramClient(
        api_base=settings.telegram_api_base,
        timeout=settings.telegram_timeout_seconds,
    )
    fetcher = fetcher or RemoteFetcher(timeout=settings.fetch_timeout_seconds)

    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = FilePipeline(
        store=store,
        telegram=telegram,
        fetcher=fetcher,
        max_upload_bytes=settings.max_upload_bytes,
    )

    if settings.seed_demo_data:
        seeded = seed_demo_data(store)
        logger.info(f"Demo seeding wrote {seeded} records")

    app.include_router(folders_router, tags=["folders"])
    app.include_router(files_router, tags=["files"])
    app.include_router(settings_router, tags=["settings"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(TeleFileError, handle_telefile_errors)
    app.add_exception_handler(StoreError, handle_store_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_exceptions)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
