from fastapi import Request

from entity_store import IndexedEntityStore

from .pipeline import FilePipeline


def get_store(request: Request) -> IndexedEntityStore:
    """Entity store dependency."""
    return request.app.state.store


def get_pipeline(request: Request) -> FilePipeline:
    """File pipeline dependency."""
    return request.app.state.pipeline
