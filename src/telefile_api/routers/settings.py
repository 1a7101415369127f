from fastapi import APIRouter, Depends

from entity_store import IndexedEntityStore

from telefile_api.dependencies import get_store
from telefile_api.entities import get_app_settings, update_app_settings
from telefile_api.schemas import ApiResponse, AppSettings, AppSettingsPatch

router = APIRouter()


@router.get("/api/settings", response_model=ApiResponse[AppSettings], response_model_exclude_none=True)
def read_settings(store: IndexedEntityStore = Depends(get_store)):
    """Return the application settings, bot token included when set."""
    return ApiResponse(data=get_app_settings(store))


@router.post("/api/settings", response_model=ApiResponse[AppSettings], response_model_exclude_none=True)
def write_settings(changes: AppSettingsPatch, store: IndexedEntityStore = Depends(get_store)):
    """Merge the posted fields into the settings; omitted fields keep their value."""
    return ApiResponse(data=update_app_settings(store, changes))
