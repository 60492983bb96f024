"""Admin routes - runtime configuration, prompt inspection and versions."""

from fastapi import APIRouter

from apps.admin.handlers import (
    SETTING_ENDPOINTS,
    SNAPSHOT_ENDPOINTS,
    delete_version,
    get_full_prompt_preview,
    get_log_prompt,
    get_version_history,
    make_get_handler,
    make_snapshot_handler,
    make_update_handler,
    preview_prompt,
    save_version,
    set_log_prompt,
)
from llm.catalog import PROVIDERS

router = APIRouter(tags=["Admin"])

# GET/POST /system-prompt, /llm-model, /llm-provider, ... - Runtime settings
for endpoint in SETTING_ENDPOINTS:
    router.get(endpoint.path)(make_get_handler(endpoint))
    router.post(endpoint.path)(make_update_handler(endpoint))

# GET/POST /log-prompt - Structured-reasoning flag
router.get("/log-prompt")(get_log_prompt)
router.post("/log-prompt")(set_log_prompt)

# GET /full-prompt-preview - Last structured-reasoning prompt
router.get("/full-prompt-preview")(get_full_prompt_preview)

# GET /latest-*-prompt - Last prompt per feature
for path, key, source_path in SNAPSHOT_ENDPOINTS:
    router.get(path)(make_snapshot_handler(key, source_path))


# GET /models - Provider and model catalog
@router.get("/models")
async def list_models() -> list[dict]:
    return PROVIDERS


# POST /preview-prompt - Run a raw prompt
router.post("/preview-prompt")(preview_prompt)

# Versions
router.post("/versions/save")(save_version)
router.get("/versions/history")(get_version_history)
router.delete("/versions/{version_id}")(delete_version)
