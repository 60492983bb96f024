"""Admin handlers."""

from apps.admin.handlers.log_prompt import get_log_prompt, set_log_prompt
from apps.admin.handlers.preview_prompt import preview_prompt
from apps.admin.handlers.prompt_snapshots import (
    SNAPSHOT_ENDPOINTS,
    get_full_prompt_preview,
    make_snapshot_handler,
)
from apps.admin.handlers.runtime_settings import (
    SETTING_ENDPOINTS,
    make_get_handler,
    make_update_handler,
)
from apps.admin.handlers.versions import delete_version, get_version_history, save_version

__all__ = [
    "get_log_prompt",
    "set_log_prompt",
    "preview_prompt",
    "SNAPSHOT_ENDPOINTS",
    "get_full_prompt_preview",
    "make_snapshot_handler",
    "SETTING_ENDPOINTS",
    "make_get_handler",
    "make_update_handler",
    "delete_version",
    "get_version_history",
    "save_version",
]
