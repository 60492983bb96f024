"""Services module for state kept in the key-value store.

- Runtime settings and their cached snapshot
- Credit ledger
- Configuration version history
- Prompt debug snapshots

Note: Service instances are managed via dependencies.py using FastAPI DI.
"""

from services.config_cache import ConfigCache
from services.credits import CreditLedger, CreditStatus
from services.prompt_log import PromptRecorder
from services.runtime_config import KVKey, RuntimeSetting, read_setting, tracked_settings
from services.versions import VersionNotFoundError, VersionService

__all__ = [
    "ConfigCache",
    "CreditLedger",
    "CreditStatus",
    "PromptRecorder",
    "KVKey",
    "RuntimeSetting",
    "read_setting",
    "tracked_settings",
    "VersionNotFoundError",
    "VersionService",
]
