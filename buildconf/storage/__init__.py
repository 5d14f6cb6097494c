"""Storage module for buildconf.

Provides path resolution and the JSON-backed key-value store.

Public Interface:
    - JsonKeyValueStore: Durable key-value store with atomic writes
    - get_home_dir: Get BUILDCONF_HOME
    - get_config_dir: Get config directory
    - get_state_dir: Get state directory
    - get_cache_dir: Get cache directory
    - get_merged_databases_dir: Get merged compilation database directory
"""

from .key_value_store import JsonKeyValueStore
from .paths import get_cache_dir
from .paths import get_config_dir
from .paths import get_home_dir
from .paths import get_merged_databases_dir
from .paths import get_state_dir

__all__ = [
    "JsonKeyValueStore",
    "get_home_dir",
    "get_config_dir",
    "get_state_dir",
    "get_cache_dir",
    "get_merged_databases_dir",
]
