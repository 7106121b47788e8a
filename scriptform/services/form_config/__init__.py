"""表单配置服务: 存储与提交辅助."""

from __future__ import annotations

from typing import TYPE_CHECKING

from scriptform.infra.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from scriptform.services.form_config.form_config_store import FormConfigStore

if TYPE_CHECKING:
    from scriptform.settings import Settings


def build_form_config_store(settings: Settings) -> FormConfigStore:
    """按 Settings 选择持久化后端并构造 store."""
    backend: KeyValueStore
    if settings.form_config_backend == "memory":
        backend = InMemoryKeyValueStore()
    else:
        backend = JsonFileKeyValueStore(settings.form_config_dir)
    return FormConfigStore(backend, storage_key=settings.form_config_storage_key)


__all__ = ["FormConfigStore", "build_form_config_store"]
