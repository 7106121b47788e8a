"""表单配置存储.

整份 FormConfiguration 文档的唯一拥有者:
- 读: `load` / `list_all` / `list_enabled` / `get_by_id` / `export_json`
- 写: `add` / `update` / `delete` / `reorder` / `reset_to_default` / `import_json` / `save`

每次写操作都是一次完整的 读取-修改-整体写回, 校验在写回之前完成; 任一校验失败时
已保存的文档保持不变. 没有锁, 多个写者之间后写者覆盖先写者.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from scriptform.constants import RESERVED_FIELD_IDS
from scriptform.core.exceptions import (
    DuplicateIdError,
    DuplicateKeyError,
    InvalidFieldError,
    InvalidImportError,
    MissingDataSourceError,
    NotFoundError,
    PersistenceError,
)
from scriptform.forms.script_form import FORM_CONFIG_VERSION, default_form_config
from scriptform.infra.kv_store import KeyValueStore
from scriptform.schemas.form_config import (
    FieldBase,
    FieldPatch,
    FormConfiguration,
    merge_field_patch,
    parse_field,
)
from scriptform.schemas.validation import validate_or_raise
from scriptform.services.form_config.form_submission import find_dangling_conditionals
from scriptform.utils.structlog_config import get_form_config_logger

logger = get_form_config_logger()

DEFAULT_STORAGE_KEY = "script_form_config"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def sort_fields(fields: Iterable[FieldBase]) -> list[FieldBase]:
    """按 order 升序排列; sorted 是稳定排序, order 相同时保持集合中的原有先后."""
    return sorted(fields, key=lambda field: field.order)


class FormConfigStore:
    """表单配置存储.

    Args:
        backend: key-value 持久化后端.
        storage_key: 文档在后端中的固定 key.
        clock: 返回当前时间的函数, 用于 `lastUpdated`.

    Example:
        >>> store = FormConfigStore(InMemoryKeyValueStore())
        >>> [field.id for field in store.list_enabled()][:2]
        ['industry', 'profile']

    """

    def __init__(
        self,
        backend: KeyValueStore,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._backend = backend
        self._storage_key = storage_key
        self._clock = clock

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    @property
    def storage_key(self) -> str:
        return self._storage_key

    # ------------------------------------------------------------------
    # 读
    # ------------------------------------------------------------------

    def default_config(self) -> FormConfiguration:
        """返回内置默认文档(不写入存储)."""
        return default_form_config(self._clock())

    def load(self) -> FormConfiguration:
        """读取当前文档.

        没有已保存的文档, 或读取/解析失败时返回内置默认文档, 永不抛出异常,
        也不会把默认文档写回存储.

        Returns:
            FormConfiguration: 已保存的文档或默认文档.

        """
        try:
            raw = self._backend.get(self._storage_key)
        except Exception:  # noqa: BLE001 - 读取失败统一降级为默认配置
            logger.exception("form_config_read_failed", storage_key=self._storage_key)
            return self.default_config()

        if raw is None:
            logger.info("form_config_not_found_using_default", storage_key=self._storage_key)
            return self.default_config()

        try:
            config = FormConfiguration.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.warning(
                "form_config_parse_failed_using_default",
                storage_key=self._storage_key,
                error_count=exc.error_count(),
                error=str(exc.errors()[0].get("msg")) if exc.errors() else None,
            )
            return self.default_config()

        if config.version != FORM_CONFIG_VERSION:
            logger.warning(
                "form_config_version_mismatch",
                expected=FORM_CONFIG_VERSION,
                actual=config.version,
            )

        dangling = find_dangling_conditionals(config.fields)
        if dangling:
            logger.warning("form_config_dangling_conditionals", field_ids=dangling)

        return config

    def list_all(self) -> list[FieldBase]:
        """返回全部字段(含禁用字段与 divider), 按 order 排序."""
        return sort_fields(self.load().fields)

    def list_enabled(self) -> list[FieldBase]:
        """返回渲染侧可见的字段, 按 order 排序; divider 保留."""
        all_fields = self.list_all()
        enabled = [field for field in all_fields if field.enabled]
        logger.debug("form_config_enabled_fields", enabled=len(enabled), total=len(all_fields))
        return enabled

    def get_by_id(self, field_id: str) -> FieldBase | None:
        """按 id 查找字段, 不存在时返回 None."""
        return next((field for field in self.load().fields if field.id == field_id), None)

    def export_json(self) -> str:
        """把当前文档序列化为 JSON 文本(便于备份与分享)."""
        return self.load().model_dump_json(by_alias=True, exclude_none=True, indent=2)

    # ------------------------------------------------------------------
    # 写
    # ------------------------------------------------------------------

    def save(self, config: FormConfiguration) -> None:
        """盖上当前时间与当前版本号后整体写入.

        Raises:
            PersistenceError: 后端写入失败.

        """
        config.last_updated = self._clock()
        config.version = FORM_CONFIG_VERSION
        payload = config.model_dump_json(by_alias=True, exclude_none=True)
        try:
            self._backend.set(self._storage_key, payload)
        except OSError as exc:
            logger.error("form_config_save_failed", storage_key=self._storage_key, error=str(exc))
            msg = f"表单配置保存失败: {exc}"
            raise PersistenceError(msg, extra={"storage_key": self._storage_key}) from exc
        logger.info("form_config_saved", field_count=len(config.fields), field_ids=config.field_ids())

    def add(self, field: FieldBase | Mapping[str, Any]) -> FieldBase:
        """追加新字段.

        Raises:
            InvalidFieldError: payload 不是合法的字段定义, 或 id 与静态路由段冲突.
            DuplicateIdError: id 已存在.
            DuplicateKeyError: fieldKey 已存在.
            MissingDataSourceError: 选项类字段缺少 dataSource.

        """
        candidate = field if isinstance(field, FieldBase) else parse_field(field)
        config = self.load()

        if any(existing.id == candidate.id for existing in config.fields):
            msg = f'Field with ID "{candidate.id}" already exists'
            raise DuplicateIdError(msg, extra={"field_id": candidate.id})
        self._ensure_routable_id(candidate)
        self._ensure_unique_key(config.fields, candidate.field_key)
        self._ensure_data_source(candidate)

        config.fields.append(candidate)
        self.save(config)
        logger.info("form_config_field_added", field_id=candidate.id, field_type=candidate.type)
        return candidate

    def update(self, field_id: str, patch: FieldPatch | Mapping[str, Any]) -> FieldBase:
        """对字段做浅合并更新.

        Raises:
            NotFoundError: id 不存在.
            DuplicateKeyError: 新 fieldKey 与其他字段重复.
            InvalidFieldError: 合并结果不是合法的字段定义.
            MissingDataSourceError: 合并后的选项类字段缺少 dataSource.

        """
        resolved_patch = patch if isinstance(patch, FieldPatch) else self._parse_patch(patch)
        config = self.load()
        index = next((i for i, field in enumerate(config.fields) if field.id == field_id), None)
        if index is None:
            msg = f'Field with ID "{field_id}" not found'
            raise NotFoundError(msg, extra={"field_id": field_id})

        current = config.fields[index]
        new_key = resolved_patch.changes().get("field_key")
        if new_key is not None and new_key != current.field_key:
            others = [field for i, field in enumerate(config.fields) if i != index]
            self._ensure_unique_key(others, new_key)

        merged = merge_field_patch(current, resolved_patch)
        self._ensure_data_source(merged)

        config.fields[index] = merged
        self.save(config)
        logger.info(
            "form_config_field_updated",
            field_id=field_id,
            changed=sorted(resolved_patch.model_fields_set),
        )
        return merged

    def delete(self, field_id: str) -> None:
        """删除字段; 字段不存在时不报错. 不会清理其他字段指向它的 conditional."""
        config = self.load()
        remaining = [field for field in config.fields if field.id != field_id]
        removed = len(config.fields) - len(remaining)
        config.fields = remaining
        self.save(config)
        logger.info("form_config_field_deleted", field_id=field_id, removed=removed)

    def reorder(self, field_ids: Iterable[str]) -> None:
        """把列表中每个 id 的 order 设为其在列表中的下标; 未列出的字段保持原 order."""
        order_map = {field_id: position for position, field_id in enumerate(field_ids)}
        config = self.load()
        for field in config.fields:
            position = order_map.get(field.id)
            if position is not None:
                field.order = position
        self.save(config)
        logger.info("form_config_fields_reordered", field_ids=list(order_map))

    def reset_to_default(self) -> FormConfiguration:
        """丢弃全部自定义, 写回内置默认文档."""
        config = self.default_config()
        self.save(config)
        logger.warning("form_config_reset_to_default", field_count=len(config.fields))
        return config

    def import_json(self, text: str) -> FormConfiguration:
        """从 JSON 文本导入完整文档, 校验通过后才写入.

        Raises:
            InvalidImportError: 文本不是 JSON、缺少 fields 数组、字段定义不合法或违反唯一性约束.

        """
        try:
            payload = json.loads(text)
        except (TypeError, json.JSONDecodeError) as exc:
            msg = "Invalid configuration JSON"
            raise InvalidImportError(msg) from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("fields"), list):
            msg = "Invalid configuration format: missing fields array"
            raise InvalidImportError(msg)

        document = dict(payload)
        document.setdefault("version", FORM_CONFIG_VERSION)
        document.setdefault("lastUpdated", self._clock().isoformat())
        try:
            config = FormConfiguration.model_validate(document)
        except PydanticValidationError as exc:
            msg = f"Invalid configuration format: {exc.errors()[0].get('msg') if exc.errors() else exc}"
            raise InvalidImportError(msg) from exc

        try:
            self._ensure_document_invariants(config.fields)
        except (DuplicateIdError, DuplicateKeyError, InvalidFieldError, MissingDataSourceError) as exc:
            raise InvalidImportError(exc.message, extra=exc.extra) from exc

        self.save(config)
        logger.info("form_config_imported", field_count=len(config.fields))
        return config

    # ------------------------------------------------------------------
    # 校验
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_patch(payload: Mapping[str, Any]) -> FieldPatch:
        return validate_or_raise(FieldPatch, payload, error_class=InvalidFieldError)

    @staticmethod
    def _ensure_unique_key(fields: Iterable[FieldBase], field_key: str) -> None:
        if any(field.field_key == field_key for field in fields):
            msg = f'Field with key "{field_key}" already exists'
            raise DuplicateKeyError(msg, extra={"field_key": field_key})

    @staticmethod
    def _ensure_routable_id(field: FieldBase) -> None:
        if field.id in RESERVED_FIELD_IDS:
            msg = f'Field ID "{field.id}" is reserved'
            raise InvalidFieldError(msg, extra={"field_id": field.id})

    @staticmethod
    def _ensure_data_source(field: FieldBase) -> None:
        if field.is_option_field and getattr(field, "data_source", None) is None:
            msg = f'Field "{field.id}" of type "{field.type}" requires a dataSource'  # type: ignore[attr-defined]
            raise MissingDataSourceError(msg, extra={"field_id": field.id})

    def _ensure_document_invariants(self, fields: Iterable[FieldBase]) -> None:
        seen_ids: set[str] = set()
        seen_keys: set[str] = set()
        for field in fields:
            if field.id in seen_ids:
                msg = f'Field with ID "{field.id}" already exists'
                raise DuplicateIdError(msg, extra={"field_id": field.id})
            if field.field_key in seen_keys:
                msg = f'Field with key "{field.field_key}" already exists'
                raise DuplicateKeyError(msg, extra={"field_key": field.field_key})
            self._ensure_routable_id(field)
            self._ensure_data_source(field)
            seen_ids.add(field.id)
            seen_keys.add(field.field_key)


__all__ = ["DEFAULT_STORAGE_KEY", "FormConfigStore", "sort_fields"]
