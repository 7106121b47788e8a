"""表单配置文档的 schema.

字段定义是按 ``type`` 判别的封闭联合类型:
- 每个变体只声明自己有意义的专有属性(rows / min / max / step / dataSource)
- 变体统一拒绝未知属性, 因此 ``divider`` 上携带 ``min`` 会在构造时被拒绝

持久化与导入导出使用 camelCase 键名(`fieldKey`, `helpText`, `dataSource`, `lastUpdated` ...).
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter, model_validator

from scriptform.core.exceptions import InvalidFieldError
from scriptform.schemas.base import DocumentSchema
from scriptform.schemas.validation import validate_or_raise

FieldType = Literal[
    "text",
    "textarea",
    "url",
    "number",
    "dropdown",
    "db-dropdown",
    "multi-select",
    "voice",
    "textarea-voice",
    "divider",
]

OPTION_FIELD_TYPES: frozenset[str] = frozenset({"dropdown", "db-dropdown", "multi-select"})
VOICE_FIELD_TYPES: frozenset[str] = frozenset({"voice", "textarea-voice"})

DatabaseTable = Literal["industries", "profile_list", "hook_tags", "character_tags"]

ConditionOperator = Literal["equals", "notEquals", "contains", "notContains"]
ValidationRuleType = Literal["required", "min", "max", "pattern", "url", "email"]


# ---------------------------------------------------------------------------
# 数据源
# ---------------------------------------------------------------------------


class OptionItem(DocumentSchema):
    """静态选项."""

    value: str
    label: str


class LocalConfigSource(DocumentSchema):
    """由本地配置(设置页 > 下拉选项)维护的选项列表, 按 key 引用."""

    type: Literal["localStorage"] = "localStorage"
    key: str = Field(min_length=1)


class DatabaseSource(DocumentSchema):
    """由外部服务按表名查询的选项列表, 仅允许固定白名单内的表."""

    type: Literal["database"] = "database"
    table: DatabaseTable


class StaticOptionsSource(DocumentSchema):
    """直接内联在字段定义中的选项列表."""

    type: Literal["hardcoded"] = "hardcoded"
    options: list[OptionItem]


DataSource = Annotated[
    Union[LocalConfigSource, DatabaseSource, StaticOptionsSource],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# 校验规则与条件显示
# ---------------------------------------------------------------------------


class ValidationRule(DocumentSchema):
    """附加校验规则, 与 ``required`` 标志相互独立并叠加生效."""

    type: ValidationRuleType
    value: int | float | str | None = None
    message: str | None = None

    @model_validator(mode="after")
    def _check_pattern(self) -> ValidationRule:
        if self.type == "pattern" and self.value is not None:
            try:
                re.compile(str(self.value))
            except re.error as exc:
                raise ValueError(f"pattern 不是合法的正则表达式: {exc}") from exc
        return self


class ConditionalVisibility(DocumentSchema):
    """仅当被引用字段的当前值满足 operator 时才显示本字段."""

    field_id: str = Field(min_length=1)
    operator: ConditionOperator
    value: str | list[str]


# ---------------------------------------------------------------------------
# 字段定义(按 type 判别的变体)
# ---------------------------------------------------------------------------


class FieldBase(DocumentSchema):
    """所有字段变体共享的属性."""

    id: str = Field(min_length=1)
    field_key: str = Field(min_length=1)

    label: str
    placeholder: str | None = None
    help_text: str | None = None

    required: bool = False
    validation: list[ValidationRule] | None = None

    order: int = 0
    enabled: bool = True
    conditional: ConditionalVisibility | None = None

    category: str | None = None
    container_class: str | None = None

    @property
    def is_divider(self) -> bool:
        return self.type == "divider"  # type: ignore[attr-defined]

    @property
    def is_option_field(self) -> bool:
        return self.type in OPTION_FIELD_TYPES  # type: ignore[attr-defined]

    @property
    def is_voice(self) -> bool:
        return self.type in VOICE_FIELD_TYPES  # type: ignore[attr-defined]


class PlainField(FieldBase):
    """单行文本、URL 与纯语音字段, 无专有属性."""

    type: Literal["text", "url", "voice"]


class TextareaField(FieldBase):
    """多行文本(可附带语音)字段."""

    type: Literal["textarea", "textarea-voice"]
    rows: int | None = Field(default=None, ge=1)


class NumberField(FieldBase):
    """数值字段."""

    type: Literal["number"]
    min_value: int | float | None = Field(default=None, alias="min")
    max_value: int | float | None = Field(default=None, alias="max")
    step: int | float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> NumberField:
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError("min 不能大于 max")
        return self


class OptionField(FieldBase):
    """下拉 / 数据库下拉 / 多选字段.

    ``data_source`` 在模型层允许缺省, 以便读取历史文档; 新增与更新时由 store 强制要求.
    """

    type: Literal["dropdown", "db-dropdown", "multi-select"]
    data_source: DataSource | None = None


class DividerField(FieldBase):
    """纯结构性的分隔字段, 不承载任何数据."""

    type: Literal["divider"]


FieldDefinition = Annotated[
    Union[PlainField, TextareaField, NumberField, OptionField, DividerField],
    Field(discriminator="type"),
]

FIELD_ADAPTER: TypeAdapter[Any] = TypeAdapter(FieldDefinition)

_VARIANT_BY_TYPE: dict[str, type[FieldBase]] = {
    "text": PlainField,
    "url": PlainField,
    "voice": PlainField,
    "textarea": TextareaField,
    "textarea-voice": TextareaField,
    "number": NumberField,
    "dropdown": OptionField,
    "db-dropdown": OptionField,
    "multi-select": OptionField,
    "divider": DividerField,
}


def variant_for(field_type: str) -> type[FieldBase]:
    """返回 type 对应的字段变体模型."""
    try:
        return _VARIANT_BY_TYPE[field_type]
    except KeyError:
        msg = f"未知的字段类型: {field_type}"
        raise InvalidFieldError(msg) from None


def parse_field(payload: object) -> FieldBase:
    """将 payload 校验为具体的字段变体, 失败抛出 InvalidFieldError."""
    return validate_or_raise(FIELD_ADAPTER, payload, error_class=InvalidFieldError)


# ---------------------------------------------------------------------------
# 局部更新
# ---------------------------------------------------------------------------


class FieldPatch(DocumentSchema):
    """字段的局部更新.

    所有属性可选; 只有显式给出的属性参与合并. ``id`` 不可修改, 因此不在此处声明.
    """

    field_key: str | None = Field(default=None, min_length=1)
    label: str | None = None
    placeholder: str | None = None
    help_text: str | None = None
    type: FieldType | None = None
    data_source: DataSource | None = None
    required: bool | None = None
    validation: list[ValidationRule] | None = None
    order: int | None = None
    enabled: bool | None = None
    conditional: ConditionalVisibility | None = None
    category: str | None = None
    container_class: str | None = None
    rows: int | None = None
    min_value: int | float | None = Field(default=None, alias="min")
    max_value: int | float | None = Field(default=None, alias="max")
    step: int | float | None = None

    def changes(self) -> dict[str, Any]:
        """显式设置过的属性(按 Python 属性名)."""
        return self.model_dump(exclude_unset=True)


def merge_field_patch(field: FieldBase, patch: FieldPatch) -> FieldBase:
    """把局部更新合并进字段定义并重新校验.

    浅合并: 未在 patch 中出现的属性保留原值. 当 patch 修改了 ``type`` 时,
    新变体不支持的专有属性会先被丢弃, 再与 patch 合并.

    Raises:
        InvalidFieldError: 合并结果不是合法的字段定义.

    """
    current = field.model_dump()
    updates = patch.changes()
    new_type = updates.get("type") or current["type"]
    updates["type"] = new_type

    if new_type != current["type"]:
        allowed = set(variant_for(new_type).model_fields)
        current = {name: value for name, value in current.items() if name in allowed}

    return parse_field({**current, **updates})


# ---------------------------------------------------------------------------
# 完整文档
# ---------------------------------------------------------------------------


class FormConfiguration(DocumentSchema):
    """完整的表单配置文档. ``fields`` 按插入顺序保存, 不按 order 排序."""

    model_config = ConfigDict(extra="ignore")

    version: str
    last_updated: datetime
    fields: list[FieldDefinition] = Field(default_factory=list)

    def field_ids(self) -> list[str]:
        return [field.id for field in self.fields]


__all__ = [
    "FIELD_ADAPTER",
    "OPTION_FIELD_TYPES",
    "VOICE_FIELD_TYPES",
    "ConditionalVisibility",
    "DataSource",
    "DatabaseSource",
    "DividerField",
    "FieldBase",
    "FieldDefinition",
    "FieldPatch",
    "FieldType",
    "FormConfiguration",
    "LocalConfigSource",
    "NumberField",
    "OptionField",
    "OptionItem",
    "PlainField",
    "StaticOptionsSource",
    "TextareaField",
    "ValidationRule",
    "merge_field_patch",
    "parse_field",
    "variant_for",
]
