"""渲染侧使用的表单提交辅助函数(纯函数, 不访问存储).

- 条件显示: 根据被引用字段的当前值判断字段是否可见
- 提交值收集: 以 fieldKey 为键, 排除 divider 与不可见字段
- 提交值校验: required 标志 + validation 规则, divider 永远不参与
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from scriptform.schemas.form_config import FieldBase, ValidationRule

_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True, slots=True)
class FieldError:
    """单个字段的校验失败."""

    field_id: str
    field_key: str
    rule: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "field_id": self.field_id,
            "field_key": self.field_key,
            "rule": self.rule,
            "message": self.message,
        }


def is_empty_value(value: Any) -> bool:
    """None、空白字符串、空列表视为未填写; 语音等二进制值只要存在即视为已填写."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, bytes, bytearray)):
        return len(value) == 0
    return False


def _matches(operator: str, current: Any, expected: str | list[str]) -> bool:
    if operator in ("equals", "notEquals"):
        if isinstance(expected, list):
            hit = sorted(current) == sorted(expected) if isinstance(current, list) else current in expected
        elif isinstance(current, (list, tuple)):
            hit = list(current) == [expected]
        else:
            hit = current is not None and str(current) == expected
        return hit if operator == "equals" else not hit

    # contains / notContains
    targets = expected if isinstance(expected, list) else [expected]
    if isinstance(current, (list, tuple, set)):
        hit = any(target in current for target in targets)
    elif isinstance(current, str):
        hit = any(target in current for target in targets)
    else:
        hit = False
    return hit if operator == "contains" else not hit


def is_field_visible(
    field: FieldBase,
    values: Mapping[str, Any],
    fields_by_id: Mapping[str, FieldBase],
) -> bool:
    """判断字段在当前取值下是否可见.

    Args:
        field: 待判断的字段.
        values: 以 fieldKey 为键的当前取值.
        fields_by_id: 全部字段, 以 id 为键, 用于解析 conditional 引用.

    Returns:
        bool: 无 conditional 时恒为 True; 引用的字段不存在时恒为 False.

    """
    condition = field.conditional
    if condition is None:
        return True
    source = fields_by_id.get(condition.field_id)
    if source is None:
        return False
    return _matches(condition.operator, values.get(source.field_key), condition.value)


def visible_fields(fields: Sequence[FieldBase], values: Mapping[str, Any]) -> list[FieldBase]:
    """按原顺序返回当前可见的字段."""
    fields_by_id = {field.id: field for field in fields}
    return [field for field in fields if is_field_visible(field, values, fields_by_id)]


def collect_form_values(fields: Sequence[FieldBase], raw_values: Mapping[str, Any]) -> dict[str, Any]:
    """生成最终提交的取值映射.

    只包含可见的数据字段; divider 与未出现在 raw_values 中的字段取 None.
    """
    result: dict[str, Any] = {}
    for field in visible_fields(fields, raw_values):
        if field.is_divider:
            continue
        result[field.field_key] = raw_values.get(field.field_key)
    return result


def _length_or_number(field: FieldBase, value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if field.type == "number" and isinstance(value, str):  # type: ignore[attr-defined]
        try:
            return float(value)
        except ValueError:
            return None
    if isinstance(value, (str, list, tuple)):
        return float(len(value))
    return None


def _check_rule(field: FieldBase, rule: ValidationRule, value: Any) -> str | None:
    """返回失败文案, 通过时返回 None. 空值只由 required 规则处理."""
    if rule.type == "required":
        return (rule.message or f"{field.label} 为必填项") if is_empty_value(value) else None
    if is_empty_value(value) or (field.is_voice and not isinstance(value, str)):
        return None

    if rule.type in ("min", "max"):
        measured = _length_or_number(field, value)
        try:
            limit = float(rule.value) if rule.value is not None else None
        except (TypeError, ValueError):
            limit = None
        if measured is None or limit is None:
            return None
        if rule.type == "min" and measured < limit:
            return rule.message or f"{field.label} 不能小于 {rule.value}"
        if rule.type == "max" and measured > limit:
            return rule.message or f"{field.label} 不能大于 {rule.value}"
        return None

    text = str(value)
    if rule.type == "pattern":
        if rule.value is None:
            return None
        if re.fullmatch(str(rule.value), text) is None:
            return rule.message or f"{field.label} 格式不正确"
        return None
    if rule.type == "url":
        return None if _URL_PATTERN.match(text) else (rule.message or f"{field.label} 必须是有效的链接")
    if rule.type == "email":
        return None if _EMAIL_PATTERN.match(text) else (rule.message or f"{field.label} 必须是有效的邮箱")
    return None


def validate_form_values(fields: Sequence[FieldBase], values: Mapping[str, Any]) -> list[FieldError]:
    """校验一次提交.

    divider 与不可见字段不参与校验, 即使 divider 的 required 为 True.
    每个字段只报告第一条失败.
    """
    errors: list[FieldError] = []
    for field in visible_fields(fields, values):
        if field.is_divider:
            continue
        value = values.get(field.field_key)
        rules: list[ValidationRule] = list(field.validation or [])
        if field.required:
            rules.insert(0, ValidationRule(type="required"))
        for rule in rules:
            message = _check_rule(field, rule, value)
            if message is not None:
                errors.append(FieldError(field.id, field.field_key, rule.type, message))
                break
    return errors


def find_dangling_conditionals(fields: Iterable[FieldBase]) -> list[str]:
    """返回 conditional 引用了不存在字段的字段 id."""
    materialized = list(fields)
    known_ids = {field.id for field in materialized}
    return [
        field.id
        for field in materialized
        if field.conditional is not None and field.conditional.field_id not in known_ids
    ]


__all__ = [
    "FieldError",
    "collect_form_values",
    "find_dangling_conditionals",
    "is_empty_value",
    "is_field_visible",
    "validate_form_values",
    "visible_fields",
]
