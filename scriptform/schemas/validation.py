"""Schema 校验与错误映射."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError as PydanticValidationError

from scriptform.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_or_raise(
    model: type[ModelT] | TypeAdapter[Any],
    payload: object,
    *,
    error_class: type[ValidationError] = ValidationError,
) -> Any:
    """执行 schema 校验并抛出项目的 ValidationError.

    Args:
        model: pydantic model 或 TypeAdapter(用于判别联合类型).
        payload: 待校验的 payload.
        error_class: 抛出的异常类型, 需为 ValidationError 子类.

    """
    try:
        if isinstance(model, TypeAdapter):
            return model.validate_python(payload)
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        message, field = _extract_first_error(exc)
        extra = {"field": field} if field else None
        raise error_class(message, extra=extra) from None


def _extract_first_error(exc: PydanticValidationError) -> tuple[str, str | None]:
    errors = exc.errors()
    if not errors:
        return "参数校验失败", None

    first = errors[0]
    loc = first.get("loc") or ()
    field = ".".join(str(part) for part in loc) or None

    ctx = first.get("ctx")
    if isinstance(ctx, dict) and isinstance(ctx.get("error"), BaseException):
        message = str(ctx["error"])
    else:
        message = str(first.get("msg") or "参数校验失败")

    if field:
        return f"{field}: {message}", field
    return message, None
