"""ScriptForm - 统一响应工具.

提供统一的成功/错误响应结构,避免在业务层散落 JSON 拼装逻辑.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from flask import Response, jsonify
from werkzeug.exceptions import HTTPException

from scriptform.api.error_mapping import map_exception_to_status
from scriptform.constants import HttpStatus
from scriptform.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity, SuccessMessages
from scriptform.core.exceptions import AppError
from scriptform.utils.structlog_config import get_api_logger

if TYPE_CHECKING:
    from collections.abc import Mapping


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def unified_success_response(
    data: object | None = None,
    message: object | None = None,
    *,
    status: int = HttpStatus.OK,
    meta: Mapping[str, object] | None = None,
) -> tuple[dict[str, Any], int]:
    """生成统一的成功响应载荷.

    Args:
        data: 响应数据,可选.
        message: 成功消息,可选,默认为"操作成功".
        status: HTTP 状态码,默认为 200.
        meta: 元数据,可选.

    Returns:
        包含两个元素的元组:
        - 响应载荷字典
        - HTTP 状态码

    """
    payload: dict[str, Any] = {
        "success": True,
        "error": False,
        "message": str(message) if message is not None else SuccessMessages.OPERATION_SUCCESS,
        "timestamp": _timestamp(),
    }
    if data is not None:
        payload["data"] = data
    if meta:
        payload["meta"] = dict(meta)
    return payload, status


def unified_error_response(
    error: BaseException,
    *,
    status_code: int | None = None,
) -> tuple[dict[str, Any], int]:
    """生成统一的错误响应载荷并记录日志.

    业务异常(AppError)使用其 message/category/severity; 其他异常只暴露通用文案.

    Args:
        error: 异常对象.
        status_code: HTTP 状态码,可选,默认根据异常类型自动映射.

    Returns:
        (错误响应载荷字典, HTTP 状态码).

    """
    safe_error = error if isinstance(error, Exception) else Exception(str(error))
    final_status = status_code or map_exception_to_status(safe_error, default=HttpStatus.INTERNAL_SERVER_ERROR)
    error_id = uuid.uuid4().hex[:8]

    if isinstance(safe_error, AppError):
        message = safe_error.message
        message_code = safe_error.message_key
        category = safe_error.category
        severity = safe_error.severity
        recoverable = safe_error.recoverable
        extra = dict(safe_error.extra)
    elif isinstance(safe_error, HTTPException):
        message = safe_error.description or ErrorMessages.INTERNAL_ERROR
        message_code = safe_error.name.upper().replace(" ", "_")
        category = ErrorCategory.VALIDATION if final_status < HttpStatus.INTERNAL_SERVER_ERROR else ErrorCategory.SYSTEM
        severity = ErrorSeverity.LOW if final_status < HttpStatus.INTERNAL_SERVER_ERROR else ErrorSeverity.HIGH
        recoverable = final_status < HttpStatus.INTERNAL_SERVER_ERROR
        extra = {}
    else:
        message = ErrorMessages.INTERNAL_ERROR
        message_code = "INTERNAL_ERROR"
        category = ErrorCategory.SYSTEM
        severity = ErrorSeverity.HIGH
        recoverable = False
        extra = {}

    logger = get_api_logger()
    log_fields = {
        "error_id": error_id,
        "error_type": type(safe_error).__name__,
        "status_code": final_status,
        "message_code": message_code,
        "category": category.value,
        "severity": severity.value,
        **extra,
    }
    if final_status >= HttpStatus.INTERNAL_SERVER_ERROR:
        logger.error("request_failed", exc_info=safe_error, **log_fields)
    else:
        logger.warning("request_rejected", error=str(safe_error), **log_fields)

    payload: dict[str, Any] = {
        "success": False,
        "error": True,
        "error_id": error_id,
        "category": category.value,
        "severity": severity.value,
        "message_code": message_code,
        "message": message,
        "timestamp": _timestamp(),
        "recoverable": recoverable,
    }
    if extra:
        payload["extra"] = extra
    return payload, final_status


def jsonify_unified_success(*args: Any, **kwargs: Any) -> tuple[Response, int]:
    """返回 Flask Response 对象的成功响应便捷函数."""
    payload, status = unified_success_response(*args, **kwargs)
    return jsonify(payload), status


def jsonify_unified_error(error: BaseException, *, status_code: int | None = None) -> tuple[Response, int]:
    """返回 Flask Response 对象的错误响应便捷函数."""
    payload, status = unified_error_response(error, status_code=status_code)
    return jsonify(payload), status
