"""Flask-RESTX Api 定制.

- `/api/v1/` 返回表单配置接口的入口清单
- RestX 捕获到的异常(含 404/405)统一走 `unified_error_response`
"""

from __future__ import annotations

import structlog
from flask import Response, jsonify, request
from flask_restx import Api

from scriptform.utils.response_utils import jsonify_unified_success, unified_error_response


class ScriptFormApi(Api):
    """表单配置 API."""

    def render_root(self) -> tuple[Response, int]:  # type: ignore[override]
        prefix = request.path.rstrip("/")
        form_config = f"{prefix}/form-config"
        return jsonify_unified_success(
            data={
                "docs_url": f"{prefix}{self._doc}" if self._doc else None,
                "openapi_url": f"{prefix}/openapi.json",
                "renderer_fields_url": f"{form_config}/fields",
                "admin_fields_url": f"{form_config}/fields/all",
                "export_url": f"{form_config}/export",
            },
            message="API v1 已就绪",
        )

    def handle_error(self, e: Exception) -> Response:  # type: ignore[override]
        with structlog.contextvars.bound_contextvars(method=request.method, path=request.path):
            payload, status_code = unified_error_response(e)
        response = jsonify(payload)
        response.status_code = status_code
        return response
