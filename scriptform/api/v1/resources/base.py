"""Base Resource helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Response, current_app, request
from flask_restx import Resource

from scriptform.core.exceptions import ValidationError
from scriptform.services.form_config import FormConfigStore
from scriptform.utils.response_utils import jsonify_unified_success

FORM_CONFIG_STORE_EXTENSION = "form_config_store"


class BaseResource(Resource):
    """统一封套与依赖获取."""

    def success(
        self,
        data: object | None = None,
        message: object | None = None,
        *,
        status: int = 200,
        meta: Mapping[str, object] | None = None,
    ) -> Response:
        response, status_code = jsonify_unified_success(data=data, message=message, status=status, meta=meta)
        response.status_code = status_code
        return response

    @property
    def store(self) -> FormConfigStore:
        """当前应用注入的表单配置 store."""
        return current_app.extensions[FORM_CONFIG_STORE_EXTENSION]

    @staticmethod
    def json_body() -> dict[str, Any]:
        """读取 JSON 对象请求体, 非对象时抛出 ValidationError."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("请求体必须是 JSON 对象")
        return payload
