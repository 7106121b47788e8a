"""OpenAPI: 表单配置接口的 JSON 封套 Model.

字段与 `scriptform.utils.response_utils` 实际输出的键一一对应:
- 成功: success / error / message / timestamp / data / meta(可选)
- 失败: success / error / error_id / category / severity / message_code / message /
  timestamp / recoverable / extra(可选, 例如 ``{"field_id": "hook"}``)
"""

from __future__ import annotations

from flask_restx import Model, Namespace, fields

ERROR_ENVELOPE_MODEL = "FormConfigErrorEnvelope"


def _status_fields(*, success: bool, message_example: str) -> dict[str, fields.Raw]:
    return {
        "success": fields.Boolean(required=True, example=success),
        "error": fields.Boolean(required=True, example=not success),
        "message": fields.String(required=True, description="可直接展示给管理员的摘要", example=message_example),
        "timestamp": fields.String(required=True, description="UTC ISO8601", example="2026-01-01T12:00:00+00:00"),
    }


def _register(ns: Namespace, name: str, model_fields: dict[str, fields.Raw]) -> Model:
    if name in ns.models:
        return ns.models[name]
    return ns.model(name, model_fields)


def get_error_envelope_model(ns: Namespace) -> Model:
    """注册/获取错误封套 Model."""
    return _register(
        ns,
        ERROR_ENVELOPE_MODEL,
        {
            **_status_fields(success=False, message_example="表单字段 key 已存在"),
            "error_id": fields.String(required=True, description="日志中可检索的 8 位错误 ID", example="a1b2c3d4"),
            "category": fields.String(
                required=True,
                enum=["validation", "business", "storage", "system"],
                example="business",
            ),
            "severity": fields.String(required=True, enum=["low", "medium", "high", "critical"], example="low"),
            "message_code": fields.String(required=True, example="DUPLICATE_FIELD_KEY"),
            "recoverable": fields.Boolean(required=True, description="调整请求后是否可以重试", example=True),
            "extra": fields.Raw(required=False, description="冲突或缺失的字段标识", example={"field_key": "hook"}),
        },
    )


def make_success_envelope_model(ns: Namespace, name: str, data_model: Model | None = None) -> Model:
    """注册/获取成功封套 Model; 给出 data_model 时 data 按其结构描述."""
    data_field: fields.Raw
    if data_model is None:
        data_field = fields.Raw(required=False, example={"field": {"id": "hook", "fieldKey": "hook"}})
    else:
        data_field = fields.Nested(data_model, required=False)
    return _register(
        ns,
        name,
        {
            **_status_fields(success=True, message_example="字段更新成功"),
            "data": data_field,
            "meta": fields.Raw(required=False),
        },
    )
