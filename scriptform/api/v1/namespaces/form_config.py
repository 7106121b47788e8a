"""Form config namespace: Script Writer 表单字段配置的管理与读取."""

from __future__ import annotations

from flask_restx import Namespace, fields

from scriptform.api.v1.models.envelope import get_error_envelope_model, make_success_envelope_model
from scriptform.api.v1.resources.base import BaseResource
from scriptform.constants import HttpStatus, SuccessMessages
from scriptform.core.exceptions import NotFoundError, ValidationError
from scriptform.services.form_config.form_submission import collect_form_values, validate_form_values

ns = Namespace("form-config", description="Script Writer 表单配置")

ErrorEnvelope = get_error_envelope_model(ns)

FieldListData = ns.model(
    "FormConfigFieldListData",
    {
        "fields": fields.List(fields.Raw, description="按 order 排序的字段定义(camelCase)"),
        "total": fields.Integer(),
    },
)
FieldListSuccessEnvelope = make_success_envelope_model(ns, "FormConfigFieldListSuccessEnvelope", FieldListData)
FieldSuccessEnvelope = make_success_envelope_model(ns, "FormConfigFieldSuccessEnvelope")

ReorderPayload = ns.model(
    "FormConfigReorderPayload",
    {"field_ids": fields.List(fields.String, required=True, description="期望顺序的字段 id")},
)
ImportPayload = ns.model(
    "FormConfigImportPayload",
    {"config": fields.String(required=True, description="export 得到的 JSON 文本")},
)
SubmissionPayload = ns.model(
    "FormConfigSubmissionPayload",
    {"values": fields.Raw(required=True, description="以 fieldKey 为键的取值")},
)


def _field_list(items) -> dict:
    return {"fields": [item.to_document() for item in items], "total": len(items)}


@ns.route("/fields")
class FormConfigFieldsResource(BaseResource):
    """渲染侧字段列表与新增字段."""

    @ns.response(200, "OK", FieldListSuccessEnvelope)
    def get(self):
        """获取启用的字段(渲染表单使用)."""
        return self.success(data=_field_list(self.store.list_enabled()), message="获取表单字段成功")

    @ns.response(201, "Created", FieldSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    @ns.response(409, "Conflict", ErrorEnvelope)
    def post(self):
        """新增字段."""
        field = self.store.add(self.json_body())
        return self.success(
            data={"field": field.to_document()},
            message=SuccessMessages.FIELD_CREATED,
            status=HttpStatus.CREATED,
        )


@ns.route("/fields/all")
class FormConfigAllFieldsResource(BaseResource):
    """管理侧完整字段列表."""

    @ns.response(200, "OK", FieldListSuccessEnvelope)
    def get(self):
        """获取全部字段(含禁用字段)."""
        return self.success(data=_field_list(self.store.list_all()), message="获取表单字段成功")


@ns.route("/fields/reorder")
class FormConfigReorderResource(BaseResource):
    """字段排序."""

    @ns.expect(ReorderPayload, validate=False)
    @ns.response(200, "OK", FieldListSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    def post(self):
        """按给定 id 顺序重排字段."""
        field_ids = self.json_body().get("field_ids")
        if not isinstance(field_ids, list) or not all(isinstance(item, str) for item in field_ids):
            raise ValidationError("field_ids 必须为字符串数组")
        self.store.reorder(field_ids)
        return self.success(data=_field_list(self.store.list_all()), message=SuccessMessages.FIELDS_REORDERED)


@ns.route("/fields/<string:field_id>")
class FormConfigFieldResource(BaseResource):
    """单个字段."""

    @ns.response(200, "OK", FieldSuccessEnvelope)
    @ns.response(404, "Not Found", ErrorEnvelope)
    def get(self, field_id: str):
        """获取字段详情."""
        field = self.store.get_by_id(field_id)
        if field is None:
            raise NotFoundError(f'Field with ID "{field_id}" not found', extra={"field_id": field_id})
        return self.success(data={"field": field.to_document()}, message="获取字段成功")

    @ns.response(200, "OK", FieldSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    @ns.response(404, "Not Found", ErrorEnvelope)
    @ns.response(409, "Conflict", ErrorEnvelope)
    def patch(self, field_id: str):
        """局部更新字段."""
        field = self.store.update(field_id, self.json_body())
        return self.success(data={"field": field.to_document()}, message=SuccessMessages.FIELD_UPDATED)

    @ns.response(200, "OK", FieldSuccessEnvelope)
    def delete(self, field_id: str):
        """删除字段(字段不存在时同样返回成功)."""
        self.store.delete(field_id)
        return self.success(data={"field_id": field_id}, message=SuccessMessages.FIELD_DELETED)


@ns.route("/reset")
class FormConfigResetResource(BaseResource):
    """恢复默认配置."""

    @ns.response(200, "OK", FieldListSuccessEnvelope)
    def post(self):
        """丢弃全部自定义, 恢复内置默认字段."""
        config = self.store.reset_to_default()
        return self.success(data=_field_list(config.fields), message=SuccessMessages.CONFIG_RESET)


@ns.route("/export")
class FormConfigExportResource(BaseResource):
    """导出配置."""

    def get(self):
        """导出完整配置 JSON 文本."""
        return self.success(data={"config": self.store.export_json()}, message="导出表单配置成功")


@ns.route("/import")
class FormConfigImportResource(BaseResource):
    """导入配置."""

    @ns.expect(ImportPayload, validate=False)
    @ns.response(200, "OK", FieldListSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    def post(self):
        """用 JSON 文本整体替换当前配置."""
        text = self.json_body().get("config")
        if not isinstance(text, str):
            raise ValidationError("config 必须为 JSON 字符串")
        config = self.store.import_json(text)
        return self.success(data=_field_list(config.fields), message=SuccessMessages.CONFIG_IMPORTED)


@ns.route("/submissions/validate")
class FormConfigSubmissionValidateResource(BaseResource):
    """按当前配置校验一次提交."""

    @ns.expect(SubmissionPayload, validate=False)
    def post(self):
        """返回校验错误与最终会提交的取值."""
        values = self.json_body().get("values")
        if not isinstance(values, dict):
            raise ValidationError("values 必须为对象")
        enabled = self.store.list_enabled()
        errors = validate_form_values(enabled, values)
        return self.success(
            data={
                "valid": not errors,
                "errors": [error.to_dict() for error in errors],
                "values": collect_form_values(enabled, values),
            },
            message="校验完成",
        )
