"""Schema 基础设施."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentSchema(BaseModel):
    """持久化文档的基础 schema.

    约定:
    - 对外(JSON 文档/导入导出)使用 camelCase 键名, Python 侧使用 snake_case 属性.
    - 拒绝未知字段, 避免拼错的属性被静默丢弃.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def to_document(self) -> dict:
        """转换为可直接 JSON 序列化的文档结构."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
