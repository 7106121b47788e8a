"""ScriptForm - 常量定义模块

统一管理错误分类、严重度以及对外文案.
"""

import re
from enum import Enum

# 存储 key 只允许字母数字与 `_.-`, 保证可以安全地映射为文件名
STORAGE_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

# 与 `/form-config/fields/<field_id>` 同级的静态路由段, 不能作为字段 id
RESERVED_FIELD_IDS: frozenset[str] = frozenset({"all", "reorder"})


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    BUSINESS = "business"
    STORAGE = "storage"
    SYSTEM = "system"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# 错误消息常量
class ErrorMessages:
    """错误消息常量."""

    # 通用错误
    INTERNAL_ERROR = "服务器内部错误"
    VALIDATION_ERROR = "数据验证失败"
    RESOURCE_NOT_FOUND = "资源不存在"
    CONSTRAINT_VIOLATION = "数据约束冲突"

    # 表单配置
    FIELD_NOT_FOUND = "表单字段不存在"
    FIELD_INVALID = "表单字段定义无效"
    DUPLICATE_FIELD_ID = "表单字段 ID 已存在"
    DUPLICATE_FIELD_KEY = "表单字段 key 已存在"
    MISSING_DATA_SOURCE = "选项类字段必须配置数据源"
    INVALID_IMPORT = "导入的表单配置无效"
    STORAGE_WRITE_FAILED = "表单配置保存失败"


class SuccessMessages:
    """成功消息常量."""

    OPERATION_SUCCESS = "操作成功"
    FIELD_CREATED = "字段创建成功"
    FIELD_UPDATED = "字段更新成功"
    FIELD_DELETED = "字段删除成功"
    FIELDS_REORDERED = "字段排序已更新"
    CONFIG_RESET = "表单配置已重置为默认值"
    CONFIG_IMPORTED = "表单配置导入成功"
