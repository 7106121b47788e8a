"""ScriptForm - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- `create_app(settings=...)` 只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 校验失败统一抛出 ValueError,错误文案中带上对应的环境变量名.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scriptform.constants import STORAGE_KEY_PATTERN

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_ENVIRONMENT = "development"
APP_VERSION = "1.0.0"

DEFAULT_FORM_CONFIG_BACKEND = "file"
DEFAULT_FORM_CONFIG_DIR = "userdata/form_config"
DEFAULT_FORM_CONFIG_STORAGE_KEY = "script_form_config"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"

DEFAULT_API_V1_DOCS_ENABLED = True

_FORM_CONFIG_BACKENDS = frozenset({"file", "memory"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_LOG_FORMATS = frozenset({"json", "console"})


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")

    app_name: str = Field(default="ScriptForm", validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    form_config_backend: str = Field(default=DEFAULT_FORM_CONFIG_BACKEND, validation_alias="FORM_CONFIG_BACKEND")
    form_config_dir: Path = Field(default=Path(DEFAULT_FORM_CONFIG_DIR), validation_alias="FORM_CONFIG_DIR")
    form_config_storage_key: str = Field(
        default=DEFAULT_FORM_CONFIG_STORAGE_KEY,
        validation_alias="FORM_CONFIG_STORAGE_KEY",
    )

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, validation_alias="LOG_FORMAT")

    api_v1_docs_enabled: bool = Field(default=DEFAULT_API_V1_DOCS_ENABLED, validation_alias="API_V1_DOCS_ENABLED")

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @field_validator("form_config_backend", "log_format", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _validate_and_resolve(self) -> Settings:
        self._validate()
        if not self.form_config_dir.is_absolute():
            # frozen model: 通过 object.__setattr__ 写回规范化后的绝对路径
            object.__setattr__(self, "form_config_dir", PROJECT_ROOT / self.form_config_dir)
        return self

    def _validate(self) -> None:
        """执行跨字段校验,统一抛出可读的 ValueError."""
        errors: list[str] = []
        checks: list[tuple[str, bool]] = [
            (
                f"FORM_CONFIG_BACKEND 仅支持 {', '.join(sorted(_FORM_CONFIG_BACKENDS))}",
                self.form_config_backend not in _FORM_CONFIG_BACKENDS,
            ),
            (
                "FORM_CONFIG_STORAGE_KEY 只允许字母、数字与 _.-",
                not STORAGE_KEY_PATTERN.match(self.form_config_storage_key),
            ),
            (f"LOG_LEVEL 仅支持 {', '.join(sorted(_LOG_LEVELS))}", self.log_level not in _LOG_LEVELS),
            (f"LOG_FORMAT 仅支持 {', '.join(sorted(_LOG_FORMATS))}", self.log_format not in _LOG_FORMATS),
        ]
        errors.extend(message for message, failed in checks if failed)
        if errors:
            raise ValueError("; ".join(errors))

    @property
    def is_testing(self) -> bool:
        """当前是否为测试环境."""
        return self.environment.strip().lower() == "testing"

    def to_flask_config(self) -> dict[str, Any]:
        """转换为 Flask `app.config` 可直接写入的映射."""
        return {
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "ENVIRONMENT": self.environment,
            "TESTING": self.is_testing,
            "LOG_LEVEL": self.log_level,
            "LOG_FORMAT": self.log_format,
            "FORM_CONFIG_BACKEND": self.form_config_backend,
            "FORM_CONFIG_DIR": str(self.form_config_dir),
            "FORM_CONFIG_STORAGE_KEY": self.form_config_storage_key,
            "RESTX_MASK_SWAGGER": False,
            "RESTX_ERROR_404_HELP": False,
        }
