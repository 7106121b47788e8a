"""ScriptForm 项目的结构化日志配置与辅助函数."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, cast

import structlog

from scriptform.settings import APP_VERSION

if TYPE_CHECKING:
    from flask import Flask
    from structlog.typing import BindableLogger, EventDict, Processor


class StructlogConfig:
    """structlog 配置核心类.

    负责配置 structlog 的处理器链,并把应用级的全局上下文(应用名、版本、环境)
    注入到每一条日志事件中. 底层输出交给标准库 logging.

    Attributes:
        global_context: 每条日志都会携带的固定字段.
        renderer: 输出格式, ``json`` 或 ``console``.
        configured: 是否已配置标志.

    Example:
        >>> config = StructlogConfig()
        >>> config.configure()
        >>> logger = get_logger('my_module')

    """

    def __init__(self) -> None:
        self.global_context: dict[str, Any] = {"app_version": APP_VERSION}
        self.renderer = "json"
        self.configured = False

    def configure(self, app: Flask | None = None) -> None:
        """初始化 structlog 处理器.

        未传入 app 时幂等, 只在首次调用时使用默认的 JSON 渲染器配置;
        传入 app 时读取其日志配置并重建处理器链, 使 `LOG_FORMAT` / `LOG_LEVEL` 生效.

        Args:
            app: Flask 应用实例,可选.

        Returns:
            None.

        """
        if app is None and self.configured:
            return
        if app is not None:
            self._attach_app(app)

        structlog.configure(
            processors=self.build_processors(),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        self.configured = True

    def build_processors(self) -> list[Processor]:
        """按当前 renderer 构建处理器链."""
        return [
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            self._add_global_context,
            self._get_renderer(),
        ]

    def _attach_app(self, app: Flask) -> None:
        """读取 Flask 配置中的日志相关项.

        Args:
            app: 当前 Flask 应用.

        Returns:
            None.

        """
        self.global_context.update(
            {
                "app_name": app.config.get("APP_NAME"),
                "app_version": app.config.get("APP_VERSION", APP_VERSION),
                "environment": app.config.get("ENVIRONMENT"),
            },
        )
        self.renderer = str(app.config.get("LOG_FORMAT", "json"))

        level_name = str(app.config.get("LOG_LEVEL", "INFO"))
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter("%(message)s"))
            root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    def _add_global_context(
        self,
        _logger: BindableLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """向事件字典写入全局上下文,不覆盖调用方显式传入的字段."""
        for key, value in self.global_context.items():
            if value is not None:
                event_dict.setdefault(key, value)
        return event_dict

    def _get_renderer(self) -> Processor:
        if self.renderer == "console":
            return structlog.dev.ConsoleRenderer(colors=False)
        return structlog.processors.JSONRenderer(ensure_ascii=False)


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 日志记录器名称,通常使用模块名.

    Returns:
        绑定的 structlog 日志记录器实例.

    Example:
        >>> logger = get_logger('my_module')
        >>> logger.info('操作成功', field_id='hook')

    """
    structlog_config.configure()
    return cast("structlog.stdlib.BoundLogger", structlog.get_logger(name))


def configure_structlog(app: Flask) -> None:
    """配置 structlog 并注册 Flask 钩子.

    Args:
        app: Flask 应用实例.

    Returns:
        None.

    """
    structlog_config.configure(app)

    @app.teardown_appcontext
    def log_teardown_error(exception: BaseException | None) -> None:
        if exception:
            get_logger("app").error("应用请求处理异常", module="system", exception=str(exception))


def get_system_logger() -> structlog.stdlib.BoundLogger:
    """获取系统日志记录器."""
    return get_logger("system")


def get_api_logger() -> structlog.stdlib.BoundLogger:
    """获取 API 日志记录器."""
    return get_logger("api")


def get_form_config_logger() -> structlog.stdlib.BoundLogger:
    """获取表单配置日志记录器."""
    return get_logger("form_config")
