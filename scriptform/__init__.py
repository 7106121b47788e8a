"""ScriptForm - Flask 应用初始化.

视频制作工作流中 Script Writer 选题表单的动态字段配置服务.
"""

from __future__ import annotations

from flask import Flask
from flask.typing import ResponseReturnValue

from scriptform.api.v1 import create_api_v1_blueprint
from scriptform.api.v1.resources.base import FORM_CONFIG_STORE_EXTENSION
from scriptform.services.form_config import FormConfigStore, build_form_config_store
from scriptform.settings import Settings
from scriptform.utils.response_utils import jsonify_unified_error
from scriptform.utils.structlog_config import configure_structlog, get_system_logger


def create_app(
    *,
    settings: Settings | None = None,
    store: FormConfigStore | None = None,
) -> Flask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.
        store: 可选的表单配置 store; 缺省时按 settings 构造.

    Returns:
        Flask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__)

    # 配置应用
    app.config.from_mapping(resolved_settings.to_flask_config())

    # 配置统一日志系统
    configure_structlog(app)

    # 注入表单配置 store
    app.extensions[FORM_CONFIG_STORE_EXTENSION] = store or build_form_config_store(resolved_settings)

    # 注册蓝图
    app.register_blueprint(create_api_v1_blueprint(resolved_settings), url_prefix="/api/v1")

    # 注册全局错误处理器
    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> ResponseReturnValue:
        """全局错误处理."""
        return jsonify_unified_error(error)

    get_system_logger().info(
        "app_created",
        form_config_backend=resolved_settings.form_config_backend,
        storage_key=resolved_settings.form_config_storage_key,
    )
    return app


__all__ = ["create_app"]
