"""
HTTP状态码常量

参考: https://developer.mozilla.org/en-US/docs/Web/HTTP/Status
"""


class HttpStatus:
    """HTTP状态码常量

    仅保留表单配置 API 实际使用的状态码。
    """

    OK = 200                    # 请求成功
    CREATED = 201               # 字段创建成功

    BAD_REQUEST = 400           # 请求体或配置校验失败
    NOT_FOUND = 404             # 字段不存在
    CONFLICT = 409              # id / fieldKey 冲突

    INTERNAL_SERVER_ERROR = 500  # 服务器内部错误
    SERVICE_UNAVAILABLE = 503    # 配置存储不可写
