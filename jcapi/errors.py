"""
JumpCloud API 错误类型

调用方只需要捕获 JCAPIError，数据形状错误是它的子类。
"""


class JCAPIError(Exception):
    """JumpCloud API 错误 (请求构建、网络、状态码、读取、JSON 解码)"""
    def __init__(self, message: str, status: str | None = None):
        super().__init__(message)
        self.status = status


class JCDecodeError(JCAPIError):
    """响应数据类型与期望不符"""
    pass
