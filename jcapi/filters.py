"""
JSON 片段构建器

JumpCloud 的 filter 语法要求 "数组里套对象" 的结构，json.dumps 直接生成的
结果服务端不认，所以这里手工拼接 JSON 文本。

注意:
- 值不做任何转义，调用方需要提前校验输入
- 布尔值输出为字符串 "true"/"false"，不是 JSON 布尔字面量
"""

from datetime import datetime


class Fragment:
    """
    JSON 片段

    示例:
        >>> Fragment.string_array("systems", ["s1", "s2"])
        '"systems":["s1","s2"]'

        >>> Fragment.key_value("name", "admins")
        '"name":"admins"'

        >>> Fragment.key_value_bool("expired", False)
        '"expired":"false"'

        >>> Fragment.object(Fragment.key_value("name", "admins"))
        '{"name":"admins"}'
    """

    @staticmethod
    def string_array(field: str, values: list[str] | None) -> str:
        """字符串数组字段，None 输出空数组"""
        items = ",".join(f'"{v}"' for v in values or [])
        return f'"{field}":[{items}]'

    @staticmethod
    def key_value(key: str, value: str) -> str:
        """字符串键值对"""
        return f'"{key}":"{value}"'

    @staticmethod
    def key_value_bool(key: str, value: bool) -> str:
        """
        布尔键值对

        服务端期望字符串形式的布尔值，保持 "true"/"false" 带引号输出
        """
        if value:
            return f'"{key}":"true"'
        return f'"{key}":"false"'

    @staticmethod
    def object(*fragments: str) -> str:
        """把若干片段拼成一个 JSON 对象"""
        return "{" + ",".join(fragments) + "}"


def email_filter(email: str) -> bytes:
    """
    按 email 搜索用户的 filter

    json.dumps({"filter": [...]}) 生成的内容服务端不认，保持原样拼接
    """
    return ('{"filter": [{"email" : "%s"}]}' % email).encode("utf-8")


def get_time_string() -> str:
    """当前时间 (RFC 3339)"""
    return datetime.now().astimezone().isoformat(timespec="seconds")
