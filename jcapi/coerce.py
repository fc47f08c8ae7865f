"""
JSON 值类型转换

json.loads 返回的是无类型的值，字段需要手动取出。

约定 (兼容旧调用方，不要"修正"):
- 数组提取是严格的: 任何元素不是字符串都会报错
- 标量提取是宽松的: 类型不符时返回零值 ("" / 0 / False)
"""

from typing import Any

from .errors import JCDecodeError

UINT16_MAX = 0xFFFF


def extract_string_array(values: Any) -> list[str]:
    """
    提取字符串数组 (严格)

    Args:
        values: 解码后的 JSON 数组，None 视为空数组

    Raises:
        JCDecodeError: 不是数组，或者有元素不是字符串
    """
    if values is None:
        return []
    if not isinstance(values, list):
        raise JCDecodeError(f"expected a JSON array, got {type(values).__name__}")

    result = []
    for i, value in enumerate(values):
        if not isinstance(value, str):
            raise JCDecodeError(
                f"array element {i} is {type(value).__name__}, expected string"
            )
        result.append(value)
    return result


def get_string_or_nil(value: Any) -> str:
    """取字符串，类型不符返回空串"""
    if isinstance(value, str):
        return value
    return ""


def get_uint16_or_nil(value: Any) -> int:
    """取 0..65535 的整数，类型不符或越界返回 0"""
    # bool 是 int 的子类
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    if value < 0 or value > UINT16_MAX:
        return 0
    return value


def get_bool_or_nil(value: Any) -> bool:
    """取布尔值，类型不符返回 False"""
    if isinstance(value, bool):
        return value
    return False


def require_object(data: Any, kind: str) -> dict:
    """资源必须是 JSON 对象"""
    if not isinstance(data, dict):
        raise JCDecodeError(f"{kind}: expected a JSON object, got {type(data).__name__}")
    return data
