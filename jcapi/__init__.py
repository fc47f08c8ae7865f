"""
JumpCloud API Client

JumpCloud v1 REST API 的 Python 客户端。
"""

from .models import (
    JCOp,
    JCUser,
    JCTag,
    JCSystem,
    JCCommand,
    JCCommandResult,
    ListResponse,
)

from .client import JCAPIClient, STD_URL_BASE, RESPONSE_SIZE, map_op_to_http
from .errors import JCAPIError, JCDecodeError
from .filters import Fragment, email_filter, get_time_string
from .coerce import (
    extract_string_array,
    get_string_or_nil,
    get_uint16_or_nil,
    get_bool_or_nil,
)

__all__ = [
    # Client
    "JCAPIClient",
    "STD_URL_BASE",
    "RESPONSE_SIZE",
    "map_op_to_http",
    # Errors
    "JCAPIError",
    "JCDecodeError",
    # Models
    "JCOp",
    "JCUser",
    "JCTag",
    "JCSystem",
    "JCCommand",
    "JCCommandResult",
    "ListResponse",
    # JSON
    "Fragment",
    "email_filter",
    "get_time_string",
    "extract_string_array",
    "get_string_or_nil",
    "get_uint16_or_nil",
    "get_bool_or_nil",
]
