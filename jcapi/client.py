"""
JumpCloud API HTTP Client

使用 httpx 实现，处理 JumpCloud v1 API 的约定：
- 认证用 x-api-key 头
- 只有 "200 OK" 视为成功
- 列表操作使用非标准的 LIST 方法
- 每次请求新建连接，不复用
"""

import json
import logging
from typing import Any

import httpx
from httpx import BaseTransport, Client

from .errors import JCAPIError
from .filters import email_filter
from .models import (
    JCOp,
    JCUser,
    JCTag,
    JCSystem,
    JCCommand,
    JCCommandResult,
    ListResponse,
)

logger = logging.getLogger(__name__)

# 文档中的最大响应大小，传输层不强制
RESPONSE_SIZE = 256 * 1024
STD_URL_BASE = "https://console.jumpcloud.com/api"


def map_op_to_http(op: JCOp) -> str:
    """逻辑操作 -> HTTP 方法，未知操作返回空串"""
    if op == JCOp.READ:
        return "GET"
    if op == JCOp.INSERT:
        return "POST"
    if op == JCOp.UPDATE:
        return "PUT"
    if op == JCOp.DELETE:
        return "DELETE"
    if op == JCOp.LIST:
        return "LIST"
    return ""


class JCAPIClient:
    """
    JumpCloud API 客户端

    配置构造后不可变。transport 只在测试中替换，
    每次调用都会用它新建一个 httpx.Client。
    """

    def __init__(self, api_key: str, url_base: str = STD_URL_BASE, transport: BaseTransport | None = None):
        """
        初始化客户端

        Args:
            api_key: JumpCloud 管理员 API key
            url_base: API 根地址
            transport: 自定义 httpx transport
        """
        self._api_key = api_key
        self._url_base = url_base
        self._transport = transport

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def url_base(self) -> str:
        return self._url_base

    def __repr__(self) -> str:
        return f"JCAPIClient(url_base={self._url_base!r})"

    # ============ 底层请求方法 ============

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-api-key": self._api_key,
        }

    def do(self, op: str, url: str, data: bytes | None = None) -> Any:
        """
        执行请求并解码 JSON

        Args:
            op: HTTP 方法，原样发送 (包括 LIST)
            url: 拼接在 url_base 之后的路径
            data: 请求体

        Returns:
            json.loads 的结果

        Raises:
            JCAPIError: 构建请求、网络、状态码、读取、解码任一阶段失败
        """
        full_url = self._url_base + url
        logger.debug("JCAPIClient.do(): op='%s' - url='%s' - data='%s'", op, full_url, data)

        # 不设超时，跟随重定向
        with Client(transport=self._transport, timeout=None, follow_redirects=True) as http:
            try:
                req = http.build_request(op, full_url, content=data, headers=self._headers())
            except (httpx.InvalidURL, ValueError, TypeError) as e:
                raise JCAPIError(f"Could not build request: '{e}'") from e

            try:
                resp = http.send(req, stream=True)
            except httpx.HTTPError as e:
                raise JCAPIError(f"Request failed, err='{e}'") from e

            try:
                status = f"{resp.status_code} {resp.reason_phrase}"
                if status != "200 OK":
                    raise JCAPIError(f"JumpCloud HTTP response status='{status}'", status=status)

                try:
                    body = resp.read()
                except (httpx.HTTPError, httpx.StreamError) as e:
                    raise JCAPIError(f"Could not read the response body, err='{e}'") from e
            finally:
                resp.close()

        logger.debug("200 OK response body (%d bytes)", len(body))

        try:
            return json.loads(body)
        except ValueError as e:
            raise JCAPIError(f"Could not decode JSON response, err='{e}'") from e

    def _get(self, url: str) -> Any:
        """GET 请求"""
        return self.do(map_op_to_http(JCOp.READ), url)

    def _list(self, url: str) -> Any:
        """LIST 请求"""
        return self.do(map_op_to_http(JCOp.LIST), url)

    def _post(self, url: str, data: bytes) -> Any:
        """POST 请求"""
        return self.do(map_op_to_http(JCOp.INSERT), url, data)

    def _put(self, url: str, data: bytes) -> Any:
        """PUT 请求"""
        return self.do(map_op_to_http(JCOp.UPDATE), url, data)

    def _delete(self, url: str) -> Any:
        """DELETE 请求"""
        return self.do(map_op_to_http(JCOp.DELETE), url)

    # ============ User 操作 ============

    def get_system_users(self, with_tags: bool = False) -> list[JCUser]:
        """
        列出所有用户

        Args:
            with_tags: 是否同时查询标签并填充 user.tags
        """
        response = ListResponse.from_response(self._get("/systemusers"))
        users = [JCUser.from_dict(r) for r in response.results]
        if with_tags:
            self._attach_tags(users)
        return users

    def get_system_user_by_id(self, user_id: str, with_tags: bool = False) -> JCUser:
        """获取单个用户"""
        user = JCUser.from_dict(self._get(f"/systemusers/{user_id}"))
        if with_tags:
            self._attach_tags([user])
        return user

    def get_system_user_by_email(self, email: str, with_tags: bool = False) -> list[JCUser]:
        """
        按 email 搜索用户

        email 不做转义，调用方需要先校验
        """
        data = self._post("/search/systemusers", email_filter(email))
        users = [JCUser.from_dict(r) for r in ListResponse.from_response(data).results]
        if with_tags:
            self._attach_tags(users)
        return users

    def add_update_user(self, op: JCOp, user: JCUser) -> str:
        """
        创建或更新用户

        Returns:
            用户 id
        """
        if op == JCOp.INSERT:
            data = self._post("/systemusers", user.to_json())
        elif op == JCOp.UPDATE:
            if not user.id:
                raise JCAPIError("User id is required for update")
            data = self._put(f"/systemusers/{user.id}", user.to_json(include_id=True))
        else:
            raise JCAPIError(f"Unsupported operation for user: {op!r}")
        return JCUser.from_dict(data).id

    def delete_user(self, user: JCUser) -> None:
        """删除用户"""
        if not user.id:
            raise JCAPIError("User id is required for delete")
        self._delete(f"/systemusers/{user.id}")

    def _attach_tags(self, records: list) -> None:
        tags = self.get_all_tags()
        for record in records:
            record.add_tags(tags)

    # ============ Tag 操作 ============

    def get_all_tags(self) -> list[JCTag]:
        """列出所有标签"""
        response = ListResponse.from_response(self._get("/tags"))
        return [JCTag.from_dict(r) for r in response.results]

    def get_tag_by_name(self, name: str) -> JCTag:
        """按名称获取标签"""
        return JCTag.from_dict(self._get(f"/tags/{name}"))

    def add_update_tag(self, op: JCOp, tag: JCTag) -> str:
        """
        创建或更新标签

        Returns:
            标签 id
        """
        if op == JCOp.INSERT:
            data = self._post("/tags", tag.to_json())
        elif op == JCOp.UPDATE:
            if not tag.id:
                raise JCAPIError("Tag id is required for update")
            data = self._put(f"/tags/{tag.id}", tag.to_json())
        else:
            raise JCAPIError(f"Unsupported operation for tag: {op!r}")
        return JCTag.from_dict(data).id

    def delete_tag(self, tag: JCTag) -> None:
        """删除标签"""
        if not tag.id:
            raise JCAPIError("Tag id is required for delete")
        self._delete(f"/tags/{tag.id}")

    # ============ System 操作 ============

    def get_systems(self, with_tags: bool = False) -> list[JCSystem]:
        """列出所有主机"""
        response = ListResponse.from_response(self._get("/systems"))
        systems = [JCSystem.from_dict(r) for r in response.results]
        if with_tags:
            self._attach_tags(systems)
        return systems

    def get_system_by_id(self, system_id: str, with_tags: bool = False) -> JCSystem:
        """获取单个主机"""
        system = JCSystem.from_dict(self._get(f"/systems/{system_id}"))
        if with_tags:
            self._attach_tags([system])
        return system

    def update_system(self, system: JCSystem) -> JCSystem:
        """更新主机 (主机不能通过 API 创建)"""
        if not system.id:
            raise JCAPIError("System id is required for update")
        return JCSystem.from_dict(self._put(f"/systems/{system.id}", system.to_json()))

    def delete_system(self, system: JCSystem) -> None:
        """删除主机"""
        if not system.id:
            raise JCAPIError("System id is required for delete")
        self._delete(f"/systems/{system.id}")

    # ============ Command 操作 ============

    def get_all_commands(self) -> list[JCCommand]:
        """列出所有保存的命令"""
        response = ListResponse.from_response(self._get("/commands"))
        return [JCCommand.from_dict(r) for r in response.results]

    def get_command_by_name(self, name: str) -> JCCommand | None:
        """按名称查找命令，找不到返回 None"""
        for command in self.get_all_commands():
            if command.name == name:
                return command
        return None

    def add_update_command(self, op: JCOp, command: JCCommand) -> JCCommand:
        """创建或更新命令"""
        if op == JCOp.INSERT:
            data = self._post("/commands", command.to_json())
        elif op == JCOp.UPDATE:
            if not command.id:
                raise JCAPIError("Command id is required for update")
            data = self._put(f"/commands/{command.id}", command.to_json())
        else:
            raise JCAPIError(f"Unsupported operation for command: {op!r}")
        return JCCommand.from_dict(data)

    def delete_command(self, command: JCCommand) -> None:
        """删除命令"""
        if not command.id:
            raise JCAPIError("Command id is required for delete")
        self._delete(f"/commands/{command.id}")

    # ============ Command result 操作 ============

    def get_command_results_by_saved_command_id(self, command_id: str) -> list[JCCommandResult]:
        """获取某个保存命令的全部执行结果"""
        data = self._get(f"/commands/{command_id}/results")
        return [JCCommandResult.from_dict(r) for r in ListResponse.from_response(data).results]

    def get_command_result_details_by_id(self, result_id: str) -> JCCommandResult:
        """获取单个执行结果 (包含 output)"""
        return JCCommandResult.from_dict(self._get(f"/commandresults/{result_id}"))

    def delete_command_result(self, result_id: str) -> None:
        """删除执行结果"""
        self._delete(f"/commandresults/{result_id}")
