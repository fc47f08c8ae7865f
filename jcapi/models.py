"""
JumpCloud 数据模型

对应 JumpCloud v1 REST API 的资源：
- /systemusers: 用户
- /systems: 受管主机
- /tags: 标签 (用户、主机按 id 归组)
- /commands: 保存的命令
- /commandresults: 命令执行结果

API 限制和约定：
- 资源 id 字段是 _id
- 列表接口返回 {"totalCount": N, "results": [...]}
- 标签只记录成员 id，用户/主机所属标签需要扫描所有标签得到
"""

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .coerce import (
    extract_string_array,
    get_bool_or_nil,
    get_string_or_nil,
    get_uint16_or_nil,
    require_object,
)
from .filters import Fragment


class JCOp(IntEnum):
    """
    逻辑操作类型

    通过 client.map_op_to_http 映射为 HTTP 方法
    """
    READ = 1
    INSERT = 2
    UPDATE = 3
    DELETE = 4
    LIST = 5


def _resource_id(data: dict) -> str:
    """v1 API 用 _id，部分接口返回 id"""
    return get_string_or_nil(data.get("_id")) or get_string_or_nil(data.get("id"))


# ============ Tag ============

@dataclass
class JCTag:
    """
    标签 (tags)

    systems / system_users 是成员 id 列表，没有引用完整性保证
    """
    name: str
    id: str = ""
    group_name: str = ""
    systems: list[str] = field(default_factory=list)
    system_users: list[str] = field(default_factory=list)
    regular_expressions: list[str] = field(default_factory=list)
    external_dn: str = ""
    external_source_type: str = ""
    externally_managed: bool = False
    expiration_time: str = ""
    expired: bool = False
    selected: bool = False

    def to_json(self) -> bytes:
        """
        转换为请求体

        用片段构建器拼接，布尔字段输出为 "true"/"false" 字符串
        """
        fragments = [
            Fragment.key_value("name", self.name),
            Fragment.key_value("groupName", self.group_name),
            Fragment.string_array("systems", self.systems),
            Fragment.string_array("systemusers", self.system_users),
            Fragment.string_array("regularExpressions", self.regular_expressions),
            Fragment.key_value("externalDN", self.external_dn),
            Fragment.key_value("externalSourceType", self.external_source_type),
            Fragment.key_value_bool("externallyManaged", self.externally_managed),
            Fragment.key_value_bool("expired", self.expired),
            Fragment.key_value_bool("selected", self.selected),
        ]
        if self.expiration_time:
            fragments.append(Fragment.key_value("expirationTime", self.expiration_time))
        return Fragment.object(*fragments).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Any) -> "JCTag":
        data = require_object(data, "tag")
        return cls(
            id=_resource_id(data),
            name=get_string_or_nil(data.get("name")),
            group_name=get_string_or_nil(data.get("groupName")),
            systems=extract_string_array(data.get("systems")),
            system_users=extract_string_array(data.get("systemusers")),
            regular_expressions=extract_string_array(data.get("regularExpressions")),
            external_dn=get_string_or_nil(data.get("externalDN")),
            external_source_type=get_string_or_nil(data.get("externalSourceType")),
            externally_managed=get_bool_or_nil(data.get("externallyManaged")),
            expiration_time=get_string_or_nil(data.get("expirationTime")),
            expired=get_bool_or_nil(data.get("expired")),
            selected=get_bool_or_nil(data.get("selected")),
        )


# ============ User ============

@dataclass
class JCUser:
    """
    用户 (systemusers)

    tags 是派生字段，由 add_tags 计算，不会发送给 API
    """
    username: str
    email: str = ""
    id: str = ""
    firstname: str = ""
    lastname: str = ""
    password: str = ""
    sudo: bool = False
    passwordless_sudo: bool = False
    activated: bool = False
    allow_public_key: bool = False
    public_key: str = ""
    externally_managed: bool = False
    account_locked: bool = False
    tag_ids: list[str] = field(default_factory=list)

    tags: list[JCTag] = field(default_factory=list, repr=False)

    def add_tags(self, tags: list[JCTag]) -> None:
        """
        把包含该用户 id 的标签加入 self.tags

        线性扫描 (标签数 × 成员数)，成员列表里重复的 id 会导致重复添加
        """
        for tag in tags:
            for member_id in tag.system_users:
                if member_id == self.id:
                    self.tags.append(tag)

    def to_dict(self, include_id: bool = False) -> dict:
        """转换为 API 请求格式，password 为空时不发送"""
        d: dict = {
            "username": self.username,
            "email": self.email,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "sudo": self.sudo,
            "passwordless_sudo": self.passwordless_sudo,
            "activated": self.activated,
            "allow_public_key": self.allow_public_key,
            "externally_managed": self.externally_managed,
            "account_locked": self.account_locked,
            "tags": list(self.tag_ids),
        }
        if include_id and self.id:
            d["_id"] = self.id
        if self.password:
            d["password"] = self.password
        if self.public_key:
            d["public_key"] = self.public_key
        return d

    def to_json(self, include_id: bool = False) -> bytes:
        return json.dumps(self.to_dict(include_id=include_id)).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Any) -> "JCUser":
        """从 API 响应解析"""
        data = require_object(data, "system user")
        return cls(
            id=_resource_id(data),
            username=get_string_or_nil(data.get("username")),
            email=get_string_or_nil(data.get("email")),
            firstname=get_string_or_nil(data.get("firstname")),
            lastname=get_string_or_nil(data.get("lastname")),
            sudo=get_bool_or_nil(data.get("sudo")),
            passwordless_sudo=get_bool_or_nil(data.get("passwordless_sudo")),
            activated=get_bool_or_nil(data.get("activated")),
            allow_public_key=get_bool_or_nil(data.get("allow_public_key")),
            public_key=get_string_or_nil(data.get("public_key")),
            externally_managed=get_bool_or_nil(data.get("externally_managed")),
            account_locked=get_bool_or_nil(data.get("account_locked")),
            tag_ids=extract_string_array(data.get("tags")),
        )


# ============ System ============

@dataclass
class JCSystem:
    """
    受管主机 (systems)

    主机由 agent 注册，API 只能更新/删除，不能创建
    """
    id: str
    display_name: str = ""
    hostname: str = ""
    os: str = ""
    version: str = ""
    arch: str = ""
    agent_version: str = ""
    remote_ip: str = ""
    active: bool = False
    allow_ssh_root_login: bool = False
    allow_ssh_password_authentication: bool = False
    allow_multi_factor_authentication: bool = False
    allow_public_key_authentication: bool = False
    created: str = ""
    last_contact: str = ""
    tag_ids: list[str] = field(default_factory=list)

    tags: list[JCTag] = field(default_factory=list, repr=False)

    def add_tags(self, tags: list[JCTag]) -> None:
        """把包含该主机 id 的标签加入 self.tags"""
        for tag in tags:
            for system_id in tag.systems:
                if system_id == self.id:
                    self.tags.append(tag)

    def to_dict(self) -> dict:
        """可更新的字段"""
        return {
            "displayName": self.display_name,
            "allowSshRootLogin": self.allow_ssh_root_login,
            "allowSshPasswordAuthentication": self.allow_ssh_password_authentication,
            "allowMultiFactorAuthentication": self.allow_multi_factor_authentication,
            "allowPublicKeyAuthentication": self.allow_public_key_authentication,
            "tags": list(self.tag_ids),
        }

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Any) -> "JCSystem":
        data = require_object(data, "system")
        return cls(
            id=_resource_id(data),
            display_name=get_string_or_nil(data.get("displayName")),
            hostname=get_string_or_nil(data.get("hostname")),
            os=get_string_or_nil(data.get("os")),
            version=get_string_or_nil(data.get("version")),
            arch=get_string_or_nil(data.get("arch")),
            agent_version=get_string_or_nil(data.get("agentVersion")),
            remote_ip=get_string_or_nil(data.get("remoteIP")),
            active=get_bool_or_nil(data.get("active")),
            allow_ssh_root_login=get_bool_or_nil(data.get("allowSshRootLogin")),
            allow_ssh_password_authentication=get_bool_or_nil(data.get("allowSshPasswordAuthentication")),
            allow_multi_factor_authentication=get_bool_or_nil(data.get("allowMultiFactorAuthentication")),
            allow_public_key_authentication=get_bool_or_nil(data.get("allowPublicKeyAuthentication")),
            created=get_string_or_nil(data.get("created")),
            last_contact=get_string_or_nil(data.get("lastContact")),
            tag_ids=extract_string_array(data.get("tags")),
        )


# ============ Command ============

@dataclass
class JCCommand:
    """
    保存的命令 (commands)

    launch_type: manual / trigger / repeated / one-time
    """
    name: str
    command: str
    id: str = ""
    command_type: str = "linux"
    user: str = ""
    launch_type: str = "manual"
    schedule: str = ""
    schedule_repeat_type: str = ""
    timeout: str = ""
    sudo: bool = False
    systems: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d: dict = {
            "name": self.name,
            "command": self.command,
            "commandType": self.command_type,
            "launchType": self.launch_type,
            "sudo": self.sudo,
            "systems": self.systems,
            "tags": self.tags,
            "files": self.files,
        }
        if self.user:
            d["user"] = self.user
        if self.schedule:
            d["schedule"] = self.schedule
        if self.schedule_repeat_type:
            d["scheduleRepeatType"] = self.schedule_repeat_type
        if self.timeout:
            d["timeout"] = self.timeout
        return d

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Any) -> "JCCommand":
        data = require_object(data, "command")
        return cls(
            id=_resource_id(data),
            name=get_string_or_nil(data.get("name")),
            command=get_string_or_nil(data.get("command")),
            command_type=get_string_or_nil(data.get("commandType")),
            user=get_string_or_nil(data.get("user")),
            launch_type=get_string_or_nil(data.get("launchType")),
            schedule=get_string_or_nil(data.get("schedule")),
            schedule_repeat_type=get_string_or_nil(data.get("scheduleRepeatType")),
            timeout=get_string_or_nil(data.get("timeout")),
            sudo=get_bool_or_nil(data.get("sudo")),
            systems=extract_string_array(data.get("systems")),
            tags=extract_string_array(data.get("tags")),
            files=extract_string_array(data.get("files")),
        )


# ============ Command result ============

@dataclass
class JCCommandResult:
    """
    命令执行结果 (commandresults)

    system 是主机 id；output 是多行文本，原样保留
    request_time 格式由服务端决定，不做解析
    """
    system: str
    request_time: str = ""
    output: str = ""
    id: str = ""
    name: str = ""
    command: str = ""
    system_id: str = ""
    organization: str = ""
    user: str = ""
    sudo: bool = False
    response_time: str = ""
    response_id: str = ""
    response_error: str = ""
    exit_code: int = 0

    def output_lines(self) -> list[str]:
        """按行拆分 output，去掉首尾空白，跳过空行"""
        lines = []
        for line in self.output.split("\n"):
            line = line.strip()
            if line:
                lines.append(line)
        return lines

    @classmethod
    def from_dict(cls, data: Any) -> "JCCommandResult":
        data = require_object(data, "command result")

        response = data.get("response")
        if not isinstance(response, dict):
            response = {}
        response_data = response.get("data")
        if not isinstance(response_data, dict):
            response_data = {}

        return cls(
            id=_resource_id(data),
            name=get_string_or_nil(data.get("name")),
            command=get_string_or_nil(data.get("command")),
            system=get_string_or_nil(data.get("system")),
            system_id=get_string_or_nil(data.get("systemId")),
            organization=get_string_or_nil(data.get("organization")),
            user=get_string_or_nil(data.get("user")),
            sudo=get_bool_or_nil(data.get("sudo")),
            request_time=get_string_or_nil(data.get("requestTime")),
            response_time=get_string_or_nil(data.get("responseTime")),
            response_id=get_string_or_nil(response.get("id")),
            response_error=get_string_or_nil(response.get("error")),
            output=get_string_or_nil(response_data.get("output")),
            exit_code=get_uint16_or_nil(response_data.get("exitCode")),
        )


# ============ 响应类型 ============

@dataclass
class ListResponse:
    """
    列表响应

    列表接口返回 {"totalCount": N, "results": [...]}，
    commands/<id>/results 直接返回数组
    """
    total_count: int
    results: list

    @classmethod
    def from_response(cls, data: Any) -> "ListResponse":
        if isinstance(data, list):
            return cls(total_count=len(data), results=data)

        data = require_object(data, "list response")
        results = data.get("results")
        if not isinstance(results, list):
            results = []
        total = data.get("totalCount")
        if isinstance(total, bool) or not isinstance(total, int):
            total = len(results)
        return cls(total_count=total, results=results)
