#!/usr/bin/env python3
"""
JumpCloud CLI
"""
import argparse
import json
import sys
from dataclasses import asdict

from jcapi import (
    JCAPIClient,
    JCAPIError,
    JCUser,
    JCSystem,
    JCTag,
)
from jcapi.config import get_logger, resolve_settings


def get_client(args) -> JCAPIClient:
    api_key, url = resolve_settings(args.key, args.url)
    if not api_key:
        raise ValueError("API key must be provided (--key or jc-config.json)")
    return JCAPIClient(api_key, url)


def user_to_dict(user: JCUser) -> dict:
    """JCUser 转 dict，tags 只保留名称"""
    d = asdict(user)
    d.pop("password", None)
    d["tags"] = [t.name for t in user.tags]
    return d


def system_to_dict(system: JCSystem) -> dict:
    d = asdict(system)
    d["tags"] = [t.name for t in system.tags]
    return d


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


# ========== 用户命令 ==========

def cmd_user_list(args):
    client = get_client(args)
    users = client.get_system_users(with_tags=args.tags)
    if args.format == "json":
        print_json([user_to_dict(u) for u in users])
        return 0
    print(f"{len(users)} users:\n")
    for u in users:
        status = "✓" if u.activated else "✗"
        line = f"  {status} {u.username} <{u.email}> [id: {u.id}]"
        if args.tags:
            line += f" tags: {', '.join(t.name for t in u.tags)}"
        print(line)
    return 0


def cmd_user_get(args):
    client = get_client(args)
    users = client.get_system_user_by_email(args.email, with_tags=True)
    if not users:
        print(f"User not found: {args.email}")
        return 1
    print_json([user_to_dict(u) for u in users])
    return 0


def cmd_user_delete(args):
    client = get_client(args)
    users = client.get_system_user_by_email(args.email)
    if not users:
        raise ValueError(f"User not found: {args.email}")
    for user in users:
        client.delete_user(user)
        print(f"✓ Deleted: {user.username} [id: {user.id}]")
    return 0


# ========== 主机命令 ==========

def cmd_system_list(args):
    client = get_client(args)
    systems = client.get_systems(with_tags=args.tags)
    if args.format == "json":
        print_json([system_to_dict(s) for s in systems])
        return 0
    print(f"{len(systems)} systems:\n")
    for s in systems:
        status = "✓" if s.active else "✗"
        print(f"  {status} {s.display_name} ({s.os} {s.version}) [id: {s.id}]")
    return 0


def cmd_system_get(args):
    client = get_client(args)
    print_json(system_to_dict(client.get_system_by_id(args.system_id, with_tags=True)))
    return 0


# ========== 标签命令 ==========

def cmd_tag_list(args):
    client = get_client(args)
    tags = client.get_all_tags()
    print(f"{len(tags)} tags:\n")
    for t in tags:
        print(f"  {t.name} [id: {t.id}] users: {len(t.system_users)} systems: {len(t.systems)}")
    return 0


def cmd_tag_get(args):
    client = get_client(args)
    tag: JCTag = client.get_tag_by_name(args.name)
    print_json(asdict(tag))
    return 0


# ========== 命令 ==========

def cmd_command_list(args):
    client = get_client(args)
    commands = client.get_all_commands()
    print(f"{len(commands)} commands:\n")
    for c in commands:
        print(f"  {c.name} ({c.command_type}, {c.launch_type}) [id: {c.id}]")
    return 0


def cmd_command_results(args):
    client = get_client(args)
    results = client.get_command_results_by_saved_command_id(args.command_id)
    if args.format == "json":
        print_json([asdict(r) for r in results])
        return 0
    print(f"{len(results)} results:\n")
    for r in results:
        print(f"  {r.system} @ {r.request_time} exit: {r.exit_code}")
        for line in r.output_lines():
            print(f"      {line}")
    return 0


# ========== 主函数 ==========

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='jc-cli', description='JumpCloud CLI')
    parser.add_argument('--key', default=None, help='JumpCloud Administrator API Key')
    parser.add_argument('--url', default=None, help='Alternative JumpCloud API URL')
    parser.add_argument('--debug', action='store_true', help='Log API requests')
    subparsers = parser.add_subparsers(dest='command', help='commands')

    # user 命令
    user_parser = subparsers.add_parser('user', help='system users')
    user_sub = user_parser.add_subparsers(dest='action')

    p = user_sub.add_parser('list', help='list users')
    p.add_argument('--format', choices=['table', 'json'], default='table')
    p.add_argument('--tags', action='store_true', help='include tags')
    p.set_defaults(func=cmd_user_list)

    p = user_sub.add_parser('get', help='find users by email')
    p.add_argument('email')
    p.set_defaults(func=cmd_user_get)

    p = user_sub.add_parser('delete', help='delete users by email')
    p.add_argument('email')
    p.set_defaults(func=cmd_user_delete)

    # system 命令
    system_parser = subparsers.add_parser('system', help='systems')
    system_sub = system_parser.add_subparsers(dest='action')

    p = system_sub.add_parser('list', help='list systems')
    p.add_argument('--format', choices=['table', 'json'], default='table')
    p.add_argument('--tags', action='store_true', help='include tags')
    p.set_defaults(func=cmd_system_list)

    p = system_sub.add_parser('get', help='get a system')
    p.add_argument('system_id')
    p.set_defaults(func=cmd_system_get)

    # tag 命令
    tag_parser = subparsers.add_parser('tag', help='tags')
    tag_sub = tag_parser.add_subparsers(dest='action')

    p = tag_sub.add_parser('list', help='list tags')
    p.set_defaults(func=cmd_tag_list)

    p = tag_sub.add_parser('get', help='get a tag by name')
    p.add_argument('name')
    p.set_defaults(func=cmd_tag_get)

    # command 命令
    command_parser = subparsers.add_parser('command', help='saved commands')
    command_sub = command_parser.add_subparsers(dest='action')

    p = command_sub.add_parser('list', help='list saved commands')
    p.set_defaults(func=cmd_command_list)

    p = command_sub.add_parser('results', help='show results of a saved command')
    p.add_argument('command_id')
    p.add_argument('--format', choices=['table', 'json'], default='table')
    p.set_defaults(func=cmd_command_results)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if not hasattr(args, 'func'):
        parser.parse_args([args.command, '-h'])
        return 0

    get_logger("jc-cli", debug=args.debug)
    try:
        return args.func(args) or 0
    except (JCAPIError, ValueError, OSError) as e:
        print(f"✗ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
