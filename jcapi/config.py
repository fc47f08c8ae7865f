"""
命令行工具的配置

命令行参数优先，缺省时读取当前目录下的 jc-config.json:

    {"api_key": "...", "url": "https://console.jumpcloud.com/api"}
"""

import json
import logging
from pathlib import Path

from .client import STD_URL_BASE

CONFIG_FILE = "jc-config.json"


def load_json(file: str) -> dict | list:
    path = Path(file)
    if not path.exists():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def resolve_settings(api_key: str | None, url: str | None, config_file: str = CONFIG_FILE) -> tuple[str, str]:
    """
    合并命令行参数和配置文件

    Returns:
        (api_key, url)，api_key 可能为空串，由调用方判断

    Raises:
        ValueError: 配置文件不是 JSON 对象
    """
    config = {}
    if not api_key or not url:
        config = load_json(config_file)
        if not isinstance(config, dict):
            raise ValueError(f"{config_file} must contain a JSON object")

    return (
        api_key or config.get("api_key") or "",
        url or config.get("url") or STD_URL_BASE,
    )


def get_logger(name: str, debug: bool = False) -> logging.Logger:
    """命令行工具用的 logger，输出到 stderr"""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(handler)
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    # 客户端的调试输出也走同一个级别
    logging.getLogger("jcapi").setLevel(level)
    if debug and not logging.getLogger("jcapi").handlers:
        logging.getLogger("jcapi").addHandler(logger.handlers[0])
    return logger
