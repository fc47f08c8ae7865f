import json
import logging

import httpx
import pytest

from jcapi import JCAPIClient


class Recorder:
    """记录收到的请求，按 (method, path) 返回预设响应"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], tuple[int, bytes]] = {}

    def add(self, method: str, path: str, payload=None, status: int = 200, content: bytes | None = None):
        if content is None:
            content = json.dumps(payload).encode("utf-8")
        self.routes[(method, path)] = (status, content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404)
        status, content = self.routes[key]
        return httpx.Response(status, content=content)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def client(recorder):
    return JCAPIClient("test-key", "https://jc.example.com/api", transport=httpx.MockTransport(recorder))


@pytest.fixture(autouse=True)
def reset_cli_loggers():
    yield
    for name in ("jcapi", "jc-cli", "export_command_results_csv"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
