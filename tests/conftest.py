"""Shared fixtures for the proxy tests."""
import json

import httpx
import pytest

from tago_proxy.config import Settings
from tago_proxy.tago_service import TagoService


def build_tago_json(item=None, result_code="00"):
    """Build a TAGO JSON body; item may be a dict, a list or None."""
    body = {"items": {"item": item} if item is not None else "", "numOfRows": 100, "pageNo": 1}
    return json.dumps({
        "response": {
            "header": {"resultCode": result_code, "resultMsg": "NORMAL SERVICE."},
            "body": body,
        }
    }, ensure_ascii=False)


class UpstreamStub:
    """Stand-in for the TAGO API recording the requests it receives."""

    def __init__(self, status_code=200, text=None, exc=None):
        self.status_code = status_code
        self.text = text if text is not None else build_tago_json()
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, text=self.text)


@pytest.fixture
def tago_json():
    """Builder for TAGO JSON response bodies."""
    return build_tago_json


@pytest.fixture
def upstream_stub():
    """Factory for TAGO API stand-ins."""
    return UpstreamStub


@pytest.fixture
def settings():
    """Settings with a configured service key and no .env lookup."""
    return Settings(
        _env_file=None,
        tago_service_key="test-key",
        tago_base_url="http://tago.test/1613000/BusLcInfoInqireService",
    )


@pytest.fixture
def make_service(settings):
    """Build a TagoService wired to an UpstreamStub."""
    def factory(stub, service_settings=None):
        client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        return TagoService(service_settings or settings, client)

    return factory
