import io
import threading
import urllib.error
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest import mock

import pytest

from oasvalidate import openapi_schemas
from oasvalidate.openapi_schemas import (
    clear_cache,
    extract_schema,
    get_file,
    load_schema_3_0,
    load_schema_3_1,
)


@pytest.fixture
def serve():
    servers = []

    def start(body: str, status: int) -> str:
        payload = body.encode("utf-8")

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self):
                self.send_response(status)
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            def log_message(self, *args):
                pass

        server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        host, port = server.server_address[:2]
        return f"http://{host}:{port}/schema.json"

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture(autouse=True)
def fresh_cache():
    clear_cache()
    yield
    clear_cache()


def _unreachable(*args, **kwargs):
    raise urllib.error.URLError("unreachable")


def _serving(body: str):
    def fake(*args, **kwargs):
        return io.BytesIO(body.encode("utf-8"))

    return fake


def test_load_schema_3_0_cached():
    with mock.patch.object(openapi_schemas.urllib.request, "urlopen", _unreachable):
        assert load_schema_3_0("cached schema 3.0") == "cached schema 3.0"
        assert load_schema_3_0("local schema 3.0") == "cached schema 3.0"


def test_load_schema_3_1_cached():
    with mock.patch.object(openapi_schemas.urllib.request, "urlopen", _unreachable):
        assert load_schema_3_1("cached schema 3.1") == "cached schema 3.1"
        assert load_schema_3_1("local schema 3.1") == "cached schema 3.1"


def test_caches_are_separate_per_version():
    with mock.patch.object(openapi_schemas.urllib.request, "urlopen", _unreachable):
        assert load_schema_3_0("three oh") == "three oh"
        assert load_schema_3_1("three one") == "three one"


def test_clear_cache_forgets_schema():
    with mock.patch.object(openapi_schemas.urllib.request, "urlopen", _unreachable):
        assert load_schema_3_0("first") == "first"
        clear_cache()
        assert load_schema_3_0("second") == "second"


def test_load_schema_3_0_remote_different():
    remote = '{"title": "OpenAPI 3.0"}'
    with mock.patch.object(openapi_schemas.urllib.request, "urlopen", _serving(remote)):
        assert load_schema_3_0('{"title": "Local Schema 3.0"}') == remote


def test_load_schema_3_1_remote_same():
    same = '{"title": "OpenAPI 3.1"}'
    with mock.patch.object(openapi_schemas.urllib.request, "urlopen", _serving(same)):
        assert load_schema_3_1(same) == same


def test_extract_schema_remote_different(serve):
    remote = '{"title": "Remote Schema"}'
    url = serve(remote, 200)
    assert extract_schema(url, '{"title": "Local Schema"}') == remote


def test_extract_schema_remote_same(serve):
    same = '{"title": "Same Schema"}'
    url = serve(same, 200)
    assert extract_schema(url, same) == same


def test_extract_schema_error_status_uses_body(serve):
    url = serve("", 500)
    local = '{"title": "Local Schema"}'
    result = extract_schema(url, local)
    assert result == ""


def test_get_file_reads_body(serve):
    url = serve("hello", 200)
    assert get_file(url) == b"hello"


def test_get_file_error():
    with pytest.raises(OSError):
        get_file("htttttp://981374918273")


def test_extract_schema_unfetchable_url_returns_local():
    assert extract_schema("htttttp://981374918273", "pingo") == "pingo"