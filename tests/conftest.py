"""Shared fixtures.

Most HTTP never leaves the process: ``FakeAdapter`` is mounted on the session
the transport creates for each call and answers with a canned response.
``loopback_server`` runs a real socket on 127.0.0.1 for tests that need a
connection which stalls.
"""

import io
import os
import socket
import threading

import pytest
import requests
from lxml import etree
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from adwords.core.config import ClientConfig
from adwords.core.constants import SOAP_ENV_NAMESPACE
from adwords.soap.transport import SOAPTransport

ENDPOINT = "https://adwords.example.test/api/adwords/cm/v201802/AdGroupCriterionService"


class FakeAdapter(BaseAdapter):
    """Transport adapter that records requests and replays one response.

    Args:
        status: HTTP status to answer with
        body: Response body
        error: Exception raised instead of answering
        raw_factory: Builds the raw stream; defaults to a BytesIO of ``body``
    """

    def __init__(self, status=200, body=b"", error=None, raw_factory=None):
        super().__init__()
        self.status = status
        self.body = body
        self.error = error
        self.raw_factory = raw_factory
        self.requests = []
        self.send_kwargs = []
        self.closed = False

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.send_kwargs.append({"stream": stream, "timeout": timeout, "verify": verify})
        if self.error is not None:
            raise self.error

        response = requests.Response()
        response.status_code = self.status
        response.headers = CaseInsensitiveDict({"Content-Type": "text/xml; charset=UTF-8"})
        response.raw = self.raw_factory() if self.raw_factory else io.BytesIO(self.body)
        response.url = request.url
        response.request = request
        response.reason = "OK" if self.status < 400 else "Server Error"
        response.encoding = "utf-8"
        return response

    def close(self):
        self.closed = True

    @property
    def last_request(self):
        return self.requests[-1]

    def sent_envelope(self):
        """Parse the body of the last request."""
        return etree.fromstring(self.last_request.body)


def soap_response(body_xml: str, header_xml: str = "") -> bytes:
    header = f"<soap:Header>{header_xml}</soap:Header>" if header_xml else ""
    return (
        f'<soap:Envelope xmlns:soap="{SOAP_ENV_NAMESPACE}">'
        f"{header}<soap:Body>{body_xml}</soap:Body></soap:Envelope>"
    ).encode("utf-8")


@pytest.fixture
def envelope_bytes():
    """Build a SOAP response envelope from Body (and Header) inner XML."""
    return soap_response


@pytest.fixture
def fake_adapter():
    """Factory of FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def attach():
    """Route every call of a transport through the given adapter."""

    def _attach(transport: SOAPTransport, adapter: FakeAdapter) -> FakeAdapter:
        transport._build_adapter = lambda: adapter
        return adapter

    return _attach


@pytest.fixture
def make_transport(attach):
    """Build a transport answering with a canned response.

    Returns a function ``(status=200, body=b"", **transport_kwargs)`` giving
    ``(transport, adapter)``.
    """

    def _make(status=200, body=b"", error=None, raw_factory=None, **kwargs):
        transport = SOAPTransport(kwargs.pop("url", ENDPOINT), **kwargs)
        adapter = attach(
            transport, FakeAdapter(status=status, body=body, error=error, raw_factory=raw_factory)
        )
        return transport, adapter

    return _make


@pytest.fixture
def client_config():
    return ClientConfig(
        developer_token="dev-token-123",
        client_customer_id="123-456-7890",
        user_agent="adwords-tests",
        endpoint_base="https://adwords.example.test/api/adwords",
    )


@pytest.fixture(autouse=True)
def clean_adwords_env(monkeypatch):
    """Keep ADWORDS_* variables of the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("ADWORDS_"):
            monkeypatch.delenv(name, raising=False)


STALL_SECONDS = 5.0


class LoopbackServer:
    """One-shot HTTP server on 127.0.0.1.

    Reads a single request, writes ``response`` and then, when ``stall`` is
    set, keeps the connection open without sending anything more until
    ``close`` is called or ``STALL_SECONDS`` elapse.
    """

    def __init__(self, response: bytes = b"", stall: bool = True):
        self.response = response
        self.stall = stall
        self.received = b""
        self._release = threading.Event()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        self._listener.settimeout(STALL_SECONDS)
        host, port = self._listener.getsockname()
        self.url = f"http://{host}:{port}/api/adwords/cm/v201802/AdGroupCriterionService"
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        with conn:
            self.received = self._read_request(conn)
            conn.sendall(self.response)
            if self.stall:
                self._release.wait(STALL_SECONDS)

    @staticmethod
    def _read_request(conn):
        data = b""
        while b"\r\n\r\n" not in data:
            chunk = conn.recv(65536)
            if not chunk:
                return data
            data += chunk
        head, _, body = data.partition(b"\r\n\r\n")
        length = 0
        for line in head.split(b"\r\n")[1:]:
            name, _, value = line.partition(b":")
            if name.strip().lower() == b"content-length":
                length = int(value.strip())
        while len(body) < length:
            chunk = conn.recv(65536)
            if not chunk:
                break
            body += chunk
        return head + b"\r\n\r\n" + body

    def close(self):
        self._release.set()
        self._listener.close()
        self._thread.join(STALL_SECONDS)


@pytest.fixture
def loopback_server(monkeypatch):
    """Factory of ``LoopbackServer`` instances, closed after the test."""
    for name in ("HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    servers = []

    def _start(response=b"", stall=True):
        server = LoopbackServer(response, stall=stall)
        servers.append(server)
        return server

    yield _start
    for server in servers:
        server.close()
