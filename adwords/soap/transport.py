"""HTTPS transport for SOAP calls.

One ``call`` is one synchronous round-trip: encode the envelope, POST it
over a fresh connection, read the whole response, decode it. The transport
keeps no per-call state; the only shared mutable state is the list of
persistent header items, which is copied under a lock at the start of
every call.
"""

import socket
import ssl
import threading
import time
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool
from urllib3.poolmanager import PoolManager, ProxyManager

from adwords.core.config import BasicAuth, TransportConfig
from adwords.core.constants import CONNECT_TIMEOUT_SECONDS, CONTENT_TYPE, USER_AGENT
from adwords.core.exceptions import (
    CallCancelledError,
    ConnectTimeoutError,
    DeadlineExceededError,
    HTTPStatusError,
    ProtocolError,
    TransportError,
)
from adwords.core.protocols import PayloadLogger, XmlUnmarshaller
from adwords.schema.xml_model import XmlRecord
from adwords.soap.envelope import (
    MISSING_CONTENT,
    Body,
    ContentDecoder,
    Envelope,
    Header,
    decode_envelope,
    encode_envelope,
)
from adwords.utils.logging import redact_payload, sanitize_headers, soap_logger

READ_CHUNK_SIZE = 64 * 1024


class CancelToken:
    """Thread-safe cancellation handle for one or more calls.

    A call checks the token before connecting and between received chunks.
    Callbacks registered by an in-flight call run when ``cancel`` is called;
    the transport registers one that shuts down the call's sockets, so a
    read blocked on a silent server returns at once.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` on cancellation.

        Returns:
            A function that unregisters the callback
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)

                def unregister():
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return unregister
        callback()
        return lambda: None

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CallCancelledError("SOAP call cancelled")


class _SocketTracker:
    """Sockets opened for one call, shut down together on abort.

    ``shutdown`` wakes a thread blocked in ``recv`` on the same socket,
    which closing the session's pool does not. A socket connected after
    the abort is shut down as soon as it is registered.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sockets: List[socket.socket] = []
        self._aborted = False

    def add(self, sock: socket.socket) -> None:
        with self._lock:
            if not self._aborted:
                self._sockets.append(sock)
                return
        _shutdown(sock)

    def abort(self) -> None:
        with self._lock:
            self._aborted = True
            sockets, self._sockets = self._sockets, []
        for sock in sockets:
            _shutdown(sock)


def _shutdown(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        # Already closed by the peer or by urllib3
        logger.debug(f"Socket shutdown skipped: {e}")


class _TrackedConnectionMixin:
    def __init__(self, *args, tracker: _SocketTracker, **kwargs):
        self._tracker = tracker
        super().__init__(*args, **kwargs)

    def connect(self):
        super().connect()
        self._tracker.add(self.sock)


class _TrackedHTTPConnection(_TrackedConnectionMixin, HTTPConnection):
    pass


class _TrackedHTTPSConnection(_TrackedConnectionMixin, HTTPSConnection):
    pass


class _TrackedHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = _TrackedHTTPConnection


class _TrackedHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = _TrackedHTTPSConnection


class TLSAdapter(HTTPAdapter):
    """HTTP adapter that hands a prepared SSLContext to urllib3.

    Every socket the adapter opens is tracked, so ``abort`` can interrupt a
    connection that is blocked waiting for the server.
    """

    def __init__(self, ssl_context: Optional[ssl.SSLContext] = None, **kwargs):
        # HTTPAdapter.__init__ calls init_poolmanager, which reads both
        self.ssl_context = ssl_context
        self.tracker = _SocketTracker()
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        if self.ssl_context is not None:
            pool_kwargs["ssl_context"] = self.ssl_context
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)
        self._track(self.poolmanager)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        if self.ssl_context is not None:
            proxy_kwargs["ssl_context"] = self.ssl_context
        manager = super().proxy_manager_for(proxy, **proxy_kwargs)
        # SOCKS managers bring their own pool classes
        if isinstance(manager, ProxyManager):
            self._track(manager)
        return manager

    def cert_verify(self, conn, url, verify, cert):
        if self.ssl_context is not None and verify:
            # A CA bundle path would be loaded into the caller's context
            verify = True
        super().cert_verify(conn, url, verify, cert)

    def build_connection_pool_key_attributes(self, request, verify, cert=None):
        if self.ssl_context is not None and verify:
            verify = True
        return super().build_connection_pool_key_attributes(request, verify, cert)

    def abort(self) -> None:
        """Shut down every socket opened through this adapter."""
        self.tracker.abort()

    def _track(self, manager: PoolManager) -> None:
        manager.pool_classes_by_scheme = {
            "http": partial(_TrackedHTTPConnectionPool, tracker=self.tracker),
            "https": partial(_TrackedHTTPSConnectionPool, tracker=self.tracker),
        }


class SOAPTransport:
    """Owns one endpoint: URL, TLS settings, Basic credentials and headers."""

    def __init__(
        self,
        url: str,
        insecure_skip_verify: bool = False,
        basic_auth: Optional[BasicAuth] = None,
        *,
        ssl_context: Optional[ssl.SSLContext] = None,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        log_payloads: bool = False,
        redact_credentials: bool = True,
        payload_logger: Optional[PayloadLogger] = None,
    ):
        """Initialize the transport.

        Args:
            url: Endpoint URL
            insecure_skip_verify: Disable certificate validation. Opt-in only;
                the server's identity is no longer checked
            basic_auth: Optional HTTP Basic credentials
            ssl_context: Fully prepared TLS configuration (ciphers, roots,
                pinning); takes precedence over ``insecure_skip_verify``
            connect_timeout: Seconds allowed to establish the TCP connection
            user_agent: HTTP User-Agent sent with every request
            log_payloads: Write request and response bodies to the payload logger
            redact_credentials: Mask credentials in logged payloads
            payload_logger: Logger for payloads, defaults to loguru
        """
        self.url = url
        self.insecure_skip_verify = insecure_skip_verify
        self.basic_auth = basic_auth
        self.ssl_context = ssl_context
        self.connect_timeout = connect_timeout
        self.user_agent = user_agent
        self.log_payloads = log_payloads
        self.redact_credentials = redact_credentials
        self.payload_logger = payload_logger or soap_logger()

        self._headers: List[Any] = []
        self._lock = threading.Lock()

        if ssl_context is None and insecure_skip_verify:
            logger.warning(f"TLS certificate verification is disabled for {url}")

    @classmethod
    def with_ssl_context(
        cls,
        url: str,
        ssl_context: ssl.SSLContext,
        basic_auth: Optional[BasicAuth] = None,
        **kwargs: Any,
    ) -> "SOAPTransport":
        """Create a transport from a prepared TLS configuration."""
        return cls(url, basic_auth=basic_auth, ssl_context=ssl_context, **kwargs)

    @classmethod
    def from_config(cls, config: TransportConfig, **kwargs: Any) -> "SOAPTransport":
        return cls(
            config.url,
            insecure_skip_verify=config.insecure_skip_verify,
            basic_auth=config.basic_auth,
            connect_timeout=config.connect_timeout,
            user_agent=config.user_agent,
            log_payloads=config.log_payloads,
            redact_credentials=config.redact_credentials,
            **kwargs,
        )

    def add_header(self, item: Any) -> None:
        """Append a persistent header item.

        Insertion order is kept and nothing is de-duplicated.

        Args:
            item: XmlMarshaller or lxml element
        """
        with self._lock:
            self._headers.append(item)

    @property
    def headers(self) -> Tuple[Any, ...]:
        """Snapshot of the persistent header items."""
        with self._lock:
            return tuple(self._headers)

    def call(
        self,
        soap_action: str,
        request: Any,
        response: Any,
        *,
        headers: Optional[Sequence[Any]] = None,
        cancel_token: Optional[CancelToken] = None,
        timeout: Optional[float] = None,
    ) -> Optional[Envelope]:
        """Perform one SOAP round-trip.

        Args:
            soap_action: SOAPAction HTTP header value, may be empty
            request: Body content; an XmlMarshaller or lxml element
            response: Target filled from the response Body element
            headers: Extra header items for this call only, sent after the
                persistent ones
            cancel_token: Optional cancellation handle
            timeout: Optional overall deadline in seconds

        Returns:
            The decoded response envelope, or None if the HTTP body was empty
            (the response target is then left untouched)

        Raises:
            SOAPFault: If the server answered with a Fault
            ProtocolError: If the response is not a valid envelope
            DecodingError: If the Body element does not fit the target
            TransportError: On network, TLS or socket errors
            HTTPStatusError: On a non-2xx status without a Fault
            CallCancelledError: If cancelled or past the deadline
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        decode_content = self._content_decoder(response)

        items = list(self.headers)
        if headers:
            items.extend(headers)

        envelope = Envelope(body=Body(content=request))
        if items:
            envelope.header = Header(items=items)

        payload = encode_envelope(envelope)
        self._log_payload("SOAP request", payload)

        status_code, raw_body = self._post(soap_action, payload, cancel_token, deadline)

        if not raw_body:
            logger.debug("empty response")
            if not 200 <= status_code < 300:
                raise HTTPStatusError("Empty response", status_code=status_code)
            return None

        self._log_payload("SOAP response", raw_body)

        try:
            response_envelope = decode_envelope(raw_body, decode_content)
        except ProtocolError:
            if not 200 <= status_code < 300:
                raise HTTPStatusError(
                    "Non-SOAP error response",
                    status_code=status_code,
                    response_body=raw_body.decode("utf-8", "replace"),
                )
            raise

        fault = response_envelope.body.fault
        if fault is not None:
            fault.status_code = status_code
            raise fault

        if not 200 <= status_code < 300:
            raise HTTPStatusError("SOAP response with error status", status_code=status_code)

        return response_envelope

    def _content_decoder(self, response: Any) -> ContentDecoder:
        if isinstance(response, XmlRecord):
            return response.load_root
        if not isinstance(response, XmlUnmarshaller):
            raise ProtocolError(MISSING_CONTENT)
        return response.load_element

    def _create_session(self, adapter: HTTPAdapter) -> requests.Session:
        """Create a single-use session; nothing is pooled across calls."""
        session = requests.Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        if self.ssl_context is not None:
            session.verify = self.ssl_context.verify_mode != ssl.CERT_NONE
        else:
            session.verify = not self.insecure_skip_verify

        if self.basic_auth is not None:
            session.auth = HTTPBasicAuth(self.basic_auth.login, self.basic_auth.password)

        return session

    def _build_adapter(self) -> HTTPAdapter:
        return TLSAdapter(ssl_context=self.ssl_context)

    def _http_headers(self, soap_action: str) -> Dict[str, str]:
        return {
            "Content-Type": CONTENT_TYPE,
            "SOAPAction": soap_action,
            "User-Agent": self.user_agent,
            "Connection": "close",
        }

    def _timeouts(self, deadline: Optional[float]) -> Tuple[float, Optional[float]]:
        if deadline is None:
            return self.connect_timeout, None
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DeadlineExceededError("SOAP call deadline exceeded before sending")
        return min(self.connect_timeout, remaining), remaining

    def _post(
        self,
        soap_action: str,
        payload: bytes,
        cancel_token: Optional[CancelToken],
        deadline: Optional[float],
    ) -> Tuple[int, bytes]:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        http_headers = self._http_headers(soap_action)
        logger.debug(f"POST {self.url}")
        logger.debug(f"Headers: {sanitize_headers(http_headers)}")

        adapter = self._build_adapter()
        session = self._create_session(adapter)
        abort = partial(self._abort, session, adapter)
        expired = threading.Event()
        unregister = cancel_token.register(abort) if cancel_token is not None else None
        timer = self._start_deadline_timer(deadline, expired, abort)
        started = time.monotonic()

        try:
            response = session.post(
                self.url,
                data=payload,
                headers=http_headers,
                timeout=self._timeouts(deadline),
                stream=True,
            )
            try:
                chunks = []
                for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                    self._check_aborted(cancel_token, deadline, expired)
                    chunks.append(chunk)
                # An aborted socket can look like a server closing the body
                self._check_aborted(cancel_token, deadline, expired)
                status_code = response.status_code
            finally:
                response.close()

        except requests.exceptions.ConnectTimeout as e:
            self._check_aborted(cancel_token, deadline, expired)
            raise ConnectTimeoutError(
                f"Connection timeout after {self.connect_timeout}s",
                url=self.url,
                details={"error": str(e)},
            ) from e
        except requests.exceptions.RequestException as e:
            self._check_aborted(cancel_token, deadline, expired)
            if deadline is not None and isinstance(e, requests.exceptions.ReadTimeout):
                # The read timeout is the remaining budget
                raise DeadlineExceededError("SOAP call deadline exceeded") from e
            raise TransportError(
                f"HTTP request failed: {type(e).__name__}",
                url=self.url,
                details={"error": str(e)},
            ) from e
        finally:
            if timer is not None:
                timer.cancel()
            if unregister is not None:
                unregister()
            session.close()

        raw_body = b"".join(chunks)
        logger.debug(
            f"HTTP {status_code} from {self.url}: {len(raw_body)} bytes "
            f"in {time.monotonic() - started:.3f}s"
        )
        return status_code, raw_body

    @staticmethod
    def _abort(session: requests.Session, adapter: HTTPAdapter) -> None:
        """Interrupt an in-flight call from another thread."""
        if isinstance(adapter, TLSAdapter):
            adapter.abort()
        session.close()

    @staticmethod
    def _start_deadline_timer(
        deadline: Optional[float],
        expired: threading.Event,
        abort: Callable[[], None],
    ) -> Optional[threading.Timer]:
        if deadline is None:
            return None

        def expire():
            expired.set()
            abort()

        timer = threading.Timer(max(deadline - time.monotonic(), 0.0), expire)
        timer.daemon = True
        timer.start()
        return timer

    @staticmethod
    def _check_aborted(
        cancel_token: Optional[CancelToken],
        deadline: Optional[float],
        expired: threading.Event,
    ) -> None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if expired.is_set():
            raise DeadlineExceededError("SOAP call deadline exceeded")
        if deadline is not None and time.monotonic() >= deadline:
            raise DeadlineExceededError("SOAP call deadline exceeded")

    def _log_payload(self, label: str, payload: bytes) -> None:
        if not self.log_payloads:
            return
        if self.redact_credentials:
            text = redact_payload(payload)
        else:
            text = payload.decode("utf-8", "replace")
        self.payload_logger.debug("{}:\n{}", label, text)
