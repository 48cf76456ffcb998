"""Service facade scaffolding.

A facade binds one SOAPTransport to the operations of one service. Every
operation wraps a typed request, allocates an empty typed response and
hands both to ``SOAPTransport.call`` with an empty SOAPAction: AdWords
discriminates the operation by the qualified name of the Body element.
"""

import ssl
from typing import Any, ClassVar, Optional, Type, TypeVar

from loguru import logger

from adwords.core.config import BasicAuth, ClientConfig
from adwords.core.constants import ServiceGroup
from adwords.core.exceptions import ConfigurationError
from adwords.soap.headers import SoapHeader
from adwords.soap.transport import SOAPTransport

T = TypeVar("T")
F = TypeVar("F", bound="ServiceFacade")


class ServiceFacade:
    """Base class of the per-service facades."""

    service_name: ClassVar[str] = ""
    service_group: ClassVar[ServiceGroup] = ServiceGroup.CM

    def __init__(
        self,
        url: str = "",
        insecure_skip_verify: bool = False,
        basic_auth: Optional[BasicAuth] = None,
        *,
        transport: Optional[SOAPTransport] = None,
        **transport_kwargs: Any,
    ):
        """Initialize the facade.

        Args:
            url: Endpoint URL of the service
            insecure_skip_verify: Disable certificate validation (opt-in)
            basic_auth: Optional HTTP Basic credentials
            transport: Prebuilt transport; replaces the three arguments above
            **transport_kwargs: Passed to SOAPTransport

        Raises:
            ConfigurationError: If neither a URL nor a transport is given
        """
        if transport is None:
            if not url:
                raise ConfigurationError(f"{type(self).__name__} requires an endpoint URL")
            transport = SOAPTransport(url, insecure_skip_verify, basic_auth, **transport_kwargs)
        self.transport = transport

    @classmethod
    def with_ssl_context(
        cls: Type[F],
        url: str,
        ssl_context: ssl.SSLContext,
        basic_auth: Optional[BasicAuth] = None,
        **transport_kwargs: Any,
    ) -> F:
        """Create the facade from a prepared TLS configuration."""
        transport = SOAPTransport.with_ssl_context(url, ssl_context, basic_auth, **transport_kwargs)
        return cls(transport=transport)

    @classmethod
    def from_config(cls: Type[F], config: ClientConfig, **transport_kwargs: Any) -> F:
        """Create the facade and attach the AdWords SOAP header.

        Args:
            config: Loaded client configuration
            **transport_kwargs: Passed to SOAPTransport (e.g. ssl_context)
        """
        url = config.service_url(cls.service_group, cls.service_name)
        transport = SOAPTransport.from_config(config.transport_config(url), **transport_kwargs)
        facade = cls(transport=transport)
        facade.add_header(SoapHeader.from_config(config.header_config()))
        logger.debug(f"Created {cls.service_name} client for {url}")
        return facade

    def add_header(self, header: Any) -> None:
        """Register a SOAP header sent with every call of this service."""
        self.transport.add_header(header)

    def set_header(self, header: Any) -> None:
        """Backwards-compatible alias of add_header."""
        self.add_header(header)

    def _invoke(self, request: Any, response_type: Type[T], **call_kwargs: Any) -> T:
        response = response_type()
        self.transport.call("", request, response, **call_kwargs)
        return response
