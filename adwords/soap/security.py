"""WS-Security 1.0 UsernameToken header.

The password travels as plain text (PasswordText profile). Confidentiality
relies entirely on TLS.
"""

from dataclasses import dataclass, field

from lxml import etree

from adwords.core.constants import (
    SOAP_ENV_NAMESPACE,
    USERNAME_TOKEN_PREFIX,
    WSSE_NAMESPACE,
    WSSE_PASSWORD_TEXT,
    WSU_NAMESPACE,
)
from adwords.soap.tokens import random_token


def _new_token_id() -> str:
    return USERNAME_TOKEN_PREFIX + random_token()


@dataclass
class UsernameToken:
    username: str
    password: str = field(repr=False)
    token_id: str = field(default_factory=_new_token_id)

    def to_element(self) -> etree._Element:
        element = etree.Element(
            f"{{{WSSE_NAMESPACE}}}UsernameToken",
            nsmap={"wsse": WSSE_NAMESPACE, "wsu": WSU_NAMESPACE},
        )
        element.set(f"{{{WSU_NAMESPACE}}}Id", self.token_id)
        etree.SubElement(element, f"{{{WSSE_NAMESPACE}}}Username").text = self.username
        password = etree.SubElement(element, f"{{{WSSE_NAMESPACE}}}Password")
        password.set("Type", WSSE_PASSWORD_TEXT)
        password.text = self.password
        return element


@dataclass
class SecurityHeader:
    """``wsse:Security`` header item holding one UsernameToken."""

    token: UsernameToken
    must_understand: str = ""

    def to_element(self) -> etree._Element:
        element = etree.Element(
            f"{{{WSSE_NAMESPACE}}}Security",
            nsmap={"wsse": WSSE_NAMESPACE, "soap": SOAP_ENV_NAMESPACE},
        )
        if self.must_understand:
            element.set(f"{{{SOAP_ENV_NAMESPACE}}}mustUnderstand", self.must_understand)
        element.append(self.token.to_element())
        return element


def build_username_token(user: str, password: str, must_understand: str = "") -> SecurityHeader:
    """Build a WS-Security header with a fresh token id.

    Args:
        user: Plain-text username
        password: Plain-text password
        must_understand: Passed through verbatim; "1" forces the server to
            process the header

    Returns:
        SecurityHeader ready for ``add_header``
    """
    return SecurityHeader(
        token=UsernameToken(username=user, password=password),
        must_understand=must_understand,
    )
