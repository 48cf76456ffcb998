"""Tests for logging setup and payload redaction."""

import pytest
from loguru import logger
from lxml import etree

from adwords.core.constants import REDACTED
from adwords.soap.security import build_username_token
from adwords.utils.logging import (
    UNPARSEABLE_PAYLOAD,
    redact_payload,
    sanitize_headers,
    setup_logging,
)


@pytest.fixture
def reset_loguru():
    yield
    logger.remove()


def test_redact_payload_masks_credentials():
    token = build_username_token("alice", "s3cret").to_element()
    payload = (
        b'<Envelope xmlns:cm="urn:cm"><Header>'
        + etree.tostring(token)
        + b"<cm:RequestHeader><cm:developerToken>dev-123</cm:developerToken>"
        b"<cm:clientCustomerId>987</cm:clientCustomerId></cm:RequestHeader>"
        b"</Header></Envelope>"
    )

    text = redact_payload(payload)

    assert "alice" not in text
    assert "s3cret" not in text
    assert "dev-123" not in text
    assert text.count(REDACTED) == 3
    assert "987" in text


def test_redact_payload_accepts_text():
    assert "pw" not in redact_payload("<Password>pw</Password>")


def test_unparseable_payload_is_withheld():
    assert redact_payload(b"<Password>pw") == UNPARSEABLE_PAYLOAD


def test_sanitize_headers():
    headers = {"authorization": "Basic dXNlcjpwdw==", "Content-Type": "text/xml"}

    sanitized = sanitize_headers(headers)

    assert sanitized == {"authorization": REDACTED, "Content-Type": "text/xml"}
    assert headers["authorization"] == "Basic dXNlcjpwdw=="


def test_setup_logging_writes_to_stderr(capsys, reset_loguru):
    setup_logging(level="DEBUG", format="{level} {message}")

    logger.debug("transport ready")

    assert "DEBUG transport ready" in capsys.readouterr().err


def test_setup_logging_file_sink(tmp_path, reset_loguru):
    log_file = tmp_path / "adwords.log"
    setup_logging(level="INFO", log_file=str(log_file))

    logger.info("written to file")
    logger.remove()

    assert "written to file" in log_file.read_text(encoding="utf-8")
