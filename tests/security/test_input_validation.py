# tests/security/test_input_validation.py - Input validation security tests

import pytest

from sqliradar.options import ScanOptions
from sqliradar.utils.error_handler import ErrorHandler, ValidationError
from sqliradar.utils.validator import Validator


@pytest.mark.security
class TestTargetValidation:
    """Unsafe scan seeds are rejected before any request."""

    def test_unsafe_targets_rejected(self, unsafe_targets):
        for url in unsafe_targets:
            with pytest.raises(ValueError):
                Validator.validate_url(url)

    def test_unsafe_targets_rejected_as_options(self, unsafe_targets):
        for url in unsafe_targets:
            with pytest.raises(ValidationError):
                ScanOptions.from_pairs([("RHOSTS", url)])

    @pytest.mark.parametrize("url", [
        "http://ex.test/",
        "https://ex.test:8443/app/index.php?id=1&cat=2",
        "http://127.0.0.1:8080/",
    ])
    def test_valid_targets_accepted(self, url):
        assert Validator.validate_url(url) == url


@pytest.mark.security
class TestHeaderInjection:
    """Header values cannot smuggle extra headers."""

    def test_header_splitting_rejected(self, header_injection_payloads):
        for value in header_injection_payloads:
            with pytest.raises(ValueError):
                Validator.validate_header_value(value, "Host")

    def test_header_splitting_rejected_as_options(self, header_injection_payloads):
        for value in header_injection_payloads:
            with pytest.raises(ValidationError):
                ScanOptions.from_pairs([("USER_AGENT", value)])

    def test_oversized_header_rejected(self):
        with pytest.raises(ValueError):
            Validator.validate_header_value("a" * 5000, "User-Agent")


@pytest.mark.security
class TestErrorMessageHygiene:
    """Logged errors never leak credentials."""

    def test_form_credentials_redacted(self):
        info = ErrorHandler().handle_error(
            RuntimeError("POST http://ex.test/login failed with user=admin&password=s3cret"),
        )

        assert "s3cret" not in info["message"]
        assert "s3cret" not in info["user_message"]

    def test_context_redacted(self):
        info = ErrorHandler().handle_error(
            RuntimeError("request failed"),
            context={"url": "http://ex.test/?token=abcdef123456"},
        )

        assert "abcdef123456" not in str(info["context"])
