"""Tests for the process-wide service facade, settings and logging."""

import io
import json
import logging

import pydantic
import pytest

from anonymization.core.domain import AnonymizationOptions
from anonymization.core.exceptions import ConfigurationError, ValidationError
from anonymization.logging_config import StructuredFormatter, TextFormatter, configure_logging
from anonymization.service import pipeline as service
from anonymization.service.config import Settings


pytestmark = pytest.mark.usefixtures("fresh_service")


# ── Facade ───────────────────────────────────────────────────────────

def test_singleton_is_shared():
    assert service.AnonymizationService.get_instance() is service.AnonymizationService.get_instance()


def test_anonymize_worked_example():
    result = service.anonymize(
        "Contact: jane.doe@example.com or 555-123-4567",
        AnonymizationOptions(selected_patterns=["email", "phone"]),
    )
    assert result.anonymized_text == "Contact: j******e@example.com or ***-***-4567"
    assert result.replacements_count == 2


def test_custom_pattern_worked_example():
    outcome = service.add_custom_pattern("employeeId", r"EMP-\d{6}")
    assert outcome == {
        "success": True,
        "name": "employeeId",
        "pattern_source": r"EMP-\d{6}",
        "description": "",
        "overwritten": False,
    }
    report = service.detect_sensitive_data("EMP-123456")
    assert report.detected["employeeId"].count == 1
    assert report.risk_level == "LOW"


def test_add_custom_pattern_overwrite_is_reported():
    service.add_custom_pattern("token", "abc", "first")
    outcome = service.add_custom_pattern("token", "xyz", "second")
    assert outcome["success"] and outcome["overwritten"]
    assert service.get_pattern_description("token") == "second"


def test_add_custom_pattern_invalid_syntax():
    outcome = service.add_custom_pattern("broken", "[a-")
    assert outcome["success"] is False
    assert "broken" in outcome["error"]
    assert all(p["name"] != "broken" for p in service.list_patterns())


def test_add_custom_pattern_invalid_name():
    outcome = service.add_custom_pattern("", "abc")
    assert outcome["success"] is False
    assert outcome["error"]


def test_invalid_custom_pattern_does_not_affect_detection():
    service.add_custom_pattern("broken", "(")
    report = service.detect_sensitive_data("a@b.com", ["broken", "email"])
    assert report.detected["email"].count == 1


def test_remove_pattern():
    service.add_custom_pattern("token", "abc")
    assert service.remove_pattern("token") == {
        "success": True,
        "message": 'Pattern "token" removed',
    }
    assert service.remove_pattern("token") == {
        "success": False,
        "error": 'Pattern "token" not found',
    }


def test_list_patterns_and_descriptions():
    names = [p["name"] for p in service.list_patterns()]
    assert names[:4] == ["email", "phone", "ssn", "creditCard"]
    assert service.get_pattern_description("creditCard") == "Credit card numbers"
    assert service.get_pattern_description("nope") == "Custom pattern"


def test_options_from_preset():
    options = service.options_from_preset("anonymize_basic")
    assert options.selected_patterns == ["email", "phone"]
    assert options.default_strategy == "mask"
    result = service.anonymize("a@b.com or 555-123-4567 SSN 123-45-6789", options)
    assert result.anonymized_text == "a@b.com or ***-***-4567 SSN 123-45-6789"


def test_options_from_unknown_preset():
    with pytest.raises(ConfigurationError):
        service.options_from_preset("nope")


def test_reset_drops_custom_patterns():
    service.add_custom_pattern("token", "abc")
    service.AnonymizationService.reset()
    assert "token" not in service.AnonymizationService.get_instance().registry


# ── Options mapping ──────────────────────────────────────────────────

def test_options_from_mapping():
    options = AnonymizationOptions.from_mapping(
        {
            "patterns": ["email"],
            "strategy": "hash",
            "custom_replacements": {
                "email": {"strategy": "remove"},
                "phone": {"replacement": "[PHONE]"},
                "ssn": "[SSN]",
            },
            "preserve_format": False,
        }
    )
    assert options.selected_patterns == ["email"]
    assert options.default_strategy == "hash"
    assert options.overrides["email"].strategy == "remove"
    assert options.overrides["phone"].replacement == "[PHONE]"
    assert options.overrides["ssn"].replacement == "[SSN]"
    assert options.preserve_format is False
    assert options.case_sensitive is False


# ── Settings ─────────────────────────────────────────────────────────

def test_settings_defaults():
    settings = Settings()
    assert settings.default_strategy == "mask"
    assert settings.preserve_format is True
    assert settings.mask_char == "*"
    assert settings.risk_high_threshold == 10


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ANONYMIZER_DEFAULT_STRATEGY", "hash")
    monkeypatch.setenv("ANONYMIZER_RANDOM_SEED", "11")
    settings = Settings()
    assert settings.default_strategy == "hash"
    assert settings.random_seed == 11


@pytest.mark.parametrize(
    "kwargs",
    [
        {"mask_char": "##"},
        {"default_strategy": "  "},
        {"scan_workers": 0},
        {"risk_medium_threshold": 20},
    ],
)
def test_settings_validation(kwargs):
    with pytest.raises(pydantic.ValidationError):
        Settings(**kwargs)


# ── Logging ──────────────────────────────────────────────────────────

def test_structured_formatter_includes_extra():
    record = logging.getLogger("anonymization.test").makeRecord(
        "anonymization.test", logging.INFO, __file__, 10, "done", None, None,
        extra={"replacement_count": 2},
    )
    data = json.loads(StructuredFormatter().format(record))
    assert data["message"] == "done"
    assert data["level"] == "INFO"
    assert data["replacement_count"] == 2


def test_configure_logging(restore_logging):
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, StructuredFormatter)
    line = stream.getvalue().strip().splitlines()[-1]
    assert json.loads(line)["log_level"] == "DEBUG"


def test_text_formatter_appends_context(restore_logging):
    stream = io.StringIO()
    configure_logging("INFO", stream=stream, json_output=False)
    root = logging.getLogger()
    assert isinstance(root.handlers[0].formatter, TextFormatter)
    logging.getLogger("anonymization.test").info("scan done", extra={"match_count": 3})
    line = stream.getvalue().strip().splitlines()[-1]
    assert "INFO" in line and "anonymization.test: scan done" in line
    assert line.endswith("match_count=3")


@pytest.mark.parametrize("mask_char", ["##", "", 7, None])
def test_options_reject_bad_mask_char(mask_char):
    with pytest.raises(ValidationError):
        AnonymizationOptions(mask_char=mask_char)
    with pytest.raises(ValidationError):
        AnonymizationOptions.from_mapping({"patterns": ["url"], "mask_char": mask_char})


def test_custom_patterns_are_not_builtin():
    service.add_custom_pattern("token", "abc")
    entries = {p["name"]: p for p in service.list_patterns()}
    assert entries["token"]["builtin"] is False
    assert entries["email"]["builtin"] is True
