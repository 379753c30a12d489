import pytest

from core.config.settings import LoggingSettings
from core.logging import (
    configure_logging,
    get_api_logger_safe,
    get_audit_logger_safe,
    get_error_logger_safe,
)
from core.logging import enhanced_logging
from core.logging.channels import LogChannel, get_channel_for_component
from core.logging.enhanced_logging import build_redaction_processor


@pytest.mark.unit
def test_component_channel_mapping():
    assert get_channel_for_component("auth") == LogChannel.API
    assert get_channel_for_component("database") == LogChannel.DATABASE
    assert get_channel_for_component("audit") == LogChannel.AUDIT
    assert get_channel_for_component("something-else") == LogChannel.APPLICATION


@pytest.mark.unit
def test_redaction_is_recursive():
    redact = build_redaction_processor(["password", "Authorization"])
    event = redact(None, "info", {
        "event": "login",
        "password": "pw1",
        "headers": {"authorization": "Bearer abc", "accept": "json"},
        "items": [{"password": "x"}],
    })
    assert event["password"] == "[REDACTED]"
    assert event["headers"] == {"authorization": "[REDACTED]", "accept": "json"}
    assert event["items"] == [{"password": "[REDACTED]"}]
    assert event["event"] == "login"


@pytest.mark.unit
def test_logging_channels_write_files(tmp_path, monkeypatch, test_settings):
    # Fresh manager pointed at a temporary logs directory
    monkeypatch.setattr(enhanced_logging, "_enhanced_logging_configured", False)
    monkeypatch.setattr(enhanced_logging, "_logger_manager", None)
    logs_dir = tmp_path / "logs"
    settings = test_settings.model_copy(update={"logging": LoggingSettings(
        level="INFO",
        file_enabled=True,
        multi_channel_enabled=True,
        logs_dir=str(logs_dir),
    )})

    configure_logging(settings)

    get_api_logger_safe("tb_smoke_api").info("api smoke message")
    get_audit_logger_safe("tb_smoke_audit").info("audit smoke message", password="pw1")
    get_error_logger_safe("tb_smoke_error").error("error smoke message")

    for name in ("api.log", "audit.log", "error.log"):
        path = logs_dir / name
        assert path.exists(), f"expected log file not found: {path}"
        assert path.stat().st_size > 0, f"expected log file to have content: {path}"

    audit = (logs_dir / "audit.log").read_text()
    assert "audit smoke message" in audit
    assert "pw1" not in audit
    assert "api smoke message" not in audit

    assert LogChannel.AUDIT in enhanced_logging._logger_manager.channel_handlers
