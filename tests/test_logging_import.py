"""
Test that sivic_logging can be imported without circular import and logger works.
"""

from __future__ import annotations

from structlog.testing import capture_logs

ADDRESS = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


def test_logging_import():
    """Import get_logger from sivic_logging and use the logger."""
    from backend_sivic.sivic_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "exception")
    logger.info("test_message", key="value")


def test_short_address_truncates():
    """Addresses longer than 16 chars are cut for log lines."""
    from backend_sivic.sivic_logging import short_address

    assert short_address(ADDRESS) == "DezXAZ8z7PnrnRJj..."
    assert short_address("abc") == "abc"


def test_bind_address_adds_truncated_address():
    """Every call on a bound logger carries the short address."""
    from backend_sivic.sivic_logging import bind_address, get_logger

    with capture_logs() as logs:
        log = bind_address(get_logger("test"), ADDRESS)
        log.info("bound_message", step_id="holders")
    assert logs[0]["event"] == "bound_message"
    assert logs[0]["address"] == "DezXAZ8z7PnrnRJj..."
    assert logs[0]["step_id"] == "holders"


def test_json_records_use_event_type():
    """The JSON pipeline renames structlog's `event` key."""
    from backend_sivic.sivic_logging.logger import _rename_event

    record = _rename_event(None, "info", {"event": "detector_run_complete", "score": 40})
    assert record == {"event_type": "detector_run_complete", "message": "detector_run_complete", "score": 40}


def test_detector_logs_bind_address(collaborators, mint_account_factory):
    """Detector step logs carry the analyzed address without each call passing it."""
    import asyncio
    from unittest.mock import AsyncMock

    from backend_sivic.analytics.token_detector import TokenDetector

    collaborators.market.overview = AsyncMock(side_effect=RuntimeError("down"))

    async def drain(detector):
        return [event async for event in detector.run()]

    with capture_logs() as logs:
        detector = TokenDetector(ADDRESS, mint_account_factory(), collaborators)
        asyncio.run(drain(detector))
    failed = [entry for entry in logs if entry["event"] == "detector_step_error"]
    assert failed[0]["address"] == "DezXAZ8z7PnrnRJj..."
    assert failed[0]["step_id"] == "market_data"
