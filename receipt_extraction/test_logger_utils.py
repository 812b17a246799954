import logging

from receipt_extraction.logger_utils import PACKAGE_LOGGER, redact_url, setup_logging


def test_setup_logging_is_idempotent(tmp_path):
    log_file = tmp_path / "logs" / "pipeline.log"

    logger = setup_logging("DEBUG", log_file=log_file)
    handler_count = len(logger.handlers)
    again = setup_logging("WARNING")

    assert again is logger
    assert logger.name == PACKAGE_LOGGER
    assert len(logger.handlers) == handler_count
    assert logger.level == logging.WARNING


def test_redact_url_hides_api_key():
    url = "https://vision.googleapis.com/v1/images:annotate?key=SECRET123&alt=json"

    assert redact_url(url) == "https://vision.googleapis.com/v1/images:annotate?key=***&alt=json"
    assert redact_url("https://example.com/x") == "https://example.com/x"
