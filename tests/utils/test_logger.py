"""Unit tests for the logging utilities."""

import logging

import onedsfm.utils.logger as logger_utils


def test_get_logger_adds_a_single_handler() -> None:
    logger_utils.get_logger()
    adapter = logger_utils.get_logger()

    assert adapter.logger.name == logger_utils.LOGGER_NAME
    assert len(logging.getLogger(logger_utils.LOGGER_NAME).handlers) == 1


def test_worker_id_outside_dask_worker() -> None:
    assert logger_utils.get_worker_id().endswith("-main")


def test_records_carry_worker_id() -> None:
    adapter = logger_utils.get_logger()
    _, kwargs = adapter.process("message", {})
    assert kwargs["extra"]["worker_id"] == logger_utils.get_worker_id()
