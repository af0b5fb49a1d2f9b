"""Shared fixtures for the GreenWalk test-suite."""

import pytest

import logger as logger_module


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Route the global logger into a per-test directory."""
    instance = logger_module.setup_logger(log_dir=tmp_path / "logs")
    yield instance
    if logger_module._global_logger is not None:
        logger_module._global_logger.close()
    logger_module._global_logger = None

