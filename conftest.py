import logging
import pytest  # noqa: F401


def pytest_configure(config):
    """
    Surface the lifecycle debug traces in failing test reports.
    This hook is called early in the pytest process.
    """
    logging.getLogger("asynctask").setLevel(logging.DEBUG)
