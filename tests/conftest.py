"""Shared fixtures for composer-diff tests."""

import pytest
import structlog

from composerdiff.anchor.page import Page
from tests.helpers import MR_PAGE, MR_URL


@pytest.fixture(autouse=True, scope="session")
def _structlog_to_stdlib():
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mr_page():
    return Page(MR_PAGE, url=MR_URL)
