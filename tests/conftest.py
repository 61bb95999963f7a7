import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Pins the storefront environment and configures logging once, before any
    application module reads its settings. Then initializes the storefront
    domain and pushes its domain context, so carts can be built anywhere in
    the suite.
    """
    os.environ["STOREFRONT_ENV"] = session.config.option.env

    from storefront.utils.logging import configure_logging

    configure_logging(session.config.option.env)

    from storefront.domain import storefront
    from storefront.session import init_domain

    init_domain()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Drop cached settings after every test so env overrides never leak."""
    yield

    from storefront.config import get_settings

    get_settings.cache_clear()
