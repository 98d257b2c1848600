"""
Shared fixtures for JSSDK service tests.
"""

import pytest

from service_jssdk.app.config import JSSDKOptions, load_options
from service_jssdk.app.testing import APP_ID, SECRET, IssuerStub


@pytest.fixture
def options() -> JSSDKOptions:
    """Memory-mode options for the reference identity."""
    return load_options({"appId": APP_ID, "secret": SECRET})


@pytest.fixture
def issuer_stub() -> IssuerStub:
    return IssuerStub()
