"""Test utilities for sumish applications.

Provides the in-process ASGI test client and response assertions::

    from sumish.testing import TestClient, assert_is_error_page
"""

from sumish.testing.assertions import assert_header, assert_is_error_page, decoded_text
from sumish.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_header",
    "assert_is_error_page",
    "decoded_text",
]
