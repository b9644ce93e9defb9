"""Test utilities for grouter applications::

    from grouter.testing import TestClient
"""

from grouter.testing.client import TestClient

__all__ = ["TestClient"]
