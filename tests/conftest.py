"""Shared test configuration."""

import os

# settings has no JWT_SECRET default; set before any test module imports it
os.environ.setdefault("JWT_SECRET", "xp-test-secret")
