"""
Global conftest for the key export tests.

1. A pretty unified-diff assertion helper for clearer dict-vs-dict failures.
2. Shared fixtures: a deterministic scheme adapter and a fresh output dir.
3. An autouse fixture that clears run-level log aggregation between tests.
"""

import json
import difflib

import pytest

from core_logging import reset_run
from keygen.scheme import KeySchemeAdapter
from tests.helpers.stub_scheme import StubScheme


# --------------------------------------------------------------------------- #
# Pretty diff for dict comparisons                                            #
# --------------------------------------------------------------------------- #
def pytest_assertrepr_compare(op, left, right):
    """Pretty unified-diff output when comparing two dicts with ==."""
    if isinstance(left, dict) and isinstance(right, dict) and op == "==":
        lhs = json.dumps(left, indent=2, sort_keys=True).splitlines()
        rhs = json.dumps(right, indent=2, sort_keys=True).splitlines()
        return [""] + list(
            difflib.unified_diff(lhs, rhs, fromfile="left", tofile="right")
        )


@pytest.fixture(autouse=True)
def _isolate_run_aggregation():
    """Each test starts (and leaves) with an empty run summary."""
    reset_run()
    yield
    reset_run()


@pytest.fixture
def stub_scheme():
    return StubScheme()


@pytest.fixture
def stub_adapter(stub_scheme):
    return KeySchemeAdapter(stub_scheme)


@pytest.fixture
def out_dir(tmp_path):
    """Not-yet-existing output directory under pytest's tmp_path."""
    return tmp_path / "keys"
