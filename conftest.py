"""
Project-wide PyTest bootstrap

Puts every `*/src` directory on PYTHONPATH so tests can import the
project's packages without an editable install.
"""

from pathlib import Path
import os, sys

# Keep developer .env / shell settings from leaking into the suite
for _var in ("KEYGEN_SCHEME", "KEYGEN_EXPORT_FORMAT", "KEYGEN_CREATE_MANIFEST",
             "KEYGEN_NEW_FORMAT", "KEYGEN_MANIFEST_NAME"):
    os.environ.pop(_var, None)

ROOT = Path(__file__).parent.resolve()
_paths = (
    [str(ROOT)]                                           # project root
    + [str(p) for p in (ROOT / "packages").glob("*/src")] # packages/*/src
    + [str(p) for p in (ROOT / "services").glob("*/src")] # services/*/src
)
# Preserve order but ensure local paths take precedence
for _p in reversed(_paths):
    if _p not in sys.path:
        sys.path.insert(0, _p)
