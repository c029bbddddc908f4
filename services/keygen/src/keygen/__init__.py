"""
Bulk generation of hash-based signature keys for validators.

Keys are written as raw SSZ (optionally with legacy JSON siblings) together
with a YAML manifest listing every validator.
"""

__version__ = "0.1.0"
