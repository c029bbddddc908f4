import os

# Name of the YAML document listing every generated key, written last.
MANIFEST_FILENAME = os.getenv("KEYGEN_MANIFEST_NAME", "validator-keys-manifest.yaml")

# The top-level scheme supports at most 2^32 epochs over a key's lifetime.
MAX_LOG_LIFETIME = 32

# Byte-derived names use this many leading and trailing public-key bytes.
BYTE_DERIVED_AFFIX_LEN = 3

# Keys are always activated from epoch 0.
ACTIVATION_EPOCH = 0

# File extensions per export encoding
SSZ_EXT = "ssz"
JSON_EXT = "json"

DEFAULT_SCHEME_PATH = "keygen.scheme:LeanSpecScheme"
