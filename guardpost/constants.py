# ---------------------------------------------------------------------------
# Fixed wiring of the bootstrap.  Kept free of imports so every module can use
# it without creating cycles.
# ---------------------------------------------------------------------------

# Port used when PORT is missing or unusable
DEFAULT_PORT = 6001

# Bind address – empty string / 0.0.0.0 means all IPv4 interfaces
DEFAULT_HOST = "0.0.0.0"

# Route collection prefixes
AUTH_PREFIX = "/auth"
PROTECTED_PREFIX = "/protected"

# JSON body parser defaults (mirrors Express' ``express.json()``: 100kb, strict)
DEFAULT_JSON_LIMIT = 100 * 1024
DEFAULT_ENV_FILE = ".env"
