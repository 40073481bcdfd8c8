import os

# Settings are read once at import; the API tests need the request throttle off.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
