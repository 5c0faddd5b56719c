"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Timing (seconds)
# ------------------------------------------------------------------

#: Pause after the batched navigation so the new document starts loading
#: before cookie/storage operations target it.
NAVIGATION_SETTLE_DELAY: float = 0.2

#: Pause between the retry apply and the second verification.
RETRY_PROPAGATION_DELAY: float = 0.1

# ------------------------------------------------------------------
# Browser defaults
# ------------------------------------------------------------------

DEFAULT_COOKIE_PATH = "/"
DEFAULT_SCRIPT_WORLD = "MAIN"
DEFAULT_CDP_ENDPOINT = "http://127.0.0.1:9222"
DEFAULT_CDP_TIMEOUT: float = 10.0

# Schemes whose ports are implied and dropped from an origin.
DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443, "ws": 80, "wss": 443}

# ------------------------------------------------------------------
# Page scripts (JavaScript function sources run by the Script Executor)
# ------------------------------------------------------------------

SET_LOCAL_ENTRY_JS = "(key, value) => { window.localStorage.setItem(key, value); }"
REMOVE_LOCAL_ENTRY_JS = "(key) => { window.localStorage.removeItem(key); }"
GET_LOCAL_ENTRY_JS = "(key) => window.localStorage.getItem(key)"

# ------------------------------------------------------------------
# Display labels
# ------------------------------------------------------------------

PARAMETER_TYPE_LABELS: dict[str, str] = {
    "queryParam": "Query Parameter",
    "cookie": "Cookie",
    "localEntry": "Local Storage",
}
