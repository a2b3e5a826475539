"""Library and gateway API version constants."""

# Sent in the User-Agent header
VERSION = "0.1.0"

# Sent in the X-ApiVersion header; the gateway selects response formats by it
API_VERSION = "4"
