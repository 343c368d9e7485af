"""Internal constants shared across the library."""

API_URL = "https://api.criticalmaps.net/"
RIDES_URL = "https://criticalmass.in/api/ride"
USER_AGENT = "pycriticalmaps/0.1"

#: Search radius in kilometres used when none has been persisted.
DEFAULT_NEXT_RIDE_RADIUS_KM = 20

DEFAULT_POLL_INTERVAL = 12.0
DEFAULT_REQUEST_TIMEOUT = 20.0

#: Decimal places kept when bucketing coordinates (2 places ~ 1.1 km).
DEFAULT_BUCKET_PRECISION = 2

EARTH_RADIUS_KM = 6371.0088

# Coordinates above this magnitude are micro-degrees, not degrees.
MICRO_DEGREE_THRESHOLD = 180.0
# Threshold to distinguish epoch seconds from milliseconds.
MS_THRESHOLD = 1_000_000_000_000
