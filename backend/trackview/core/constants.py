"""Shared application constants.

Centralizes repeat values used across decoding and normalization so we can
document and adjust them in one place.
"""

# Metres in one kilometre
KM_M = 1000.0

# m/s -> km/h
MPS_TO_KMH = 3.6

# FIT positions are stored as semicircles
SEMICIRCLES_TO_DEG = 180 / 2**31

# Valid geographic ranges (degrees)
LAT_RANGE = (-90.0, 90.0)
LON_RANGE = (-180.0, 180.0)

# Record attributes that never become chart/table fields.
# distance is kept on the record itself as distance_km.
EXCLUDED_FIELDS = frozenset({
    "timestamp",
    "position_lat",
    "position_long",
    "elapsed_time",
    "timer_time",
    "distance",
})

# Supported upload extensions -> decoder source name
SUPPORTED_EXTENSIONS = {".fit": "fit", ".gpx": "gpx"}

# Placeholder shown by table renderers for absent values
MISSING_PLACEHOLDER = "-"

# Upper bound for explorer page size
MAX_PAGE_SIZE = 500
