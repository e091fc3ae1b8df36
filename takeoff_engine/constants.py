"""
Takeoff Engine - Master Constants Reference

Numeric constants used by calibration, derivation and export.
Do not modify these values without updating the tests that pin them.
"""

# =============================================================================
# VOLUMETRIC CONVERSION CONSTANTS
# =============================================================================

# Cubic feet per cubic yard (yard-based excavation formulas divide by this)
CUBIC_FEET_PER_CUBIC_YARD = 27

# =============================================================================
# LINEAR CONVERSION CONSTANTS
# =============================================================================

METERS_PER_INCH = 0.0254

METERS_PER_FOOT = 0.3048

METERS_PER_YARD = 0.9144

# =============================================================================
# HYDRO-EXCAVATION CONSTANTS
# =============================================================================

# Assumed pothole bore radius in meters (8 inch diameter vacuum nozzle).
# Not exposed as configuration.
POTHOLE_BORE_RADIUS_M = 0.1016

# Default depth unit for pothole and hole depths
DEFAULT_DEPTH_UNIT = "inches"

# =============================================================================
# CALIBRATION CONSTANTS
# =============================================================================

# Pixels per real unit used when the host enables the uncalibrated fallback
DEFAULT_FALLBACK_PIXELS_PER_UNIT = 100

# Unit reported for measurements taken under the fallback conversion
DEFAULT_FALLBACK_UNIT = "m"

# =============================================================================
# DRAWING SESSION CONSTANTS
# =============================================================================

# Minimum captured points per geometry kind
MIN_POINTS_POINT = 1
MIN_POINTS_LINESTRING = 2
MIN_POINTS_POLYGON = 3

# Pixel radius for selecting a measurement by clicking near it
DEFAULT_HIT_TOLERANCE_PX = 10

# =============================================================================
# EXPORT CONSTANTS
# =============================================================================

# Decimal places kept in CSV export (JSON export is never rounded)
CSV_DECIMAL_PLACES = 2

# =============================================================================
# TOOL DISPLAY
# =============================================================================

TOOL_COLORS = {
    "trench": "#ef4444",
    "bore-shot": "#3b82f6",
    "conduit": "#10b981",
    "vault": "#8b5cf6",
    "hydro-excavation-trench": "#1e40af",
    "hydro-excavation-hole": "#1e40af",
    "hydro-excavation-pothole": "#1e40af",
    "area": "#f59e0b",
    "note": "#6b7280",
}

DEFAULT_TOOL_COLOR = "#6b7280"

TOOL_DISPLAY_NAMES = {
    "trench": "Trench",
    "bore-shot": "Bore Shot",
    "conduit": "Conduit",
    "vault": "Vault",
    "hydro-excavation-trench": "Hydro Trench",
    "hydro-excavation-hole": "Hydro Hole",
    "hydro-excavation-pothole": "Pothole",
    "area": "Area",
    "note": "Note",
}
