# constants.py

# Components whose magnitude falls below this are treated as exactly zero.
ZERO_TOLERANCE = 1e-8

# Decimal digits kept when points are extracted with rounding enabled.
ROUNDING_DIGITS = 3
