"""
Color palette for Mex terminal output

Centralized style definitions used across the project, expressed as
rich style strings built on the 256-color palette.
"""

# Green shades
GREEN = "color(158)"
DARK_GREEN = "color(49)"

# Yellow shades
LIGHT_YELLOW = "color(230)"
DARK_YELLOW = "color(228)"

# Pink shade
DARK_PINK = "color(205)"  # Used for anomalies

# Red
RED = "color(174)"

# Gray
GRAY = "color(240)"       # Used for secondary text
