"""
Calculator Version

Stamped on every resolution as calculator_version. Bump when a change alters
quoted packages or prices for an unchanged cart.
"""

VERSION = "2025.11.0"
