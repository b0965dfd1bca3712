"""
MLS Report Validator — extraction, validation and market statistics for MLS report text.

Architecture: Line extraction → Statistics synthesis → Structural validation → Forecasting
Philosophy:  Pattern-match the text. Trust only code to check the numbers.
"""

__version__ = "1.0.0"
