"""
Utility helpers shared across layers: retry policy and formatting.
"""
