"""
Legislator Lens - core utilities
"""
