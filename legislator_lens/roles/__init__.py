"""
Legislator Lens - analysis roles
"""
