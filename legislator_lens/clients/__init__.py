"""
Legislator Lens - model runtime and API clients
"""
