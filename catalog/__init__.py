"""
Product catalogue service.

Fetches a product catalogue from a JSON endpoint and exposes it through
MVI-style screen state holders (see catalog.core).
"""
