"""
Contracts (data models).

This folder defines the request/response shapes for the catalogue integration:
- the catalogue payload (products.py)
- the data source / repository interfaces (interfaces.py)

Both mock and real HTTP clients should use these contracts.
"""
