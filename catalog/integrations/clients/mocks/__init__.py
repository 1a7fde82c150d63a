"""
Mock integration clients.

These clients return realistic catalogue responses without calling any external API.
They are used when:
- the catalogue endpoint is not configured
- we want to exercise screens end-to-end without network access

Mock clients must follow the SAME interface as real HTTP clients.
"""
