"""
Real HTTP integration clients.

These clients communicate with the real catalogue endpoint via HTTP.

Important:
- Must implement the same interfaces as the mock clients
- Must return data shaped according to catalog/integrations/contracts/*
"""
