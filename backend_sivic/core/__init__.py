"""
Core utilities: shared exceptions and cross-cutting concerns.

Used across the RPC client, providers, detectors and API server.
"""
