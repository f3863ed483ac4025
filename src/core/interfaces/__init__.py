"""Core interfaces (Protocol).

Contracts implemented by adapters, so the services depend on abstractions.
"""
