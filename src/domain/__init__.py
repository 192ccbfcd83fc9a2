"""Domain models for the Bitcoin holding tracker.

Immutable value types describing quotes, daily price history and the valuation
of a fixed holding. They carry no I/O so that services and tests can build them
freely.
"""

__all__ = [
    "holding",
    "market",
]
