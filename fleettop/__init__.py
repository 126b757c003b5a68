"""fleettop: capture agents plus an aggregator that ranks processes across hosts."""

__version__ = "0.1.0"
