"""Program-derived addresses, account records, an account cache, instruction building and dispatch."""

__version__ = "0.1.0"