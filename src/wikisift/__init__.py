"""WikiSift — Multi-source search aggregator for Wikipedia and JSON APIs."""

__version__ = "0.1.0"
