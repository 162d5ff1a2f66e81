"""Saudi labor compliance and compensation calculation engine."""

__version__ = "0.1.0"
