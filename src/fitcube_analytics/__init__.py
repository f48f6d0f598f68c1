"""Training-capability analytics and periodization engine."""

__version__ = "0.4.0"
