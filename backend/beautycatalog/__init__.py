"""Service-catalog consistency backend for the beauty services marketplace."""

__version__ = "0.1.0"
