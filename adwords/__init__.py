"""SOAP client for the AdWords API."""

__version__ = "0.1.0"
