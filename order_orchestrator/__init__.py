"""Service-to-service orchestrator: validate customer, create and confirm an order."""

__version__ = "0.1.0"
