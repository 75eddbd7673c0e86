"""
Error taxonomy shared by the gateway, the record store and the routers.
"""


class ETIError(Exception):
    """Base class for application errors."""


class ConfigurationError(ETIError):
    """A required setting (the Gemini credential) is missing."""


class AnalysisError(ETIError):
    """The AI gateway call failed or returned content outside its schema."""


class StoreUnavailable(ETIError):
    """The record store could not be subscribed to or written."""


class ValidationGap(ETIError):
    """Required input is missing; the request never reaches the gateway."""
