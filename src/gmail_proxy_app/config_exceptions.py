"""Configuration exceptions."""

class ConfigLoadError(Exception):
    """Raised when the environment file cannot be loaded."""
    pass

class ConfigValidationError(Exception):
    """Raised when a required setting is missing or invalid."""
    pass
