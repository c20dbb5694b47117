"""
Exceptions shared by the problem models and the instance loaders.
"""


class ConfigurationError(ValueError):
    """Raised when problem construction input is malformed."""
    pass
