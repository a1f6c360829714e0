"""Exceptions raised at the boundaries of the compliance core.

Classification outcomes (a field not found, a label rejected) are never
exceptions. These cover input the core cannot work with at all. Failures of
the external extraction collaborator are not wrapped: they propagate to the
caller unchanged.
"""


class LabelComplianceError(Exception):
    """Base class for errors raised by the compliance core."""


class ConfigurationError(LabelComplianceError):
    """The compliance configuration file is missing, unreadable, or invalid."""


class InvalidImageError(LabelComplianceError):
    """Label images that must not be handed to the extraction collaborator."""


class UnknownBeverageTypeError(LabelComplianceError, ValueError):
    """A beverage category string outside distilled_spirits / wine / malt_beverage."""
