"""Exceptions raised by the service layer and translated to HTTP errors by the routes."""


class ServiceError(Exception):
    """Base class for expected, caller-visible failures."""


class ValidationError(ServiceError):
    """A required field is missing or malformed."""


class NotFoundError(ServiceError):
    """A referenced doctor, patient or appointment does not exist."""


class AuthorizationError(ServiceError):
    """The caller may not act on the referenced resource."""


class ExtractionError(ServiceError):
    """The language model call failed."""


class InvalidModelOutputError(ExtractionError):
    """The language model replied with text that is not a JSON object."""
