"""Errors raised for subscription input that cannot be accepted."""


class ValidationError(ValueError):
    """Base class for rejected subscription input."""


class InvalidAmountError(ValidationError):
    pass


class InvalidPaymentDayError(ValidationError):
    pass


class MissingFieldError(ValidationError):
    pass
