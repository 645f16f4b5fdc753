class BillingError(ValueError):
    """Base class for errors raised by the billing domain services."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(BillingError):
    status_code = 404


class ConflictError(BillingError):
    status_code = 409


class InvalidStateError(BillingError):
    """The entity exists but is not in a state that allows the operation."""

    status_code = 400


class ForbiddenError(BillingError):
    status_code = 403


class InvalidInputError(BillingError):
    status_code = 422
