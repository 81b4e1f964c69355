class BillingError(Exception):
    """Base class for billing failures that are reported back to the caller."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(BillingError):
    status_code = 404


class InvalidStateError(BillingError):
    status_code = 400
