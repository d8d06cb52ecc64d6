# storefront/domain/errors.py
"""
Exceptions raised by the storefront engine.

StorefrontError
├── ValidationError          - precondition violated (e.g. empty cart checkout)
├── CheckoutInProgressError  - second checkout while one is in flight
└── OrderSubmissionError     - order-creation collaborator rejected the draft

Unknown ids and invalid discount codes are not errors: the cart treats them
as no-ops / a False result.
"""


class StorefrontError(Exception):
    pass


class ValidationError(StorefrontError):
    pass


class CheckoutInProgressError(StorefrontError):
    def __init__(self, message: str = "checkout already in progress"):
        super().__init__(message)


class OrderSubmissionError(StorefrontError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
