class ServiceError(ValueError):
    """A request the domain refuses; routers turn it into an HTTP error."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None, **extra):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra


class GiftCardError(ServiceError):
    pass


class MembershipError(ServiceError):
    pass


class CheckoutError(ServiceError):
    pass
