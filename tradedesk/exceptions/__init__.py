"""Custom exceptions for the TradeDesk order application."""


class TradeDeskError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class BusinessLogicError(TradeDeskError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(TradeDeskError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ValidationError(BusinessLogicError):
    """
    Raised when user input is incomplete or invalid.

    Carries every offending field (or a reason such as "no items") so the
    caller can highlight all of them at once.
    """
    def __init__(self, *fields, message=None):
        self.fields = tuple(fields)
        if message is None:
            message = f"Missing or invalid: {', '.join(self.fields)}" if self.fields else 'Invalid input'
        super().__init__(message, status_code=422, payload={'fields': list(self.fields)})


class PricingContractError(TradeDeskError):
    """Raised when a price is requested for a kind/tier the catalog does not offer."""
    def __init__(self, message, supplier_name=None, kind=None, diameter_label=None):
        self.supplier_name = supplier_name
        self.kind = kind
        self.diameter_label = diameter_label
        payload = {'supplier': supplier_name, 'kind': kind, 'diameter': diameter_label}
        super().__init__(message, status_code=422, payload=payload)


class PersistenceError(TradeDeskError):
    """Raised when a repository read or write fails."""

    NETWORK = 'network'
    PERMISSION = 'permission'
    UNKNOWN = 'unknown'

    _STATUS_BY_KIND = {NETWORK: 503, PERMISSION: 403, UNKNOWN: 500}

    def __init__(self, kind=UNKNOWN, message=None):
        if kind not in self._STATUS_BY_KIND:
            kind = self.UNKNOWN
        self.kind = kind
        super().__init__(
            message or f"Could not save data ({kind} error)",
            status_code=self._STATUS_BY_KIND[kind],
            payload={'kind': kind}
        )
