class QuoteError(Exception):
    pass


class QuoteBlockedError(QuoteError):
    """Taxable weight is zero; there is nothing to price."""


class CheckoutError(QuoteError):
    pass


class RepasseError(Exception):
    pass


class FreightNotFound(RepasseError):
    pass


class InvalidRepasseStateError(RepasseError):
    pass
