class PricingError(Exception):
    """Base exception for pricing input and rule errors"""
    pass


class CargoValidationError(PricingError):
    """Raised when a cargo item has a non-positive quantity, negative measure or non-numeric value"""
    pass


class MarginValidationError(PricingError):
    """Raised when a margin falls outside 0..200 percent"""
    pass


class RateValidationError(PricingError):
    """Raised when a cost rate is negative or non-numeric"""
    pass
