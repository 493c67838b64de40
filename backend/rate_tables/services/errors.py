class RateTableError(Exception):
    """Base exception for rate table input errors"""
    pass


class ZipCodeError(RateTableError):
    """Raised when a CEP cannot be normalized to 8 digits"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"CEP inválido: {value!r}")


class ImportFileError(RateTableError):
    """Raised for batch-level import problems: unreadable file, no header, missing columns"""
    pass


class RouteValidationError(RateTableError):
    pass
