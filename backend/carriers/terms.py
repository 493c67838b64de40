"""Repasse terms a carrier can be approved with, in days after payment."""

PAYMENT_TERMS = (7, 21, 28)


class InvalidPaymentTermError(ValueError):
    def __init__(self, term):
        self.term = term
        super().__init__(f"Prazo de repasse inválido: {term}. Use 7, 21 ou 28 dias.")


def validate_payment_term(term) -> int:
    try:
        value = int(term)
    except (TypeError, ValueError):
        raise InvalidPaymentTermError(term)
    if value not in PAYMENT_TERMS:
        raise InvalidPaymentTermError(term)
    return value
