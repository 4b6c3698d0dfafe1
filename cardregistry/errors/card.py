"""Card usage errors"""

from cardregistry.errors.common import ConflictError
from cardregistry.models.card import CardType


class CardAlreadyIssued(ConflictError):
    error_code = 3001
    error = "Person already holds a card of this type from this issuer"

    def __init__(self, national_code: str, card_type: CardType, issuer_name: str):
        self.national_code = national_code
        self.card_type = card_type
        self.issuer_name = issuer_name
        super().__init__(
            f"national_code={national_code} card_type={card_type.name} issuer={issuer_name}",
            where="cache",
        )


class CardNumberAlreadyExists(ConflictError):
    error_code = 3002
    error = "Card number already exists"
