"""API routes for Card manipulation"""

from fastapi import APIRouter, Depends

from cardregistry.schemas.card import CardCreateSchema, CardReadSchema
from cardregistry.services.card import CardService

card_router = APIRouter(prefix="/cards", tags=["Cards"])


@card_router.get("/{national_code}", response_model=list[CardReadSchema])
def read_cards(national_code: str, card_service: CardService = Depends()):
    return card_service.get_cards_by_national_code(national_code)


@card_router.post("", response_model=CardReadSchema)
def create_card(card: CardCreateSchema, card_service: CardService = Depends()):
    return card_service.create_card(card)
