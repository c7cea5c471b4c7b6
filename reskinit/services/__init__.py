from reskinit.services.auth import TokenVerifier
from reskinit.services.card_definitions import CardDefinitionQuery, list_definitions
from reskinit.services.decks import DeckWithRelations, normalize_selection

__all__ = [
    "CardDefinitionQuery",
    "DeckWithRelations",
    "TokenVerifier",
    "list_definitions",
    "normalize_selection",
]
