from reskinit.api.card_definitions import router as card_definitions_router
from reskinit.api.cardsets import router as cardsets_router
from reskinit.api.decks import router as decks_router
from reskinit.api.games import router as games_router
from reskinit.api.health import router as health_router
from reskinit.api.users import router as users_router

__all__ = [
    "card_definitions_router",
    "cardsets_router",
    "decks_router",
    "games_router",
    "health_router",
    "users_router",
]
