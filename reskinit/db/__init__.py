from reskinit.db.database import Database, get_database, get_session
from reskinit.db.operations import (
    DEFAULT_CARD_SET_INCLUDE,
    CardSetInclude,
    create_user,
    delete_card_set,
    delete_deck,
    detach_decks_from_descriptors,
    get_card_set,
    get_deck,
    get_game,
    get_game_by_name,
    get_game_card_definition,
    get_user,
    insert_card_set,
    insert_deck,
    list_card_sets,
    list_game_card_definitions,
    list_games,
    set_deck_card_ids,
)

__all__ = [
    "DEFAULT_CARD_SET_INCLUDE",
    "CardSetInclude",
    "Database",
    "create_user",
    "delete_card_set",
    "delete_deck",
    "detach_decks_from_descriptors",
    "get_card_set",
    "get_database",
    "get_deck",
    "get_game",
    "get_game_by_name",
    "get_game_card_definition",
    "get_session",
    "get_user",
    "insert_card_set",
    "insert_deck",
    "list_card_sets",
    "list_game_card_definitions",
    "list_games",
    "set_deck_card_ids",
]
