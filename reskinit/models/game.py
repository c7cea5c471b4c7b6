from dataclasses import dataclass, field


@dataclass(frozen=True)
class CardTableSpec:
    """
    Seed description of one card kind a game uses.

    Attributes:
        name: Human-readable name, unique within the game
        table_name: Symbolic card-definition table name
        description: What these cards are for
    """

    name: str
    table_name: str
    description: str = ""


@dataclass(frozen=True)
class GameSpec:
    """Seed description of a game and the card tables it uses."""

    name: str
    summary: str = ""
    rules: str = ""
    card_tables: tuple[CardTableSpec, ...] = field(default_factory=tuple)
