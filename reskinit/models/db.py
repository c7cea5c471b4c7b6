"""
SQLAlchemy ORM models for persistent storage.

Five entity tables (users, games, game card definitions, card sets, decks)
plus one table per supported card-definition kind. The card-definition
tables share a shape: integer id, kind-specific attributes, a cost vector
and timestamps.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
    func,
)
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from reskinit.models.cost import ZERO_COST, Color, CostVector, decode, encode


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CostVectorType(TypeDecorator[CostVector]):
    """
    Stores a CostVector as canonical JSON text.

    Values are encoded on the way in and decoded on the way out, so rows
    loaded through the ORM already carry a CostVector.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:  # noqa: ARG002
        if value is None:
            return None
        if isinstance(value, str):
            value = decode(value)
        if not isinstance(value, Mapping):
            raise TypeError(f"Cannot store {type(value).__name__} as a cost vector")
        return encode(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> CostVector:  # noqa: ARG002
        return decode(value)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
    )


class UserDB(TimestampMixin, Base):
    """
    A registered user.

    The password hash is written by the external auth service and never
    leaves the storage layer.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    card_sets: Mapped[list["CardSetDB"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, username={self.username})>"


class GameDB(TimestampMixin, Base):
    """A game that card sets can reskin."""

    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    summary: Mapped[str] = mapped_column(Text, default="")
    rules: Mapped[str] = mapped_column(Text, default="")

    card_definitions: Mapped[list["GameCardDefinitionDB"]] = relationship(
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="GameCardDefinitionDB.name",
    )

    def __repr__(self) -> str:
        return f"<GameDB(id={self.id}, name={self.name})>"


class GameCardDefinitionDB(TimestampMixin, Base):
    """
    Descriptor naming the card-definition table behind one card kind of a game.

    table_name is symbolic; the card definition store decides whether it
    resolves.
    """

    __tablename__ = "game_card_definitions"
    __table_args__ = (UniqueConstraint("game_id", "name", name="uq_game_card_definition_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("games.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    table_name: Mapped[str] = mapped_column(String(255))

    game: Mapped["GameDB"] = relationship(back_populates="card_definitions")

    def __repr__(self) -> str:
        return f"<GameCardDefinitionDB(name={self.name}, table={self.table_name})>"


class CardSetDB(TimestampMixin, Base):
    """
    A user-owned reskin of one game.

    A user cannot own two sets with the same title.
    """

    __tablename__ = "card_sets"
    __table_args__ = (UniqueConstraint("title", "user_id", name="uq_card_set_title_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    image_url: Mapped[str] = mapped_column(Text)
    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id"), index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    game: Mapped["GameDB"] = relationship()
    user: Mapped["UserDB"] = relationship(back_populates="card_sets")
    decks: Mapped[list["DeckDB"]] = relationship(
        back_populates="card_set",
        cascade="all, delete-orphan",
        order_by=lambda: [DeckDB.created_at.desc(), DeckDB.id.desc()],
    )

    def __repr__(self) -> str:
        return f"<CardSetDB(id={self.id}, title={self.title})>"


class DeckDB(TimestampMixin, Base):
    """
    A named selection of rows from one card-definition table.

    card_definition_ids holds the selected row ids, deduplicated and sorted.
    game_card_definition_id is NULL once the descriptor has been removed
    from the game.
    """

    __tablename__ = "decks"
    __table_args__ = (UniqueConstraint("name", "card_set_id", name="uq_deck_name_card_set"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    card_set_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("card_sets.id", ondelete="CASCADE"), index=True
    )
    game_card_definition_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("game_card_definitions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    card_definition_ids: Mapped[list[int]] = mapped_column(JSON, default=list)

    card_set: Mapped["CardSetDB"] = relationship(back_populates="decks")
    game_card_definition: Mapped["GameCardDefinitionDB | None"] = relationship()

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name}, cards={len(self.card_definition_ids)})>"


# --- Card definition tables ---


class TokenEngineCardDefinitionDB(TimestampMixin, Base):
    """Development card: produces one token color, worth points, in a tier."""

    __tablename__ = "token_engine_card_definitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[Color] = mapped_column(Enum(Color, native_enum=False, length=8))
    points: Mapped[int] = mapped_column(Integer, default=0)
    tier: Mapped[int] = mapped_column(Integer, index=True)
    cost: Mapped[CostVector] = mapped_column(CostVectorType, default=ZERO_COST)

    def __repr__(self) -> str:
        return f"<TokenEngineCardDefinitionDB(id={self.id}, tier={self.tier}, token={self.token})>"


class TokenEngineDiscoveryCardDefinitionDB(TimestampMixin, Base):
    """Discovery card: worth points, claimed by meeting its cost."""

    __tablename__ = "token_engine_discovery_card_definitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    points: Mapped[int] = mapped_column(Integer, default=0)
    cost: Mapped[CostVector] = mapped_column(CostVectorType, default=ZERO_COST)

    def __repr__(self) -> str:
        return f"<TokenEngineDiscoveryCardDefinitionDB(id={self.id}, points={self.points})>"
