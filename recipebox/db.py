"""
Database persistence layer for cached recipes.

This module provides a SQLAlchemy-backed LocalRecipeStore that is enabled by
setting the DATABASE_URL environment variable (e.g. sqlite:///recipes.db or a
Postgres URL). If DATABASE_URL is not set, the API falls back to the
in-memory store from recipebox.store.

When DATABASE_URL is set:
- Recipes are stored in the "recipes" table, one row per recipe id
- The full recipe is kept as a JSON document; lower-cased title and
  ingredient text columns back the substring queries

When DATABASE_URL is not set:
- db_is_enabled() returns False
- The caller uses InMemoryRecipeStore instead
"""

import logging
import os
import time
from typing import Callable, Iterable, List, Optional, Sequence

from sqlalchemy import Boolean, Column, Float, Integer, String, Text, create_engine, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from recipebox.errors import StoreError
from recipebox.models import Recipe, RecipeId
from recipebox.store import LocalRecipeStore

logger = logging.getLogger(__name__)

Base = declarative_base()


class RecipeRow(Base):
    """Cached recipes table - one row per recipe id."""
    __tablename__ = "recipes"

    id = Column(String(255), primary_key=True)
    source = Column(String(50), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    title_lower = Column(String(500), nullable=False, index=True)
    ingredient_text = Column(Text, nullable=False, default="")
    has_full_details = Column(Boolean, nullable=False, default=False)
    document = Column(Text, nullable=False)  # Recipe JSON
    cached_at = Column(Float, nullable=False, index=True)  # Unix timestamp
    batch_position = Column(Integer, nullable=False, default=0)


def db_is_enabled() -> bool:
    """
    Check if database persistence is enabled.

    Returns:
        True if DATABASE_URL is set, False otherwise
    """
    return bool(os.getenv("DATABASE_URL"))


def create_store_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine suitable for the recipe store.

    SQLite connections are shared across threads (write-through runs on a
    worker thread); in-memory SQLite uses a single static connection so every
    session sees the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class SqlRecipeStore(LocalRecipeStore):
    """
    LocalRecipeStore persisted through SQLAlchemy.

    Each upsert_many call runs in a single transaction, so a batch is either
    fully written or rolled back. Rows are replaced by primary key
    (last write wins).
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        *,
        engine: Optional[Engine] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the store and create the recipes table if needed.

        Args:
            database_url: SQLAlchemy URL (optional, reads DATABASE_URL if not provided)
            engine: Pre-built engine (optional, takes precedence over database_url)
            clock: Timestamp source for cached_at (optional, defaults to time.time)

        Raises:
            RuntimeError: If neither an engine nor a database URL is available
            StoreError: If the table cannot be created
        """
        if engine is None:
            url = database_url or os.getenv("DATABASE_URL")
            if not url:
                raise RuntimeError("Database is not enabled. Set DATABASE_URL environment variable.")
            engine = create_store_engine(url)

        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        self._clock = clock
        self.init_db()

    def init_db(self) -> None:
        """
        Initialize database tables (create if they don't exist).

        Safe to call multiple times.
        """
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Recipe store tables initialized (or already exist)")
        except SQLAlchemyError as e:
            logger.error("Failed to initialize recipe store tables: %s", e)
            raise StoreError(f"Failed to initialize recipe store: {e}", cause=e) from e

    def upsert_many(self, recipes: Iterable[Recipe]) -> None:
        batch = list(recipes)
        if not batch:
            return

        cached_at = self._clock()
        db: Session = self._session_factory()
        try:
            for position, recipe in enumerate(batch):
                db.merge(self._to_row(recipe, cached_at, position))
            db.commit()
            logger.debug("Upserted %d recipes into database", len(batch))
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Error upserting %d recipes into database: %s", len(batch), e)
            raise StoreError(f"Failed to write {len(batch)} recipes: {e}", cause=e) from e
        finally:
            db.close()

    def find_by_title_substring(self, text: str, limit: int) -> List[Recipe]:
        return self._query(RecipeRow.title_lower.contains(text.lower(), autoescape=True), limit)

    def find_by_ingredients(self, names: Sequence[str], limit: int) -> List[Recipe]:
        names = [n for n in names if n]
        if not names:
            return []
        condition = or_(*[RecipeRow.ingredient_text.contains(n.lower(), autoescape=True) for n in names])
        return self._query(condition, limit)

    def get(self, recipe_id: RecipeId) -> Optional[Recipe]:
        db: Session = self._session_factory()
        try:
            row = db.get(RecipeRow, str(recipe_id))
            return self._to_recipe(row) if row else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read recipe {recipe_id}: {e}", cause=e) from e
        finally:
            db.close()

    def list_recent(self, limit: Optional[int] = None) -> List[Recipe]:
        return self._query(None, limit)

    def delete(self, recipe_id: RecipeId) -> bool:
        db: Session = self._session_factory()
        try:
            deleted = db.query(RecipeRow).filter(RecipeRow.id == str(recipe_id)).delete()
            db.commit()
            logger.debug("Deleted recipe %s from database (%d rows)", recipe_id, deleted)
            return deleted > 0
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Error deleting recipe %s from database: %s", recipe_id, e)
            raise StoreError(f"Failed to delete recipe {recipe_id}: {e}", cause=e) from e
        finally:
            db.close()

    def count(self) -> int:
        db: Session = self._session_factory()
        try:
            return db.query(RecipeRow).count()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count recipes: {e}", cause=e) from e
        finally:
            db.close()

    def _query(self, condition, limit: Optional[int]) -> List[Recipe]:
        db: Session = self._session_factory()
        try:
            query = db.query(RecipeRow)
            if condition is not None:
                query = query.filter(condition)
            query = query.order_by(RecipeRow.cached_at.desc(), RecipeRow.batch_position.asc())
            if limit is not None:
                query = query.limit(limit)
            return [self._to_recipe(row) for row in query.all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to query recipes: {e}", cause=e) from e
        finally:
            db.close()

    @staticmethod
    def _to_row(recipe: Recipe, cached_at: float, position: int) -> RecipeRow:
        return RecipeRow(
            id=recipe.key,
            source=recipe.source,
            title=recipe.title,
            title_lower=recipe.title.lower(),
            ingredient_text=recipe.ingredient_text,
            has_full_details=recipe.has_full_details,
            document=recipe.model_dump_json(by_alias=True),
            cached_at=cached_at,
            batch_position=position,
        )

    @staticmethod
    def _to_recipe(row: RecipeRow) -> Recipe:
        return Recipe.model_validate_json(row.document)
