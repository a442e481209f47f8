"""Tag store: the token table a classification run reads from and writes to."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Iterable

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ctr_invoice.core.config import get_settings
from ctr_invoice.core.exceptions import TagStoreError
from ctr_invoice.models import FieldLabel, QualityFlag, TextToken, generate_run_id
from ctr_invoice.schemas import TokenIn
from ctr_invoice.services.classification.geometry import Token

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass(frozen=True)
class ProjectionRow:
    """A labeled value as handed to the projector."""

    text: str
    label: FieldLabel
    sheet: int


class TagStore:
    """
    Token table scoped to one document-processing run.

    Every query is restricted to the store's run id, so several runs can
    share one database. Writes done inside ``transaction()`` become visible
    together or not at all.
    """

    def __init__(
        self,
        db: AsyncSession,
        run_id: str | None = None,
        document_type: str | None = None,
    ):
        self.db = db
        self.run_id = run_id or generate_run_id()
        self.document_type = document_type or settings.document_type

    async def add_tokens(self, tokens: Iterable[TokenIn]) -> int:
        """Insert raw tokens for this run and commit. Returns the count."""
        rows = [
            TextToken(
                run_id=self.run_id,
                document_type=self.document_type,
                text=token.text,
                x1=token.x1,
                y1=token.y1,
                x2=token.x2,
                y2=token.y2,
                sheet=token.sheet,
            )
            for token in tokens
        ]

        try:
            self.db.add_all(rows)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise TagStoreError(f"Failed to store tokens: {exc}") from exc

        logger.debug("Stored %d tokens for run %s", len(rows), self.run_id)
        return len(rows)

    async def fetch_tokens(self) -> list[Token]:
        """Read this run's tokens ordered by sheet, then y1 descending."""
        query = (
            select(
                TextToken.id,
                TextToken.text,
                TextToken.x1,
                TextToken.y1,
                TextToken.x2,
                TextToken.y2,
                TextToken.sheet,
            )
            .where(TextToken.run_id == self.run_id)
            .order_by(TextToken.sheet.asc(), TextToken.y1.desc(), TextToken.id.asc())
        )

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise TagStoreError(f"Failed to read tokens: {exc}") from exc

        return [
            Token(
                row_id=row.id,
                text=(row.text or "").strip(),
                x1=row.x1 or 0.0,
                y1=row.y1 or 0.0,
                x2=row.x2 or 0.0,
                y2=row.y2 or 0.0,
                sheet=row.sheet or 0,
            )
            for row in result.all()
        ]

    async def fetch_rows(self) -> list[TextToken]:
        """Read this run's rows in insertion order, refreshed from the database."""
        try:
            result = await self.db.execute(
                select(TextToken)
                .where(TextToken.run_id == self.run_id)
                .order_by(TextToken.id.asc())
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as exc:
            raise TagStoreError(f"Failed to read tokens: {exc}") from exc

        return list(result.scalars().all())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["TagStore"]:
        """Commit on success; roll back everything written inside on any error."""
        try:
            yield self
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise TagStoreError(f"Tag store transaction failed: {exc}") from exc
        except BaseException:
            await self.db.rollback()
            raise

    async def set_label(self, row_id: int, label: FieldLabel) -> None:
        """Write a label onto one token. Call inside ``transaction()``."""
        await self.db.execute(
            update(TextToken)
            .where(TextToken.run_id == self.run_id, TextToken.id == row_id)
            .values(label=label)
            .execution_options(synchronize_session=False)
        )

    async def delete_not_applicable(self) -> int:
        """Remove every token labeled with the not-applicable sentinel."""
        async with self.transaction():
            result = await self.db.execute(
                delete(TextToken)
                .where(
                    TextToken.run_id == self.run_id,
                    TextToken.label == FieldLabel.NOT_APPLICABLE,
                )
                .execution_options(synchronize_session=False)
            )
        return result.rowcount or 0

    async def flag_blank_tokens(self) -> int:
        """Flag tokens with empty or whitespace-only text for review."""
        async with self.transaction():
            result = await self.db.execute(
                update(TextToken)
                .where(
                    TextToken.run_id == self.run_id,
                    or_(TextToken.text.is_(None), func.trim(TextToken.text) == ""),
                )
                .values(quality_flag=QualityFlag.REVIEW)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount or 0

    async def fetch_projection_rows(self) -> list[ProjectionRow]:
        """
        Read labeled tokens for projection, in insertion order.

        Unlabeled tokens are skipped. When two tokens share a label, both
        are returned and the projector keeps the later one.
        """
        try:
            result = await self.db.execute(
                select(TextToken.text, TextToken.label, TextToken.sheet)
                .where(TextToken.run_id == self.run_id, TextToken.label.is_not(None))
                .order_by(TextToken.id.asc())
            )
        except SQLAlchemyError as exc:
            raise TagStoreError(f"Failed to read labeled tokens: {exc}") from exc

        return [
            ProjectionRow(text=(row.text or "").strip(), label=row.label, sheet=row.sheet)
            for row in result.all()
        ]

    async def discard(self) -> int:
        """Delete all of this run's tokens."""
        async with self.transaction():
            result = await self.db.execute(
                delete(TextToken)
                .where(TextToken.run_id == self.run_id)
                .execution_options(synchronize_session=False)
            )
        logger.debug("Discarded run %s", self.run_id)
        return result.rowcount or 0
