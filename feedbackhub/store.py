# feedbackhub/store.py
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from feedbackhub import monitoring
from feedbackhub.db import _make_engine, init_db, make_session_factory
from feedbackhub.errors import ConstraintViolation, NotFound, Unavailable
from feedbackhub.identity import new_id, utc_now_iso
from feedbackhub.models import FeedbackRecord, PromptRecord
from feedbackhub.schemas import Feedback, Prompt


class FeedbackStore:
    """
    Prompts and their feedback, backed by a SQLAlchemy session factory.

    Every operation runs in its own short transaction. SQLAlchemy failures are
    translated into the StorageError family:
      - IntegrityError  -> ConstraintViolation
      - anything else   -> Unavailable
    Id and timestamp minting are injectable so tests can control ordering.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self._session_factory = session_factory
        self._id_factory = id_factory
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "FeedbackStore":
        """Open (and create tables in) the DB at `url`. Raises Unavailable on a bad URL or unreachable DB."""
        try:
            engine = _make_engine(url)
        except SQLAlchemyError as e:
            raise Unavailable(f"Invalid DATABASE_URL: {e}") from e
        init_db(engine)
        return cls(make_session_factory(engine), **kwargs)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            monitoring.logger.warning("DB constraint violation", extra={"error": str(e.orig)})
            raise ConstraintViolation(str(e.orig)) from e
        except SQLAlchemyError as e:
            session.rollback()
            monitoring.logger.error("DB error", extra={"error": str(e)})
            raise Unavailable(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> None:
        with self._session() as session:
            session.execute(text("SELECT 1"))

    # --- prompts
    def create_prompt(self, title: str, description: str) -> Prompt:
        prompt = Prompt(
            id=self._id_factory(),
            title=title,
            description=description,
            created_at=self._clock(),
        )
        with self._session() as session:
            session.add(PromptRecord(**prompt.model_dump()))
        return prompt

    def get_prompt(self, prompt_id: str) -> Prompt:
        with self._session() as session:
            record = session.get(PromptRecord, prompt_id)
            if record is None:
                raise NotFound("Prompt", prompt_id)
            return Prompt.model_validate(record)

    def list_prompts(self) -> List[Prompt]:
        stmt = select(PromptRecord).order_by(PromptRecord.created_at.desc())
        with self._session() as session:
            return [Prompt.model_validate(r) for r in session.scalars(stmt)]

    # --- feedback
    def create_feedback(self, prompt_id: str, content: str) -> Feedback:
        feedback = Feedback(
            id=self._id_factory(),
            prompt_id=prompt_id,
            content=content,
            created_at=self._clock(),
        )
        with self._session() as session:
            if session.get(PromptRecord, prompt_id) is None:
                raise NotFound("Prompt", prompt_id)
            session.add(FeedbackRecord(**feedback.model_dump()))
        return feedback

    def list_feedback_for_prompt(self, prompt_id: str) -> List[Feedback]:
        """Newest first. Unknown prompt ids give an empty list, not an error."""
        stmt = (
            select(FeedbackRecord)
            .where(FeedbackRecord.prompt_id == prompt_id)
            .order_by(FeedbackRecord.created_at.desc())
        )
        with self._session() as session:
            return [Feedback.model_validate(r) for r in session.scalars(stmt)]

    def feedback_counts(self) -> Dict[str, int]:
        """prompt_id -> number of feedback entries; prompts with none are absent."""
        stmt = (
            select(FeedbackRecord.prompt_id, func.count(FeedbackRecord.id))
            .group_by(FeedbackRecord.prompt_id)
        )
        with self._session() as session:
            return {prompt_id: n for prompt_id, n in session.execute(stmt)}
