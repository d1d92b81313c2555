from __future__ import annotations
from sqlalchemy import create_engine, event, func, select, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session, Mapped, mapped_column
from contextlib import contextmanager
import datetime
import os
import sqlite3
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from .errors import InvalidInput, StorageError, WordNotFound
from .frequency import FrequencyOracle, MAX_COST
from .scheduler import sm2_schedule, DEFAULT_EASE_FACTOR
from .structured import KnowledgeStats, ReviewResult, WordRow

DEBUG_MODE = os.getenv("DEBUG", "0") == "1"


class Base(DeclarativeBase):
    pass
DB_PATH: str = os.environ.get("LLM_JP_KG_DB", "japanese_knowledge.db")
engine = create_engine(f"sqlite:///{DB_PATH}")
# Prevent attribute expiration on commit so returned objects remain accessible
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def _enable_sqlite_foreign_keys(dbapi_conn: Any, connection_record: Any) -> None:
    # Membership rows rely on ON DELETE CASCADE, which SQLite ignores by default
    if isinstance(dbapi_conn, sqlite3.Connection):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


event.listen(engine, "connect", _enable_sqlite_foreign_keys)


def bind_engine(new_engine: Any) -> None:
    """Point the module at another engine (tests use a temporary database)."""
    global engine, SessionLocal
    if not event.contains(new_engine, "connect", _enable_sqlite_foreign_keys):
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    engine = new_engine
    SessionLocal = sessionmaker(bind=new_engine, expire_on_commit=False)


class Sentence(Base):
    __tablename__ = "sentences"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False, unique=True)


class Word(Base):
    __tablename__ = "words"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    count: Mapped[int] = mapped_column(Integer, default=1, server_default="1")
    frequency_rank: Mapped[int] = mapped_column(Integer, nullable=False)  # fixed at first insertion
    # SRS fields
    reviewed: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    next_review_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, nullable=True)
    review_duration: Mapped[int] = mapped_column(Integer, default=0, server_default="0")  # days
    ease_factor: Mapped[float] = mapped_column(Float, default=DEFAULT_EASE_FACTOR, server_default=str(DEFAULT_EASE_FACTOR))
    repetition: Mapped[int] = mapped_column(Integer, default=0, server_default="0")


class WordSentence(Base):
    """Many-to-many link between words and the sentences they occur in."""
    __tablename__ = "word_sentence"
    word_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("words.id", ondelete="CASCADE"), primary_key=True
    )
    sentence_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sentences.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (
        Index("word_index", "word_id"),
        Index("sentence_index", "sentence_id"),
    )


def is_db_initialized() -> bool:
    """Check if the database is already initialized by checking if tables exist."""
    from sqlalchemy import inspect
    inspector = inspect(engine)
    table_names = inspector.get_table_names()

    required_tables = {'words', 'sentences', 'word_sentence'}
    return required_tables.issubset(set(table_names))


def init_db() -> None:
    """Initialize the database by creating all tables."""
    Base.metadata.create_all(bind=engine)


def get_session() -> Session:
    return SessionLocal()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Run one unit of work: commit on success, roll back on any error.

    Database failures are re-raised as StorageError.
    """
    session: Session = get_session()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        if DEBUG_MODE:
            print(f"❌ Database error, rolled back: {e}")
        raise StorageError(str(e)) from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _to_word_row(word: Word) -> WordRow:
    return WordRow(
        id=word.id,
        text=word.text,
        count=word.count,
        frequency_rank=word.frequency_rank,
        reviewed=bool(word.reviewed),
        next_review_at=word.next_review_at,
        review_duration=word.review_duration,
        ease_factor=word.ease_factor,
        repetition=word.repetition,
    )


__all__ = [
    "Base", "Word", "Sentence", "WordSentence",
    "init_db", "is_db_initialized", "bind_engine", "get_session", "session_scope",
    "ingest_sentence", "ingest_document",
    "find_sentences_containing", "pick_sentence_for_review",
    "pick_word_to_review", "record_review",
    "get_word", "get_knowledge_stats",
]


# ----------------------------------------------------------------------
# Ingestion
# ----------------------------------------------------------------------
def _word_id(session: Session, text: str) -> Optional[int]:
    return session.scalar(select(Word.id).where(Word.text == text))


def _upsert_word(session: Session, text: str, oracle: FrequencyOracle) -> int:
    """Insert a word with count 1, or bump the count of the existing row."""
    stmt = sqlite_insert(Word.__table__).values(
        text=text,
        count=1,
        frequency_rank=oracle.rank(text),
        ease_factor=DEFAULT_EASE_FACTOR,
    )
    # frequency_rank stays out of the update set: it is fixed at first insertion
    stmt = stmt.on_conflict_do_update(
        index_elements=["text"],
        set_={"count": Word.__table__.c["count"] + 1},
    )
    session.execute(stmt)
    return session.scalars(select(Word.id).where(Word.text == text)).one()


def _link(session: Session, word_id: int, sentence_id: int) -> None:
    stmt = sqlite_insert(WordSentence.__table__).values(word_id=word_id, sentence_id=sentence_id)
    session.execute(stmt.on_conflict_do_nothing())


def ingest_sentence(sentence: str, words: Sequence[str], oracle: FrequencyOracle) -> bool:
    """Add a sentence and its base-form words to the knowledge graph.

    The whole sentence is one transaction. Every occurrence of a word bumps
    its count and links it to the sentence once.

    Re-ingesting known sentence text does not touch words that are already
    linked to it; only words missing from its membership are added. With a
    deterministic tokenizer that makes a duplicate a no-op.

    Returns True if the sentence text was new.
    """
    sentence = sentence.strip()
    if not sentence:
        raise InvalidInput("Sentence text is empty")
    tokens = [w.strip() for w in words if w and w.strip()]
    if not tokens:
        raise InvalidInput(f"No words given for sentence: {sentence!r}")

    with session_scope() as session:
        result = session.execute(
            sqlite_insert(Sentence.__table__).values(text=sentence).on_conflict_do_nothing(index_elements=["text"])
        )
        is_new = result.rowcount == 1
        sentence_id = session.scalars(select(Sentence.id).where(Sentence.text == sentence)).one()

        already_linked: set[str] = set()
        if not is_new:
            already_linked = set(session.scalars(
                select(Word.text)
                .join(WordSentence, WordSentence.word_id == Word.id)
                .where(WordSentence.sentence_id == sentence_id)
            ))

        added = 0
        for token in tokens:
            if token in already_linked:
                continue
            word_id = _upsert_word(session, token, oracle)
            _link(session, word_id, sentence_id)
            added += 1

    if DEBUG_MODE:
        state = "new" if is_new else "known"
        print(f"📝 Ingested {state} sentence '{sentence[:40]}' ({added} word occurrences)")
    return is_new


def ingest_document(
    document: str,
    oracle: FrequencyOracle,
    tokenizer: Optional[Callable[[str], List[str]]] = None,
) -> Tuple[int, int]:
    """Split a document into sentences and ingest each one.

    Sentences the tokenizer rejects are skipped. Storage errors abort the
    current sentence and propagate; sentences committed before it stay.

    Returns (new_sentences, skipped_sentences).
    """
    from .text import iter_sentences, tokenize
    tokenizer = tokenizer or tokenize

    added = 0
    skipped = 0
    for sentence in iter_sentences(document):
        try:
            words = tokenizer(sentence)
        except InvalidInput as e:
            if DEBUG_MODE:
                print(f"⚠️ Skipping sentence: {e}")
            skipped += 1
            continue
        if ingest_sentence(sentence, words, oracle):
            added += 1

    if DEBUG_MODE:
        print(f"✅ Ingested {added} new sentences ({skipped} skipped)")
    return added, skipped


# ----------------------------------------------------------------------
# Lookups and sentence selection
# ----------------------------------------------------------------------
def get_word(text: str) -> Optional[WordRow]:
    with session_scope() as session:
        word = session.scalars(select(Word).where(Word.text == text)).first()
        return _to_word_row(word) if word else None


def find_sentences_containing(word: str) -> List[str]:
    """All sentences linked to ``word``, oldest first. Empty if the word is unknown."""
    with session_scope() as session:
        word_id = _word_id(session, word)
        if word_id is None:
            if DEBUG_MODE:
                print(f"🔎 No word '{word}' in the database")
            return []
        return list(session.scalars(
            select(Sentence.text)
            .join(WordSentence, WordSentence.sentence_id == Sentence.id)
            .where(WordSentence.word_id == word_id)
            .order_by(Sentence.id)
        ))


def _sentence_cost(session: Session, sentence_id: int, target_id: int) -> int:
    """Sum of frequency ranks of every word in the sentence except the target."""
    ranks = session.scalars(
        select(Word.frequency_rank)
        .join(WordSentence, WordSentence.word_id == Word.id)
        .where(WordSentence.sentence_id == sentence_id, Word.id != target_id)
    )
    # Summed in Python: a few MAX_COST ranks would overflow SQLite's SUM()
    return sum(MAX_COST if rank is None else rank for rank in ranks)


def pick_sentence_for_review(word: str) -> Optional[str]:
    """Pick the sentence containing ``word`` whose other words are most familiar.

    Each candidate costs the summed frequency rank of its other words; the
    cheapest wins and the first one found wins a tie. Returns None when the
    word is unknown or appears in no sentence.
    """
    with session_scope() as session:
        target_id = _word_id(session, word)
        if target_id is None:
            return None

        candidate_ids = session.scalars(
            select(WordSentence.sentence_id)
            .where(WordSentence.word_id == target_id)
            .order_by(WordSentence.sentence_id)
        ).all()

        best_id: Optional[int] = None
        best_cost: Optional[int] = None
        for sentence_id in candidate_ids:
            cost = _sentence_cost(session, sentence_id, target_id)
            if DEBUG_MODE:
                print(f"   sentence #{sentence_id}: cost {cost}")
            if best_cost is None or cost < best_cost:
                best_id, best_cost = sentence_id, cost

        if best_id is None:
            return None
        best = session.get(Sentence, best_id)
        return best.text if best else None


# ----------------------------------------------------------------------
# Review scheduling
# ----------------------------------------------------------------------
def pick_word_to_review(
    now: Optional[datetime.datetime] = None,
    lookahead: datetime.timedelta = datetime.timedelta(0),
) -> Optional[str]:
    """Get the next word to study.

    Priority:
    1. Reviewed word whose next_review_at has passed, earliest first
    2. Never-reviewed word with the smallest frequency rank
    """
    cutoff = (now or _utcnow()) + lookahead
    with session_scope() as session:
        due = session.scalars(
            select(Word.text)
            .where(
                Word.reviewed.is_(True),
                Word.next_review_at.is_not(None),
                Word.next_review_at < cutoff,
            )
            .order_by(Word.next_review_at.asc(), Word.id.asc())
            .limit(1)
        ).first()
        if due is not None:
            return due

        return session.scalars(
            select(Word.text)
            .where(Word.reviewed.is_(False))
            .order_by(Word.frequency_rank.asc(), Word.id.asc())
            .limit(1)
        ).first()


def record_review(word: str, quality: float, now: Optional[datetime.datetime] = None) -> ReviewResult:
    """Grade a review of ``word`` and store its next SM-2 schedule.

    Raises InvalidInput for a quality outside 0-5 and WordNotFound for an
    unknown word; nothing is written in either case.
    """
    if not 0.0 <= quality <= 5.0:
        raise InvalidInput(f"Quality must be between 0 and 5, got {quality}")

    with session_scope() as session:
        row = session.scalars(select(Word).where(Word.text == word)).first()
        if row is None:
            raise WordNotFound(word)

        new_duration, new_ease, new_reps, next_review = sm2_schedule(
            row.review_duration, row.ease_factor, row.repetition, quality, now=now
        )
        row.review_duration = new_duration
        row.ease_factor = new_ease
        row.repetition = new_reps
        row.next_review_at = next_review
        row.reviewed = True

    if DEBUG_MODE:
        print(f"📅 '{word}' q={quality}: repetition {new_reps}, {new_duration} days, ease {new_ease:.2f}")
    return ReviewResult(
        word=word,
        repetition=new_reps,
        review_duration=new_duration,
        ease_factor=new_ease,
        next_review_at=next_review,
    )


def get_knowledge_stats(now: Optional[datetime.datetime] = None) -> KnowledgeStats:
    cutoff = now or _utcnow()
    with session_scope() as session:
        return KnowledgeStats(
            words=session.scalar(select(func.count()).select_from(Word)) or 0,
            sentences=session.scalar(select(func.count()).select_from(Sentence)) or 0,
            memberships=session.scalar(select(func.count()).select_from(WordSentence)) or 0,
            reviewed=session.scalar(select(func.count()).select_from(Word).where(Word.reviewed.is_(True))) or 0,
            due=session.scalar(
                select(func.count()).select_from(Word).where(
                    Word.reviewed.is_(True),
                    Word.next_review_at.is_not(None),
                    Word.next_review_at < cutoff,
                )
            ) or 0,
        )
