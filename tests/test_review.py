import datetime
import pytest
from sqlalchemy import create_engine

from llm_jp_knowledge import db
from llm_jp_knowledge.errors import InvalidInput, WordNotFound
from llm_jp_knowledge.frequency import FrequencyOracle

NOW = datetime.datetime(2026, 3, 1, 9, 0, tzinfo=datetime.UTC)
DAY = datetime.timedelta(days=1)


@pytest.fixture(autouse=True)
def setup_db(tmp_path, monkeypatch):
    test_db = str(tmp_path / "test_review.db")
    monkeypatch.setenv("LLM_JP_KG_DB", test_db)
    db.bind_engine(create_engine(f"sqlite:///{test_db}"))
    db.init_db()
    yield


@pytest.fixture
def seeded() -> None:
    oracle = FrequencyOracle.from_lines(["の", "が", "猫", "好き", "犬", "鳥"])
    db.ingest_sentence("猫が好き。", ["猫", "が", "好き"], oracle)
    db.ingest_sentence("犬の鳥。", ["犬", "の", "鳥"], oracle)


def test_nothing_to_review_in_empty_db() -> None:
    assert db.pick_word_to_review(now=NOW) is None


def test_unreviewed_words_come_in_frequency_order(seeded) -> None:
    assert db.pick_word_to_review(now=NOW) == "の"
    db.record_review("の", 4.0, now=NOW)
    assert db.pick_word_to_review(now=NOW) == "が"


def test_overdue_word_beats_any_unreviewed_word(seeded) -> None:
    db.record_review("鳥", 4.0, now=NOW)
    # "の" (rank 0) is unreviewed, but "鳥" is overdue two days later
    assert db.pick_word_to_review(now=NOW + 2 * DAY) == "鳥"


def test_earliest_due_word_first(seeded) -> None:
    db.record_review("犬", 4.0, now=NOW)
    db.record_review("猫", 4.0, now=NOW - DAY)
    assert db.pick_word_to_review(now=NOW + 3 * DAY) == "猫"


def test_not_yet_due_words_are_skipped(seeded) -> None:
    db.record_review("鳥", 4.0, now=NOW)
    assert db.pick_word_to_review(now=NOW + datetime.timedelta(hours=1)) == "の"


def test_nothing_left_when_all_reviewed_and_not_due(seeded) -> None:
    for word in ["の", "が", "猫", "好き", "犬", "鳥"]:
        db.record_review(word, 5.0, now=NOW)
    assert db.pick_word_to_review(now=NOW) is None


def test_lookahead_treats_soon_due_words_as_due(seeded) -> None:
    db.record_review("鳥", 4.0, now=NOW)
    almost = NOW + DAY - datetime.timedelta(minutes=5)
    assert db.pick_word_to_review(now=almost) == "の"
    assert db.pick_word_to_review(now=almost, lookahead=datetime.timedelta(minutes=10)) == "鳥"


def test_record_review_persists_schedule(seeded) -> None:
    result = db.record_review("猫", 4.0, now=NOW)
    assert (result.repetition, result.review_duration, result.ease_factor) == (1, 1, 2.5)
    assert result.next_review_at == NOW + DAY

    word = db.get_word("猫")
    assert word.reviewed is True
    assert word.repetition == 1
    assert word.review_duration == 1
    assert word.ease_factor == 2.5
    assert word.next_review_at.replace(tzinfo=None) == (NOW + DAY).replace(tzinfo=None)


def test_successive_reviews_follow_sm2(seeded) -> None:
    durations = [db.record_review("猫", q, now=NOW).review_duration for q in (4.0, 4.0, 5.0)]
    assert durations == [1, 6, 16]
    assert db.get_word("猫").ease_factor == pytest.approx(2.6)


def test_lapse_restarts_learning(seeded) -> None:
    for q in (5.0, 5.0, 5.0):
        db.record_review("猫", q, now=NOW)
    ease_before = db.get_word("猫").ease_factor
    result = db.record_review("猫", 1.0, now=NOW)
    assert (result.repetition, result.review_duration) == (1, 1)
    assert result.ease_factor == ease_before


def test_review_unknown_word_reported() -> None:
    with pytest.raises(WordNotFound) as excinfo:
        db.record_review("鯨", 4.0)
    assert excinfo.value.word == "鯨"


def test_invalid_quality_changes_nothing(seeded) -> None:
    with pytest.raises(InvalidInput):
        db.record_review("猫", 6.0, now=NOW)
    word = db.get_word("猫")
    assert word.reviewed is False
    assert word.repetition == 0


def test_knowledge_stats(seeded) -> None:
    db.record_review("猫", 4.0, now=NOW)
    db.record_review("犬", 4.0, now=NOW + 5 * DAY)
    stats = db.get_knowledge_stats(now=NOW + 2 * DAY)
    assert stats.words == 6
    assert stats.sentences == 2
    assert stats.memberships == 6
    assert stats.reviewed == 2
    assert stats.due == 1
