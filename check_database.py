#!/usr/bin/env python3
"""
Script to examine the contents of the Japanese knowledge database
to see which words and sentences were stored and what is due.
"""

import sys
import os
import datetime

# Add the current directory to the path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from llm_jp_knowledge import db
from llm_jp_knowledge.frequency import MAX_COST

def check_database_contents() -> None:
    """Examine the database contents to see what was ingested."""
    print("🔍 Examining Japanese Knowledge Database Contents")
    print("=" * 60)

    session = db.get_session()

    try:
        # Most common words
        words: list[db.Word] = session.query(db.Word).order_by(db.Word.count.desc()).limit(10).all()
        total_words = session.query(db.Word).count()
        print(f"\n📚 WORDS ({total_words} items, most seen first):")
        for i, word in enumerate(words, 1):
            rank = "unranked" if word.frequency_rank == MAX_COST else f"#{word.frequency_rank}"
            print(f"  {i:2d}. {word.text} | Seen: {word.count} | Rank: {rank} | Reviewed: {'yes' if word.reviewed else 'no'}")
        if total_words > 10:
            print(f"     ... and {total_words - 10} more items")

        # Latest sentences
        sentences: list[db.Sentence] = session.query(db.Sentence).order_by(db.Sentence.id.desc()).limit(10).all()
        total_sentences = session.query(db.Sentence).count()
        print(f"\n💬 SENTENCES ({total_sentences} items, newest first):")
        for i, sentence in enumerate(sentences, 1):
            print(f"  {i:2d}. {sentence.text}")
        if total_sentences > 10:
            print(f"     ... and {total_sentences - 10} more items")

        # Upcoming reviews
        now = datetime.datetime.now(datetime.UTC)
        scheduled: list[db.Word] = (
            session.query(db.Word)
            .filter(db.Word.reviewed.is_(True))
            .order_by(db.Word.next_review_at.asc())
            .limit(10)
            .all()
        )
        print(f"\n📅 SCHEDULED ({len(scheduled)} shown):")
        for i, word in enumerate(scheduled, 1):
            print(f"  {i:2d}. {word.text} | Next: {word.next_review_at} | Interval: {word.review_duration}d | Ease: {word.ease_factor:.2f}")

        stats = db.get_knowledge_stats(now)
        print(f"\n📊 SUMMARY:")
        print(f"  Words: {stats.words}  Sentences: {stats.sentences}  Links: {stats.memberships}")
        print(f"  Reviewed: {stats.reviewed}  Due now: {stats.due}")

    except Exception as e:
        print(f"❌ Error examining database: {e}")
    finally:
        session.close()

if __name__ == "__main__":
    # Check if database exists
    if not os.path.exists(db.DB_PATH):
        print(f"❌ Database file '{db.DB_PATH}' not found!")
        print("   Set LLM_JP_KG_DB or run from the correct directory.")
        sys.exit(1)

    check_database_contents()
