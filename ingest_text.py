#!/usr/bin/env python3
"""Ingest a Japanese text file into the knowledge database.

Usage: python ingest_text.py FILE [--freq-list path]
"""
import sys, os, argparse
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from llm_jp_knowledge import db
from llm_jp_knowledge.errors import KnowledgeError
from llm_jp_knowledge.frequency import FrequencyOracle

def main() -> None:
    parser = argparse.ArgumentParser(description="Ingest a Japanese text file")
    parser.add_argument("path")
    parser.add_argument("--freq-list", default=None, help="Frequency list, most frequent word first")
    args = parser.parse_args()

    if not os.path.exists(args.path):
        print(f"❌ File not found: {args.path}"); sys.exit(1)

    oracle = FrequencyOracle.from_file(args.freq_list)
    db.init_db()
    with open(args.path, "r", encoding="utf-8") as f:
        document = f.read()
    try:
        added, skipped = db.ingest_document(document, oracle)
    except KnowledgeError as e:
        print(f"❌ Ingestion stopped: {e}"); sys.exit(1)

    print(f"✅ Ingested {added} new sentences ({skipped} skipped)")
    stats = db.get_knowledge_stats()
    print(f"\n📊 Knowledge graph: {stats.words} words, {stats.sentences} sentences, {stats.memberships} links")
    word = db.pick_word_to_review()
    if word:
        print(f"   Next: 「{word}」")

if __name__ == "__main__":
    main()
