from . import db
from .errors import KnowledgeError
from .frequency import FrequencyOracle
from typing import Any, Optional, Tuple

import llm  # type: ignore
hookimpl = llm.hookimpl  # type: ignore


def _load_oracle(freq_list: Optional[str]) -> FrequencyOracle:
    import click
    try:
        return FrequencyOracle.from_file(freq_list)
    except OSError as e:
        raise click.ClickException(f"Could not read frequency list: {e}")


@hookimpl  # type: ignore[misc]
def register_commands(cli: Any) -> None:
    import click

    @cli.command("kg-init-db")  # type: ignore[misc]
    def init_db() -> None:
        """Initialize the Japanese knowledge database."""
        db.init_db()
        click.echo("Database initialized.")

    @cli.command("kg-add-sentence")  # type: ignore[misc]
    @click.argument("sentence")
    @click.option("--word", "words", multiple=True, help="Base-form word in the sentence (repeatable). Tokenized automatically if omitted.")
    @click.option("--freq-list", default=None, help="Frequency list, one word per line, most frequent first")
    def add_sentence(sentence: str, words: Tuple[str, ...], freq_list: Optional[str]) -> None:
        """Add one sentence and its words to the knowledge graph."""
        from .text import tokenize
        oracle = _load_oracle(freq_list)
        try:
            tokens = list(words) if words else tokenize(sentence)
            is_new = db.ingest_sentence(sentence, tokens, oracle)
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        if is_new:
            click.echo(f"Sentence added with {len(tokens)} words.")
        else:
            click.echo("Sentence already exists (skipped).")

    @cli.command("kg-ingest")  # type: ignore[misc]
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    @click.option("--freq-list", default=None, help="Frequency list, one word per line, most frequent first")
    def ingest(path: str, freq_list: Optional[str]) -> None:
        """Split a text file into sentences and add them all."""
        oracle = _load_oracle(freq_list)
        with open(path, "r", encoding="utf-8") as f:
            document = f.read()
        try:
            added, skipped = db.ingest_document(document, oracle)
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        click.echo(f"Added {added} new sentences, skipped {skipped}.")

    @cli.command("kg-next")  # type: ignore[misc]
    @click.option("--model", default=None, help="LLM model used to gloss the review sentence")
    @click.option("--manual", is_flag=True, help="Manual mode - just show the word and sentence")
    @click.option("--lookahead", default=0, type=int, help="Treat words due within this many minutes as due now")
    def next_word(model: Optional[str], manual: bool, lookahead: int) -> None:
        """Pick the next word, show its easiest sentence and record how well you knew it."""
        import datetime
        try:
            word = db.pick_word_to_review(lookahead=datetime.timedelta(minutes=lookahead))
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        if word is None:
            click.echo("🎉 Nothing to review! All caught up!")
            return

        try:
            sentence = db.pick_sentence_for_review(word)
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        click.echo(f"Word: {word}")
        if sentence:
            click.echo(f"Sentence: {sentence}")
        else:
            click.echo("No sentence contains this word yet.")

        if model and sentence:
            from . import exercises
            try:
                llm_model = llm.get_model(model)
                click.echo(f"\n{exercises.explain_sentence(word, sentence, llm_model)}")
            except Exception as e:
                click.echo(f"⚠️  Could not explain sentence: {e}")

        if manual:
            click.echo(f"\nUse 'llm kg-review {word} <quality>' to record your performance (quality: 0-5)")
            return

        quality = click.prompt("\nHow well did you know it? (0-5)", type=click.FloatRange(0, 5))
        try:
            result = db.record_review(word, quality)
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        click.echo(f"📅 Next review in {result.review_duration} day(s).")

    @cli.command("kg-review")  # type: ignore[misc]
    @click.argument("word")
    @click.argument("quality", type=float)
    def review_word(word: str, quality: float) -> None:
        """Record a 0-5 rating for a word and reschedule it."""
        if quality < 0 or quality > 5:
            raise click.ClickException("Quality must be between 0-5 (0=forgot, 3=remembered with effort, 5=easy)")
        try:
            result = db.record_review(word, quality)
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        if quality >= 3:
            click.echo(f"Good! '{word}' scheduled for review in {result.review_duration} day(s).")
        else:
            click.echo(f"That's okay! '{word}' will be reviewed again tomorrow.")

    @cli.command("kg-sentences")  # type: ignore[misc]
    @click.argument("word")
    def sentences(word: str) -> None:
        """List every sentence containing a word."""
        try:
            found = db.find_sentences_containing(word)
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        if not found:
            click.echo(f"No sentences found for '{word}'")
            return
        for sentence in found:
            click.echo(sentence)

    @cli.command("kg-stats")  # type: ignore[misc]
    def stats() -> None:
        """Show how much of the knowledge graph has been studied."""
        try:
            s = db.get_knowledge_stats()
        except KnowledgeError as e:
            raise click.ClickException(str(e))
        click.echo(f"Words: {s.words}")
        click.echo(f"Sentences: {s.sentences}")
        click.echo(f"Links: {s.memberships}")
        click.echo(f"Reviewed words: {s.reviewed}")
        click.echo(f"Due now: {s.due}")
