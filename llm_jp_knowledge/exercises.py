from typing import Any

from .db import DEBUG_MODE

SYSTEM_PROMPT = """You are a Japanese reading assistant. The student is reviewing a single
word through an example sentence. Give a natural English translation of the sentence,
then one short line explaining what the target word means in this context and its
dictionary reading in hiragana. Keep the whole answer under 60 words."""


def build_gloss_prompt(word: str, sentence: str) -> str:
    return (
        f"Target word: {word}\n"
        f"Sentence: {sentence}\n\n"
        "Translate the sentence and explain the target word."
    )


def explain_sentence(word: str, sentence: str, model: Any) -> str:
    """Ask an LLM model for a short gloss of the review sentence.

    The model parameter is required; pass an ``llm`` model object.
    """
    if model is None:
        raise ValueError("An LLM model is required to explain a sentence.")

    prompt = build_gloss_prompt(word, sentence)
    if DEBUG_MODE:
        print("🤖 LLM gloss request:")
        print(f"   Model: {getattr(model, 'model_id', getattr(model, 'name', 'unknown'))}")
        print(f"   Prompt length: {len(prompt)} characters")

    try:
        response = model.prompt(prompt, system=SYSTEM_PROMPT)
        gloss = response.text().strip()
    except Exception as e:
        print(f"❌ Sentence gloss failed: {str(e)} ({type(e).__name__})")
        raise

    if not gloss:
        raise ValueError("LLM returned an empty gloss")
    return str(gloss)
