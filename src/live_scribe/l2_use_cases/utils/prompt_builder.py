"""Pure functions for building completion prompts from session context."""

from __future__ import annotations

from live_scribe.l1_entities.session import SessionContext


def build_refine_instruction(context: SessionContext, *, reference_chars: int = 1500, language: str = 'English') -> str:
    """System instruction for the refine stage."""
    return (
        'Expert AI transcriber. Polish the speech-to-text transcript immediately.\n'
        f'CONTEXT: {context.description.strip() or "(none)"}\n'
        f'REFERENCE MATERIALS: {context.reference_text[:reference_chars].strip() or "(none)"}\n'
        'Match technical jargon found in the materials.\n'
        'Rules: add punctuation, fix homophones, preserve the exact meaning. '
        f'Output {language} only.'
    )


def build_refine_prompt(tail: str) -> str:
    return f'Refine: "{tail}"'


def build_translate_instruction(
    context: SessionContext,
    *,
    source_language: str = 'English',
    target_language: str = 'Vietnamese',
    reference_chars: int = 4000,
) -> str:
    """System instruction for the translate stage; reference material doubles as a glossary."""
    return (
        f'Expert professional simultaneous interpreter ({source_language} -> {target_language}).\n'
        f'CONTEXT: {context.description.strip() or "(none)"}\n'
        f'TECHNICAL GLOSSARY: {context.reference_text[:reference_chars].strip() or "(none)"}\n'
        '\n'
        'RULES:\n'
        f'1. Output ONLY {target_language}.\n'
        '2. Use the TECHNICAL GLOSSARY to translate specific terms and project names accurately.\n'
        '3. Translate immediately and concisely.\n'
        '4. Tone: professional and accurate.'
    )


def build_translate_prompt(span: str, *, target_language: str = 'Vietnamese') -> str:
    return f'Interpret to {target_language}: "{span}"'


def clean_response(raw: str) -> str:
    """Strip whitespace and a single pair of wrapping double quotes echoed back from the prompt."""
    text = raw.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1].strip()
    return text
