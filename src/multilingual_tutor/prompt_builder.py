"""
Prompt Builder for Multilingual Tutor
Turns the active session into the instruction sent to the LLM
"""

from typing import Union

from .languages import language_name
from .models import GrammarSession, Tone, TranslateSession

TRANSLATE_TEMPLATE = """You are a translation expert. Translate this {source} text to {target} in a {tone} tone.

Your task: Provide ONLY the translations and variations. NO grammar explanations, vocabulary notes, or learning content.

Structure your response EXACTLY like this:

PRIMARY TRANSLATION ({tone_label}):
[the main {tone} translation]

ALTERNATIVE VARIATIONS:
1. [Formal version] - Context: Professional/written communication
2. [Casual version] - Context: Friends/texting
3. [Modern slang if applicable] - Context: Social media (TikTok/Instagram)
4. [Regional variation if applicable] - Context: Different regions/dialects

Keep it simple - just show the translation options with brief context labels. Grammar and vocabulary explanations belong in Grammar mode.

TEXT TO TRANSLATE:
{text}"""

GRAMMAR_TEMPLATE = """Explain this {language} grammar concept to a learner. Use simple terms but respect their intelligence.

Structure your response EXACTLY like this:

SIMPLE EXPLANATION:
[explain the concept in plain English, 2-3 sentences]

WHY IT WORKS:
[explain the logic/reason behind the rule]

EXAMPLES:
[provide 2-3 clear examples with translations to English if not already in English]

COMMON MISTAKES:
[mention 1-2 common errors learners make]

GRAMMAR QUESTION ABOUT {language_label}:
{text}"""


def _require_text(text: str) -> None:
    if not text or not text.strip():
        raise ValueError("Cannot build a prompt from empty input")


def build_translate_prompt(text: str, source_lang: str, target_lang: str,
                           tone: Union[Tone, str] = Tone.FORMAL) -> str:
    _require_text(text)
    tone_value = Tone(tone).value
    return TRANSLATE_TEMPLATE.format(
        source=language_name(source_lang, "English"),
        target=language_name(target_lang, "French"),
        tone=tone_value,
        tone_label=tone_value.upper(),
        text=text,
    )


def build_grammar_prompt(text: str, language: str) -> str:
    _require_text(text)
    name = language_name(language, "English")
    return GRAMMAR_TEMPLATE.format(language=name, language_label=name.upper(), text=text)


def build_prompt(session: Union[TranslateSession, GrammarSession]) -> str:
    """Build the prompt for whichever session variant is active"""
    if isinstance(session, TranslateSession):
        return build_translate_prompt(session.input_text, session.source_lang,
                                      session.target_lang, session.tone)
    return build_grammar_prompt(session.input_text, session.language)
