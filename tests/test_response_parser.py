import pytest

from multilingual_tutor.response_parser import NOT_FOUND, extract_primary_translation


def test_primary_translation_with_tone_suffix() -> None:
    reply = "PRIMARY TRANSLATION (FORMAL):\nBonjour\n\nALTERNATIVE VARIATIONS:\n1. Salut - Context: Friends"
    assert extract_primary_translation(reply) == "Bonjour"


def test_primary_translation_skips_blank_lines_after_label() -> None:
    reply = "PRIMARY TRANSLATION (CASUAL):\n\n  Salut !  \nALTERNATIVE VARIATIONS:"
    assert extract_primary_translation(reply) == "Salut !"


def test_generic_translation_label() -> None:
    reply = "Here you go\nTRANSLATION:\nHola amigo\nNotes: none"
    assert extract_primary_translation(reply) == "Hola amigo"


def test_first_plain_line_when_no_labels() -> None:
    assert extract_primary_translation("\n\nCiao\nCome stai?") == "Ciao"


def test_label_prefix_is_stripped_from_plain_line() -> None:
    assert extract_primary_translation("Answer: Guten Tag\nMore: text") == "Guten Tag"


def test_empty_label_lines_are_skipped() -> None:
    reply = "Heading:\nNote: \nObrigado"
    assert extract_primary_translation(reply) == "Obrigado"


def test_stray_heading_is_accepted_by_line_scan() -> None:
    reply = "Sure! Here is the translation\nPRIMARY TRANSLATION - FORMAL\nBonjour"
    assert extract_primary_translation(reply) == "Sure! Here is the translation"


def test_only_label_falls_back_to_first_line() -> None:
    assert extract_primary_translation("Heading:") == "Heading:"


def test_empty_reply() -> None:
    assert extract_primary_translation("") == NOT_FOUND
    assert NOT_FOUND == "Translation not found"


def test_blank_reply_returns_first_line_as_is() -> None:
    assert extract_primary_translation("   ") == "   "
    assert extract_primary_translation("   \n\t\n  ") == "   "


def test_reply_starting_with_newline_is_not_found() -> None:
    assert extract_primary_translation("\n") == NOT_FOUND


def test_empty_primary_section_skips_to_first_line() -> None:
    reply = "TRANSLATION:\nfoo\nPRIMARY TRANSLATION:\n  "
    assert extract_primary_translation(reply) == "TRANSLATION:"


def test_empty_generic_section_skips_line_scan() -> None:
    reply = "Note: hola\nTRANSLATION:\n   "
    assert extract_primary_translation(reply) == "Note: hola"


def test_single_line_reply() -> None:
    assert extract_primary_translation("Gracias") == "Gracias"


@pytest.mark.parametrize("reply", [
    ":",
    "::::",
    "\n",
    "PRIMARY TRANSLATION",
    "PRIMARY TRANSLATION:",
    "PRIMARY TRANSLATION:\n",
    "TRANSLATION:\n   ",
    "a:b:c\n:d",
    "\r\n\r\n",
    "日本語: こんにちは",
])
def test_never_raises(reply: str) -> None:
    result = extract_primary_translation(reply)
    assert isinstance(result, str)
    assert result
