import dataclasses

import pytest

from multilingual_tutor.models import (
    GrammarHistoryEntry,
    GrammarSession,
    HistoryEntry,
    Mode,
    SpeechRole,
    Tone,
    TranslateHistoryEntry,
    TranslateSession,
)
from multilingual_tutor.session_manager import HistoryStore, Workspace


def test_workspace_defaults() -> None:
    workspace = Workspace()
    assert workspace.mode == Mode.TRANSLATE
    assert workspace.translate.source_lang == "en"
    assert workspace.translate.target_lang == "fr"
    assert workspace.translate.tone == Tone.FORMAL
    assert workspace.grammar.language == "en"


def test_swap_twice_restores_languages() -> None:
    workspace = Workspace()
    workspace.translate.source_lang, workspace.translate.target_lang = "de", "ja"

    workspace.swap_languages()
    assert (workspace.translate.source_lang, workspace.translate.target_lang) == ("ja", "de")

    workspace.swap_languages()
    assert (workspace.translate.source_lang, workspace.translate.target_lang) == ("de", "ja")


def test_mode_switch_keeps_other_session() -> None:
    workspace = Workspace()
    workspace.translate.input_text = "Good morning"
    workspace.set_mode(Mode.GRAMMAR)
    workspace.grammar.input_text = "He go to school"

    workspace.set_mode(Mode.TRANSLATE)

    assert workspace.active is workspace.translate
    assert workspace.translate.input_text == "Good morning"
    assert workspace.grammar.input_text == "He go to school"


def test_speech_languages_follow_mode() -> None:
    workspace = Workspace()
    workspace.translate.source_lang = "es"
    workspace.grammar.language = "it"

    assert workspace.speech_languages() == {SpeechRole.INPUT: "es", SpeechRole.RESULT: "fr"}
    workspace.set_mode(Mode.GRAMMAR)
    assert workspace.speech_languages() == {SpeechRole.INPUT: "it", SpeechRole.RESULT: "fr"}


def test_ids_strictly_increase_within_same_millisecond(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("multilingual_tutor.session_manager.now_ms", lambda: 1_700_000_000_000)
    store = HistoryStore()

    ids = [store.next_id() for _ in range(3)]

    assert ids == [1_700_000_000_000, 1_700_000_000_001, 1_700_000_000_002]


def test_record_prepends_and_clear_empties() -> None:
    store = HistoryStore()
    first = store.create_entry(GrammarSession(input_text="one", reply="r1"))
    second = store.create_entry(TranslateSession(input_text="two", reply="r2"))

    store.record(first)
    store.record(second)

    assert [e.input_text for e in store] == ["two", "one"]
    assert len(store) == 2
    assert second.entry_id > first.entry_id

    store.clear()
    assert store.entries == []


def test_create_entry_snapshots_translate_fields() -> None:
    store = HistoryStore()
    session = TranslateSession(input_text="Hi", translation="Salut", reply="full reply",
                               source_lang="en", target_lang="fr", tone=Tone.CASUAL)

    entry = store.create_entry(session)
    session.input_text = "changed"

    assert isinstance(entry, TranslateHistoryEntry)
    assert entry.mode == Mode.TRANSLATE
    assert (entry.input_text, entry.translation, entry.reply) == ("Hi", "Salut", "full reply")
    assert (entry.source_lang, entry.target_lang, entry.tone) == ("en", "fr", Tone.CASUAL)
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.reply = "edited"


def test_summary_truncates_input() -> None:
    entry = GrammarHistoryEntry(entry_id=1, input_text="x" * 60, reply="", timestamp="10:00:00", language="de")
    summary = entry.summary()
    assert summary.startswith("[10:00:00] grammar German grammar |")
    assert summary.endswith("x" * 40 + "...")


def test_replay_translate_entry_restores_session() -> None:
    store = HistoryStore()
    workspace = Workspace(Mode.GRAMMAR)
    entry = TranslateHistoryEntry(entry_id=1, input_text="Thank you", reply="reply", timestamp="09:00:00",
                                  source_lang="en", target_lang="ja", tone=Tone.CASUAL, translation="ありがとう")

    store.replay(entry, workspace)

    session = workspace.translate
    assert workspace.mode == Mode.TRANSLATE
    assert (session.input_text, session.target_lang, session.tone) == ("Thank you", "ja", Tone.CASUAL)
    assert (session.reply, session.translation) == ("reply", "ありがとう")


def test_history_entry_base_is_abstract() -> None:
    with pytest.raises(TypeError):
        HistoryEntry(entry_id=1, input_text="", reply="", timestamp="")


@dataclasses.dataclass(frozen=True)
class NoteEntry(HistoryEntry):
    @property
    def mode(self) -> Mode:
        return Mode.GRAMMAR


def test_replay_rejects_unknown_entry() -> None:
    store = HistoryStore()
    entry = NoteEntry(entry_id=1, input_text="", reply="", timestamp="")
    with pytest.raises(TypeError):
        store.replay(entry, Workspace())
