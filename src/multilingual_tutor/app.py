"""
Multilingual Tutor - Translation and Grammar Help with Text-to-Speech

This application provides:
- Translation with tone control and alternative variations
- Grammar explanations for 12 languages
- Text-to-speech playback of the input and of the translation
- In-memory history with one-click replay
"""

import logging
import threading
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Dict, Optional

from .config_manager import AppConfig, ConfigManager
from .errors import InferenceError
from .languages import LANGUAGES, language_name
from .llm_processor import InferenceResult, LLMProcessor
from .models import Mode, SpeechRole, Tone
from .session_controller import PendingRequest, RequestState, SessionController
from .session_manager import HistoryStore, Workspace
from .speech_controller import SpeechController
from .tts_engine import TTSEngine

AUTO_VOICE = "(automatic)"
TTS_PUMP_MS = 50


class MultilingualTutorApp:
    """Main application window"""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        self.config_manager = config_manager or ConfigManager()
        self.config: AppConfig = self.config_manager.get_config()
        self._setup_logging()

        self.logger.info("Initializing Multilingual Tutor...")
        for problem in self.config_manager.validate_config()['errors']:
            self.logger.error(f"Configuration error: {problem}")
        self._init_components()
        self._init_gui()

    def _setup_logging(self):
        """Setup logging configuration"""
        handlers = [logging.StreamHandler()]
        if self.config.log_file:
            handlers.append(logging.FileHandler(self.config.log_file))
        logging.basicConfig(
            level=getattr(logging, self.config.log_level, logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers,
        )
        self.logger = logging.getLogger(__name__)

    def _init_components(self):
        """Initialize all application components"""
        self.llm_processor = LLMProcessor(
            api_key=self.config.anthropic_api_key,
            api_url=self.config.llm_api_url,
            model_name=self.config.llm_model,
            max_tokens=self.config.llm_max_tokens,
            backend=self.config.llm_backend,
        )
        if not self.llm_processor.is_configured():
            self.logger.warning("No ANTHROPIC_API_KEY set - requests will fail until one is configured")

        self.tts_engine = TTSEngine(enabled=self.config.enable_tts, rate=self.config.tts_rate)
        self.speech = SpeechController(
            self.tts_engine,
            input_rate=self.config.tts_input_rate,
            result_rate=self.config.tts_result_rate,
            on_change=self._on_speech_change,
        )
        self.tts_engine.add_voices_listener(self.speech.update_voices)

        workspace = Workspace()
        workspace.translate.source_lang = self.config.source_lang
        workspace.translate.target_lang = self.config.target_lang
        if self.config.tone in [t.value for t in Tone]:
            workspace.translate.tone = Tone(self.config.tone)
        workspace.grammar.language = self.config.grammar_lang
        self.controller = SessionController(
            llm_processor=self.llm_processor,
            workspace=workspace,
            history=HistoryStore(),
            on_state_change=self._on_request_state_change,
            on_change=self._render,
        )
        self.speech.sync_languages(workspace.speech_languages())
        self.logger.info("All components initialized successfully")

    # GUI construction

    def _init_gui(self):
        self.root = tk.Tk()
        self.root.title("Multilingual Tutor")
        self.root.geometry("900x860")
        self.root.minsize(760, 640)

        self._name_to_code: Dict[str, str] = {lang.display_name: lang.code for lang in LANGUAGES}
        language_names = [lang.display_name for lang in LANGUAGES]

        main_frame = ttk.Frame(self.root, padding="10")
        main_frame.grid(row=0, column=0, sticky=(tk.W, tk.E, tk.N, tk.S))
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)
        main_frame.columnconfigure(0, weight=1)

        # Mode selector
        mode_frame = ttk.Frame(main_frame)
        mode_frame.grid(row=0, column=0, sticky=tk.W, pady=(0, 8))
        self.mode_var = tk.StringVar(value=self.controller.workspace.mode.value)
        ttk.Radiobutton(mode_frame, text="Translate", value=Mode.TRANSLATE.value, variable=self.mode_var,
                        command=self._on_mode_change).grid(row=0, column=0, padx=(0, 10))
        ttk.Radiobutton(mode_frame, text="Grammar Help", value=Mode.GRAMMAR.value, variable=self.mode_var,
                        command=self._on_mode_change).grid(row=0, column=1)
        ttk.Button(mode_frame, text="⚙️ Settings", command=self._open_settings_window).grid(row=0, column=2, padx=(20, 0))

        # Translate settings
        self.translate_frame = ttk.LabelFrame(main_frame, text="Languages", padding="5")
        self.translate_frame.grid(row=1, column=0, sticky=(tk.W, tk.E), pady=(0, 8))
        self.source_var = tk.StringVar()
        self.target_var = tk.StringVar()
        source_combo = ttk.Combobox(self.translate_frame, textvariable=self.source_var, values=language_names,
                                    state="readonly", width=15)
        source_combo.grid(row=0, column=0)
        source_combo.bind('<<ComboboxSelected>>', lambda e: self._on_translate_languages_change())
        ttk.Button(self.translate_frame, text="⇄", width=3, command=self._swap_languages).grid(row=0, column=1, padx=5)
        target_combo = ttk.Combobox(self.translate_frame, textvariable=self.target_var, values=language_names,
                                    state="readonly", width=15)
        target_combo.grid(row=0, column=2)
        target_combo.bind('<<ComboboxSelected>>', lambda e: self._on_translate_languages_change())
        self.tone_var = tk.StringVar()
        for col, tone in enumerate(Tone, start=3):
            ttk.Radiobutton(self.translate_frame, text=tone.value.title(), value=tone.value, variable=self.tone_var,
                            command=self._on_tone_change).grid(row=0, column=col, padx=(10, 0))

        # Grammar settings
        self.grammar_frame = ttk.LabelFrame(main_frame, text="Language", padding="5")
        self.grammar_frame.grid(row=1, column=0, sticky=(tk.W, tk.E), pady=(0, 8))
        self.grammar_lang_var = tk.StringVar()
        grammar_combo = ttk.Combobox(self.grammar_frame, textvariable=self.grammar_lang_var,
                                     values=language_names, state="readonly", width=20)
        grammar_combo.grid(row=0, column=0, sticky=tk.W)
        grammar_combo.bind('<<ComboboxSelected>>', lambda e: self._on_grammar_language_change())

        # Input
        input_frame = ttk.LabelFrame(main_frame, text="Input", padding="5")
        input_frame.grid(row=2, column=0, sticky=(tk.W, tk.E), pady=(0, 8))
        input_frame.columnconfigure(0, weight=1)
        input_tools = ttk.Frame(input_frame)
        input_tools.grid(row=0, column=0, sticky=tk.E)
        self.input_voice_var = tk.StringVar(value=AUTO_VOICE)
        self.input_voice_combo = ttk.Combobox(input_tools, textvariable=self.input_voice_var,
                                              state="readonly", width=28)
        self.input_voice_combo.grid(row=0, column=0, padx=(0, 5))
        self.input_voice_combo.bind('<<ComboboxSelected>>',
                                    lambda e: self._on_voice_change(SpeechRole.INPUT, self.input_voice_var))
        self.speak_input_button = ttk.Button(input_tools, text="🔊 Listen",
                                             command=lambda: self._toggle_speech(SpeechRole.INPUT))
        self.speak_input_button.grid(row=0, column=1)
        self.input_text = tk.Text(input_frame, height=6, wrap=tk.WORD)
        self.input_text.grid(row=1, column=0, sticky=(tk.W, tk.E), pady=(5, 0))

        self.submit_button = ttk.Button(main_frame, text="Translate", command=self._submit)
        self.submit_button.grid(row=3, column=0, sticky=tk.W, pady=(0, 8))

        # Result
        result_frame = ttk.LabelFrame(main_frame, text="Result", padding="5")
        result_frame.grid(row=4, column=0, sticky=(tk.W, tk.E, tk.N, tk.S), pady=(0, 8))
        result_frame.columnconfigure(0, weight=1)
        main_frame.rowconfigure(4, weight=1)
        self.result_tools = ttk.Frame(result_frame)
        self.result_tools.grid(row=0, column=0, sticky=(tk.W, tk.E))
        self.result_tools.columnconfigure(0, weight=1)
        self.translation_label = ttk.Label(self.result_tools, text="", font=('TkDefaultFont', 14, 'bold'),
                                           wraplength=560)
        self.translation_label.grid(row=0, column=0, sticky=tk.W)
        self.result_voice_var = tk.StringVar(value=AUTO_VOICE)
        self.result_voice_combo = ttk.Combobox(self.result_tools, textvariable=self.result_voice_var,
                                               state="readonly", width=28)
        self.result_voice_combo.grid(row=0, column=1, padx=(0, 5))
        self.result_voice_combo.bind('<<ComboboxSelected>>',
                                     lambda e: self._on_voice_change(SpeechRole.RESULT, self.result_voice_var))
        self.speak_result_button = ttk.Button(self.result_tools, text="🔊 Listen",
                                              command=lambda: self._toggle_speech(SpeechRole.RESULT))
        self.speak_result_button.grid(row=0, column=2)
        self.reply_text = tk.Text(result_frame, height=14, wrap=tk.WORD, state=tk.DISABLED)
        reply_scroll = ttk.Scrollbar(result_frame, orient="vertical", command=self.reply_text.yview)
        self.reply_text.configure(yscrollcommand=reply_scroll.set)
        self.reply_text.grid(row=1, column=0, sticky=(tk.W, tk.E, tk.N, tk.S), pady=(5, 0))
        reply_scroll.grid(row=1, column=1, sticky=(tk.N, tk.S), pady=(5, 0))
        result_frame.rowconfigure(1, weight=1)

        # History
        history_frame = ttk.LabelFrame(main_frame, text="History", padding="5")
        history_frame.grid(row=5, column=0, sticky=(tk.W, tk.E))
        history_frame.columnconfigure(0, weight=1)
        self.history_list = tk.Listbox(history_frame, height=6)
        self.history_list.grid(row=0, column=0, sticky=(tk.W, tk.E))
        self.history_list.bind('<Double-Button-1>', lambda e: self._replay_selected())
        ttk.Button(history_frame, text="Clear all", command=self._clear_history).grid(row=0, column=1,
                                                                                      sticky=tk.N, padx=(5, 0))

        self.status_label = ttk.Label(main_frame, text="Ready")
        self.status_label.grid(row=6, column=0, sticky=tk.W, pady=(6, 0))

        self._load_input_text()
        self._render()
        self._schedule_tts_pump()
        self._schedule_voice_poll()

    # Rendering

    def _render(self):
        """Refresh widgets from the workspace (input text excluded)"""
        workspace = self.controller.workspace
        translate = workspace.translate
        is_translate = workspace.mode == Mode.TRANSLATE

        self.mode_var.set(workspace.mode.value)
        self.source_var.set(language_name(translate.source_lang, translate.source_lang))
        self.target_var.set(language_name(translate.target_lang, translate.target_lang))
        self.tone_var.set(translate.tone.value)
        self.grammar_lang_var.set(language_name(workspace.grammar.language, workspace.grammar.language))

        if is_translate:
            self.grammar_frame.grid_remove()
            self.translate_frame.grid()
            self.result_tools.grid()
            self.translation_label.config(text=translate.translation)
        else:
            self.translate_frame.grid_remove()
            self.grammar_frame.grid()
            self.result_tools.grid_remove()

        self._set_reply(workspace.active.reply)

        busy = self.controller.busy
        label = "Translate" if is_translate else "Explain Grammar"
        self.submit_button.config(text="Processing..." if busy else label,
                                  state="disabled" if busy else "normal")

        self.history_list.delete(0, tk.END)
        for entry in self.controller.history:
            self.history_list.insert(tk.END, entry.summary())

        self._render_speech()

    def _render_speech(self):
        for role, button, combo, var in (
            (SpeechRole.INPUT, self.speak_input_button, self.input_voice_combo, self.input_voice_var),
            (SpeechRole.RESULT, self.speak_result_button, self.result_voice_combo, self.result_voice_var),
        ):
            button.config(text="⏹ Stop" if self.speech.is_speaking(role) else "🔊 Listen")
            combo['values'] = [AUTO_VOICE] + [v.name for v in self.speech.voices_for(role)]
            selected = self.speech.selected_voice(role)
            var.set(selected.name if selected else AUTO_VOICE)

    def _set_reply(self, text: str):
        self.reply_text.config(state=tk.NORMAL)
        self.reply_text.delete(1.0, tk.END)
        self.reply_text.insert(tk.END, text)
        self.reply_text.config(state=tk.DISABLED)

    def _load_input_text(self):
        self.input_text.delete(1.0, tk.END)
        self.input_text.insert(tk.END, self.controller.workspace.active.input_text)

    def _store_input_text(self):
        """Copy the text widget into the active session"""
        self.controller.workspace.active.input_text = self.input_text.get(1.0, tk.END).rstrip("\n")

    # Event handlers

    def _on_mode_change(self):
        self._store_input_text()
        self.controller.set_mode(Mode(self.mode_var.get()))
        self._load_input_text()
        self.speech.sync_languages(self.controller.workspace.speech_languages())

    def _on_translate_languages_change(self):
        translate = self.controller.workspace.translate
        translate.source_lang = self._name_to_code.get(self.source_var.get(), translate.source_lang)
        translate.target_lang = self._name_to_code.get(self.target_var.get(), translate.target_lang)
        self.logger.info(f"Languages changed: {translate.source_lang} → {translate.target_lang}")
        self.speech.sync_languages(self.controller.workspace.speech_languages())
        self._render()

    def _swap_languages(self):
        self.controller.swap_languages()
        self.speech.sync_languages(self.controller.workspace.speech_languages())

    def _on_tone_change(self):
        self.controller.workspace.translate.tone = Tone(self.tone_var.get())

    def _on_grammar_language_change(self):
        grammar = self.controller.workspace.grammar
        grammar.language = self._name_to_code.get(self.grammar_lang_var.get(), grammar.language)
        self.speech.sync_languages(self.controller.workspace.speech_languages())
        self._render()

    def _on_voice_change(self, role: SpeechRole, var: tk.StringVar):
        name = var.get()
        self.speech.select_voice(role, None if name == AUTO_VOICE else name)

    def _toggle_speech(self, role: SpeechRole):
        self._store_input_text()
        workspace = self.controller.workspace
        if role == SpeechRole.INPUT:
            text = workspace.active.input_text
        else:
            text = workspace.translate.translation
        self.speech.toggle(role, text)

    def _on_speech_change(self):
        if hasattr(self, 'speak_input_button'):
            self._render_speech()

    def _submit(self):
        """Send the active session to the LLM on a background thread"""
        self._store_input_text()
        pending = self.controller.begin_request()
        if pending is None:
            return
        self.status_label.config(text=f"Waiting for {self.llm_processor.model_name}...")

        def run_request():
            try:
                result = self.llm_processor.complete(pending.prompt)
            except Exception as e:
                self.logger.exception(f"Unexpected error during request: {e}")
                self.root.after(0, self._on_request_crashed, pending, e)
                return
            self.root.after(0, self._on_request_done, pending, result)

        threading.Thread(target=run_request, daemon=True).start()

    def _on_request_crashed(self, pending: PendingRequest, error: Exception):
        self._on_request_done(pending, InferenceResult(success=False, error=InferenceError(str(error))))
        messagebox.showerror("Error", f"Request failed unexpectedly:\n{error}")

    def _on_request_done(self, pending: PendingRequest, result: InferenceResult):
        self.controller.finish_request(pending, result)
        if result.success:
            self.status_label.config(text="Ready")
        else:
            self.status_label.config(text=f"Request failed: {result.error}")

    def _on_request_state_change(self, from_state: RequestState, to_state: RequestState):
        self.logger.debug(f"Request state {from_state.value} → {to_state.value}")
        if hasattr(self, 'submit_button'):
            self._render()

    def _replay_selected(self):
        selection = self.history_list.curselection()
        if not selection:
            return
        entries = self.controller.history.entries
        index = selection[0]
        if index >= len(entries):
            return
        self._store_input_text()
        self.controller.replay(entries[index])
        self._load_input_text()
        self.speech.sync_languages(self.controller.workspace.speech_languages())

    def _clear_history(self):
        if len(self.controller.history) == 0:
            return
        if messagebox.askyesno("Clear History", "Remove all history entries?"):
            self.controller.clear_history()

    # Timers

    def _schedule_tts_pump(self):
        self.tts_engine.pump()
        self.root.after(TTS_PUMP_MS, self._schedule_tts_pump)

    def _schedule_voice_poll(self):
        self.tts_engine.poll_voices()
        self.root.after(self.config.voice_poll_ms, self._schedule_voice_poll)

    # Settings

    def _open_settings_window(self):
        from .settings import SettingsWindow
        SettingsWindow(self)

    def apply_settings(self, **changes):
        """Apply settings changed in the Settings window"""
        self.config_manager.update_config(**changes)
        self.config = self.config_manager.get_config()

        self.llm_processor.cleanup()
        self.llm_processor = LLMProcessor(
            api_key=self.config.anthropic_api_key,
            api_url=self.config.llm_api_url,
            model_name=self.config.llm_model,
            max_tokens=self.config.llm_max_tokens,
            backend=self.config.llm_backend,
        )
        self.controller.llm_processor = self.llm_processor
        self.tts_engine.set_rate(self.config.tts_rate)
        self.speech.rates[SpeechRole.INPUT] = self.config.tts_input_rate
        self.speech.rates[SpeechRole.RESULT] = self.config.tts_result_rate
        self.logger.info("Settings applied")

    # Lifecycle

    def run(self):
        """Run the application"""
        try:
            self.logger.info("Starting Multilingual Tutor GUI")
            self.root.mainloop()
        except KeyboardInterrupt:
            self.logger.info("Application interrupted by user")
        finally:
            self._cleanup()

    def _cleanup(self):
        """Clean up resources"""
        self.speech.stop()
        self.tts_engine.cleanup()
        self.llm_processor.cleanup()
        self.logger.info("Application cleanup completed")


def main():
    """Main entry point"""
    try:
        app = MultilingualTutorApp()
    except tk.TclError as e:
        logging.error(f"Failed to start application: {e}")
        raise SystemExit(1)
    app.run()


if __name__ == "__main__":
    main()
