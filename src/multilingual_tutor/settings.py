import tkinter as tk
from tkinter import messagebox, ttk

from .llm_processor import BACKEND_HTTP, BACKEND_SDK


class SettingsWindow:
    def __init__(self, app: "MultilingualTutorApp"):
        self.app = app
        config = app.config
        self.win = tk.Toplevel(app.root)
        self.win.title("Settings")
        self.win.geometry("560x360")
        self.win.transient(app.root)
        self.win.grab_set()

        nb = ttk.Notebook(self.win)
        nb.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        # API tab
        api = ttk.Frame(nb)
        nb.add(api, text="API")

        ttk.Label(api, text="API Key").grid(row=0, column=0, sticky=tk.W, pady=(5, 2))
        self.api_key_var = tk.StringVar(value=config.anthropic_api_key or "")
        ttk.Entry(api, textvariable=self.api_key_var, show="*", width=48).grid(row=0, column=1, sticky=tk.W)

        ttk.Label(api, text="Model").grid(row=1, column=0, sticky=tk.W, pady=(10, 2))
        self.model_var = tk.StringVar(value=config.llm_model)
        ttk.Entry(api, textvariable=self.model_var, width=36).grid(row=1, column=1, sticky=tk.W)

        ttk.Label(api, text="Max Tokens").grid(row=2, column=0, sticky=tk.W, pady=(10, 2))
        self.max_tokens_var = tk.IntVar(value=config.llm_max_tokens)
        ttk.Spinbox(api, from_=100, to=8000, increment=100, textvariable=self.max_tokens_var,
                    width=8).grid(row=2, column=1, sticky=tk.W)

        ttk.Label(api, text="Backend").grid(row=3, column=0, sticky=tk.W, pady=(10, 2))
        self.backend_var = tk.StringVar(value=config.llm_backend)
        ttk.Combobox(api, textvariable=self.backend_var, values=[BACKEND_HTTP, BACKEND_SDK],
                     state="readonly", width=12).grid(row=3, column=1, sticky=tk.W)

        # Speech tab
        speech = ttk.Frame(nb)
        nb.add(speech, text="Speech")

        ttk.Label(speech, text="Base Rate (WPM)").grid(row=0, column=0, sticky=tk.W, pady=(5, 2))
        self.rate_var = tk.IntVar(value=config.tts_rate)
        ttk.Scale(speech, from_=80, to=320, orient='horizontal', length=250,
                  variable=self.rate_var).grid(row=0, column=1, sticky=tk.W)

        ttk.Label(speech, text="Input Speed").grid(row=1, column=0, sticky=tk.W, pady=(10, 2))
        self.input_rate_var = tk.DoubleVar(value=config.tts_input_rate)
        ttk.Spinbox(speech, from_=0.3, to=2.0, increment=0.05, textvariable=self.input_rate_var,
                    width=6).grid(row=1, column=1, sticky=tk.W)

        ttk.Label(speech, text="Translation Speed").grid(row=2, column=0, sticky=tk.W, pady=(10, 2))
        self.result_rate_var = tk.DoubleVar(value=config.tts_result_rate)
        ttk.Spinbox(speech, from_=0.3, to=2.0, increment=0.05, textvariable=self.result_rate_var,
                    width=6).grid(row=2, column=1, sticky=tk.W)

        btns = ttk.Frame(self.win)
        btns.pack(fill=tk.X, padx=10, pady=(0, 10))
        ttk.Button(btns, text="Save", command=self._save).pack(side=tk.RIGHT)
        ttk.Button(btns, text="Cancel", command=self.win.destroy).pack(side=tk.RIGHT, padx=(0, 6))

    def _save(self):
        try:
            changes = {
                'anthropic_api_key': self.api_key_var.get().strip() or None,
                'llm_model': self.model_var.get().strip() or self.app.config.llm_model,
                'llm_max_tokens': int(self.max_tokens_var.get()),
                'llm_backend': self.backend_var.get(),
                'tts_rate': int(self.rate_var.get()),
                'tts_input_rate': float(self.input_rate_var.get()),
                'tts_result_rate': float(self.result_rate_var.get()),
            }
        except (tk.TclError, ValueError) as e:
            messagebox.showerror("Invalid Setting", str(e), parent=self.win)
            return

        manager = self.app.config_manager
        if changes['anthropic_api_key']:
            manager.set_env_var('ANTHROPIC_API_KEY', changes['anthropic_api_key'])
        manager.set_env_var('LLM_MODEL', changes['llm_model'])
        manager.set_env_var('LLM_MAX_TOKENS', str(changes['llm_max_tokens']))
        manager.set_env_var('LLM_BACKEND', changes['llm_backend'])
        manager.set_env_var('TTS_RATE', str(changes['tts_rate']))
        manager.set_env_var('TTS_INPUT_RATE', f"{changes['tts_input_rate']:.2f}")
        manager.set_env_var('TTS_RESULT_RATE', f"{changes['tts_result_rate']:.2f}")

        self.app.apply_settings(**changes)
        self.win.destroy()
