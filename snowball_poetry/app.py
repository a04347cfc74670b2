# app.py
# CustomTkinter GUI for the snowball poem generator (dark theme).
# - Load a preprocessed corpus file, or a folder / ZIP of raw text to preprocess.
# - Loading and generation run on worker threads so the window stays responsive.
# - Poems and an event log in separate panes.

from __future__ import annotations
import os
import shutil
import threading
import zipfile
import tempfile
from typing import Optional

import tkinter.filedialog as fd
import tkinter.messagebox as mb
import customtkinter as ctk

# Project imports (ensure PYTHONPATH=src, or pip install -e .)
from snowball import Engine, GenerationConfig, SnowballError
from snowball import config as CFG


# -------------------- small helpers --------------------

def shorten_path(p: str, max_chars: int = 60) -> str:
    if len(p) <= max_chars:
        return p
    keep = max_chars // 2 - 3
    return p[:keep] + "..." + p[-keep:]


def safe_extract_zip(zip_path: str, dest_dir: str) -> None:
    """Extract zip_path into dest_dir, refusing members that would land outside it."""
    dest_abs = os.path.abspath(dest_dir)
    with zipfile.ZipFile(zip_path) as zf:
        for info in zf.infolist():
            target = os.path.abspath(os.path.join(dest_abs, info.filename))
            if target != dest_abs and not target.startswith(dest_abs + os.sep):
                raise RuntimeError(f"Unsafe zip entry: {info.filename!r}")
        zf.extractall(dest_abs)


def _optional_int(text: str) -> Optional[int]:
    text = text.strip()
    return int(text) if text else None


# -------------------- main app --------------------

class SnowballApp(ctk.CTk):
    """Loads a corpus, then generates batches of snowball poems from the options panel."""

    def __init__(self) -> None:
        super().__init__()

        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        self.title("Snowball Poem Generator")
        self.geometry("900x700")
        self.minsize(820, 600)

        # State
        self._engine = Engine()
        self._worker: Optional[threading.Thread] = None
        self._tmpdir_path: Optional[str] = None  # extracted ZIP / preprocessed corpus

        self.font_title = ctk.CTkFont(size=18, weight="bold")
        self.font_label = ctk.CTkFont(size=13)
        self.font_mono = ctk.CTkFont(family="Cascadia Mono, Menlo, Consolas, Courier New", size=13)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)  # poems
        self.grid_rowconfigure(4, weight=1)  # log

        self._build_header()
        self._build_source_bar()
        self._build_options()
        self._build_poems()
        self._build_log()

        self._set_status("Ready")
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    # --------- UI sections ---------

    def _build_header(self) -> None:
        header = ctk.CTkFrame(self, corner_radius=10)
        header.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 6))
        ctk.CTkLabel(header, text="Snowball Poem Generator", font=self.font_title).grid(
            row=0, column=0, sticky="w", padx=12, pady=10
        )

    def _build_source_bar(self) -> None:
        bar = ctk.CTkFrame(self, corner_radius=10)
        bar.grid(row=1, column=0, sticky="ew", padx=12, pady=6)
        bar.grid_columnconfigure(3, weight=1)

        ctk.CTkButton(bar, text="Corpus File", command=self._choose_corpus).grid(
            row=0, column=0, padx=(12, 6), pady=10
        )
        ctk.CTkButton(bar, text="Raw Folder", command=self._choose_folder).grid(
            row=0, column=1, padx=(0, 6), pady=10
        )
        ctk.CTkButton(bar, text="Raw ZIP", command=self._choose_zip).grid(
            row=0, column=2, padx=(0, 6), pady=10
        )

        self.lbl_source = ctk.CTkLabel(bar, text="No corpus loaded", anchor="w", font=self.font_label)
        self.lbl_source.grid(row=0, column=3, sticky="ew", padx=6, pady=10)

        self.progress = ctk.CTkProgressBar(bar, mode="indeterminate", width=120)
        self.progress.grid(row=0, column=4, sticky="e", padx=(0, 6), pady=10)

        self.lbl_status = ctk.CTkLabel(bar, text="Status: -", anchor="e")
        self.lbl_status.grid(row=0, column=5, sticky="e", padx=12, pady=10)

    def _build_options(self) -> None:
        box = ctk.CTkFrame(self, corner_radius=10)
        box.grid(row=2, column=0, sticky="ew", padx=12, pady=6)

        self.entries: dict[str, ctk.CTkEntry] = {}
        fields = [
            ("seed_phrase", "Seed phrase", ""),
            ("n", "Poems", "50"),
            ("begin", "Begin", str(CFG.WORD_BEGIN)),
            ("end", "End", ""),
            ("percent", "Multi-key %", str(CFG.MULTI_KEY_PERCENTAGE)),
            ("min_key", "Min key", str(CFG.MIN_KEY_SIZE)),
            ("exclude", "Exclude", ""),
            ("exclude_min", "Exclude from", "0"),
            ("seed", "Random seed", ""),
        ]
        for i, (name, label, default) in enumerate(fields):
            row, col = divmod(i, 5)
            cell = ctk.CTkFrame(box, fg_color="transparent")
            cell.grid(row=row, column=col, padx=8, pady=6, sticky="w")
            ctk.CTkLabel(cell, text=label, font=self.font_label).pack(anchor="w")
            entry = ctk.CTkEntry(cell, width=260 if name == "seed_phrase" else 90)
            entry.insert(0, default)
            entry.pack(anchor="w")
            self.entries[name] = entry

        self.btn_generate = ctk.CTkButton(box, text="Generate", command=self._start_generate)
        self.btn_generate.grid(row=1, column=4, padx=8, pady=6, sticky="e")

    def _build_poems(self) -> None:
        frame = ctk.CTkFrame(self, corner_radius=10)
        frame.grid(row=3, column=0, sticky="nsew", padx=12, pady=6)
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(frame, text="Poems", font=self.font_label).grid(
            row=0, column=0, sticky="w", padx=12, pady=(10, 2)
        )
        self.txt_poems = ctk.CTkTextbox(frame, wrap="word", font=self.font_mono)
        self.txt_poems.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 12))
        self.txt_poems.configure(state="disabled")
        self._set_poems("(load a corpus and press Generate)")

    def _build_log(self) -> None:
        frame = ctk.CTkFrame(self, corner_radius=10)
        frame.grid(row=4, column=0, sticky="nsew", padx=12, pady=(6, 12))
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(frame, text="Event log", font=self.font_label).grid(
            row=0, column=0, sticky="w", padx=12, pady=(10, 2)
        )
        self.txt_log = ctk.CTkTextbox(frame, height=110, wrap="word", font=ctk.CTkFont(size=12))
        self.txt_log.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 12))
        self._log("GUI ready. Choose a corpus file, or raw text to preprocess.")

    # --------- source selection ---------

    def _choose_corpus(self) -> None:
        path = fd.askopenfilename(
            title="Choose preprocessed corpus",
            filetypes=[("Text files", "*.txt"), ("All files", "*.*")],
        )
        if path:
            self._start_worker(self._load_worker, "corpus", path)

    def _choose_folder(self) -> None:
        path = fd.askdirectory(title="Choose raw text folder")
        if path:
            self._start_worker(self._load_worker, "folder", path)

    def _choose_zip(self) -> None:
        path = fd.askopenfilename(
            title="Choose raw text ZIP",
            filetypes=[("ZIP archives", "*.zip"), ("All files", "*.*")],
        )
        if path:
            self._start_worker(self._load_worker, "zip", path)

    # --------- worker threads ---------

    def _start_worker(self, target, *args) -> None:
        if self._worker and self._worker.is_alive():
            mb.showinfo("Busy", "Still working on the last request. Please wait.")
            return
        self.progress.start()
        self.btn_generate.configure(state="disabled")
        self._worker = threading.Thread(target=target, args=args, daemon=True)
        self._worker.start()

    def _load_worker(self, mode: str, source: str) -> None:
        try:
            if mode == "corpus":
                self._log_async(f"Building tables from {source}")
                self._engine.build([source])
            else:
                self._cleanup_tmpdir()
                tmpdir = tempfile.mkdtemp(prefix="snowball_")
                self._tmpdir_path = tmpdir
                raw_dir = source
                if mode == "zip":
                    self._log_async(f"Extracting ZIP: {source}")
                    raw_dir = os.path.join(tmpdir, "raw")
                    safe_extract_zip(source, raw_dir)
                corpus = os.path.join(tmpdir, CFG.PREPROCESSED_FILE)
                n = self._engine.preprocess(raw_dir, corpus)
                self._log_async(f"Preprocessed {n:,} chains")
                self._engine.build([corpus])
            stats = self._engine.index.stats()  # type: ignore[union-attr]
        except (SnowballError, OSError, RuntimeError, zipfile.BadZipFile) as exc:
            self.after(0, lambda e=exc: self._on_error("Load error", e))
            return
        self.after(0, lambda: self._on_load_ok(source, stats))

    def _generate_worker(self, cfg: GenerationConfig, phrase: str, seed: Optional[int]) -> None:
        try:
            result = self._engine.generate(cfg, [phrase] if phrase else None, seed=seed)[0]
        except (SnowballError, RuntimeError) as exc:
            self.after(0, lambda e=exc: self._on_error("Generation error", e))
            return
        self.after(0, lambda: self._on_generated(result))

    def _start_generate(self) -> None:
        if self._engine.index is None:
            mb.showinfo("No corpus", "Load a corpus before generating.")
            return
        e = self.entries
        try:
            cfg = GenerationConfig(
                poem_target=int(e["n"].get() or 50),
                multi_key_percentage=int(e["percent"].get() or CFG.MULTI_KEY_PERCENTAGE),
                min_key_size=int(e["min_key"].get() or CFG.MIN_KEY_SIZE),
                word_begin=int(e["begin"].get() or CFG.WORD_BEGIN),
                word_end=_optional_int(e["end"].get()),
                excluded_chars=e["exclude"].get().strip(),
                excluded_min_length=int(e["exclude_min"].get() or 0),
            )
            seed = _optional_int(e["seed"].get())
        except ValueError as exc:
            mb.showerror("Options", f"Invalid number: {exc}")
            return
        self._set_status("Generating...")
        self._start_worker(self._generate_worker, cfg, e["seed_phrase"].get().strip(), seed)

    # --------- worker callbacks (UI thread) ---------

    def _on_load_ok(self, source: str, stats: dict) -> None:
        self.progress.stop()
        self.btn_generate.configure(state="normal")
        self.lbl_source.configure(text=shorten_path(source))
        self._set_status(f"Loaded {stats['words']:,} words.")
        self._log(f"Tables ready: {stats}")

    def _on_generated(self, result) -> None:
        self.progress.stop()
        self.btn_generate.configure(state="normal")
        self._set_poems("\n".join(result.poems) or "(no poems)")
        self._set_status(f"{result.successes}/{result.target} poems")
        self._log(f"Batch {result.seed_phrase!r}: {result.successes} poems, "
                  f"{result.failures} discarded")
        if result.exhausted:
            self._log("Gave up: too many incomplete poems.")

    def _on_error(self, title: str, exc: Exception) -> None:
        self.progress.stop()
        self.btn_generate.configure(state="normal")
        self._set_status("Error.")
        self._log(f"ERROR: {exc}")
        mb.showerror(title, str(exc))

    # --------- misc UI helpers ---------

    def _set_status(self, text: str) -> None:
        self.lbl_status.configure(text=f"Status: {text}")

    def _set_poems(self, text: str) -> None:
        self.txt_poems.configure(state="normal")
        self.txt_poems.delete("0.0", "end")
        self.txt_poems.insert("end", text)
        self.txt_poems.configure(state="disabled")

    def _log(self, msg: str) -> None:
        self.txt_log.insert("end", msg + "\n")
        self.txt_log.see("end")

    def _log_async(self, msg: str) -> None:
        self.after(0, lambda: self._log(msg))

    # --------- lifecycle ---------

    def _cleanup_tmpdir(self) -> None:
        if self._tmpdir_path and os.path.isdir(self._tmpdir_path):
            shutil.rmtree(self._tmpdir_path, ignore_errors=True)
        self._tmpdir_path = None

    def _on_close(self) -> None:
        self._engine.shutdown()
        self._cleanup_tmpdir()
        self.destroy()


if __name__ == "__main__":
    app = SnowballApp()
    app.mainloop()
