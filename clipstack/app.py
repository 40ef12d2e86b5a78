from __future__ import annotations

import re
import tkinter as tk
from tkinter import messagebox

import ttkbootstrap as tb
from ttkbootstrap.constants import BOTH, DANGER, LEFT, OUTLINE, PRIMARY, RIGHT, SECONDARY, X
from ttkbootstrap.toast import ToastNotification

from .clipboard import SystemClipboard
from .constants import (
    APP_NAME,
    APP_VERSION,
    AUTO_CLEAR_CHOICES,
    IMAGE,
    MAX_HISTORY,
    MIN_HISTORY,
)
from .hotkeys import GlobalHotkey
from .preferences import Preferences
from .session import ClipSession
from .storage import Storage

IMAGE_ICON = "🖼️"
TEXT_ICON = "📝"


def _auto_clear_label(hours: int) -> str:
    if hours <= 0:
        return "Never"
    if hours == 168:
        return "After 1 week"
    return f"After {hours} hour{'s' if hours != 1 else ''}"


def format_list_item(entry, display_index: int) -> str:
    """One Listbox row: ordinal (1-9 are shortcuts), kind icon, one-line preview, time."""
    one = re.sub(r"\s+", " ", entry.preview).strip()
    if len(one) > 60:
        one = one[:57] + "..."
    icon = IMAGE_ICON if entry.kind == IMAGE else TEXT_ICON
    num = f"{display_index}." if display_index <= 9 else "  "
    return f"{num:>3} {icon} {one}   ({entry.display_timestamp})"


class ClipStackApp(tb.Window):
    def __init__(self, storage: Storage | None = None):
        super().__init__(themename="flatly")
        self.title(APP_NAME)
        self.geometry("500x600")
        self.minsize(380, 420)
        try:
            self.attributes("-topmost", True)
        except Exception:
            pass

        self.storage = storage or Storage()
        self.hotkey = GlobalHotkey(self, self.toggle_visible, self.storage)
        self.session = ClipSession(self, SystemClipboard(), self.storage, hotkey=self.hotkey)

        # Entries currently shown, in Listbox order
        self.view_items = []

        self._build_ui()
        self._bind_shortcuts()
        self._refresh_list()

        self.session.store.subscribe(self._on_history_changed)
        self.session.notifier.subscribe(self._show_toast)

        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self.after(250, self.session.start)

    # -----------------------------
    # UI
    # -----------------------------
    def _build_ui(self):
        root = tb.Frame(self, padding=12)
        root.pack(fill=BOTH, expand=True)

        top = tb.Frame(root)
        top.pack(fill=X, pady=(0, 10))
        tb.Label(top, text=APP_NAME, font=("Segoe UI", 16, "bold")).pack(side=LEFT)
        tb.Button(top, text="Preferences", command=self._open_preferences, bootstyle=SECONDARY).pack(side=RIGHT)

        search_box = tb.Frame(root)
        search_box.pack(fill=X, pady=(0, 8))
        tb.Label(search_box, text="Search").pack(side=LEFT, padx=(0, 8))
        self.search_var = tk.StringVar(value="")
        self.search_entry = tb.Entry(search_box, textvariable=self.search_var)
        self.search_entry.pack(side=LEFT, fill=X, expand=True)
        self.search_entry.bind("<KeyRelease>", lambda _e: self._refresh_list())

        self.listbox = tk.Listbox(root, activestyle="none", exportselection=False, font=("Segoe UI", 10))
        self.listbox.pack(fill=BOTH, expand=True)
        self.listbox.bind("<Double-Button-1>", lambda _e: self._copy_selected())

        actions = tb.Frame(root)
        actions.pack(fill=X, pady=(10, 0))
        tb.Button(actions, text="Copy", command=self._copy_selected, bootstyle=PRIMARY).pack(side=LEFT)
        tb.Button(actions, text="Delete", command=self._delete_selected, bootstyle=OUTLINE).pack(side=LEFT, padx=(8, 0))
        tb.Button(actions, text="Clear", command=self._clear_history, bootstyle=DANGER).pack(side=LEFT, padx=(8, 0))
        tb.Button(actions, text="Quit", command=self._quit, bootstyle=SECONDARY).pack(side=RIGHT)

        self.status_var = tk.StringVar(value="")
        tb.Label(root, textvariable=self.status_var, font=("Segoe UI", 8)).pack(fill=X, pady=(8, 0))

    def _bind_shortcuts(self):
        self.bind("<Return>", lambda e: (self._copy_selected(), "break"))
        self.bind("<Delete>", lambda e: (self._delete_selected(), "break"))
        self.bind("<Escape>", lambda e: (self._hide(), "break"))
        self.listbox.bind("<slash>", lambda e: (self.search_entry.focus_set(), "break"))
        for n in range(1, 10):
            self.listbox.bind(str(n), lambda e, i=n - 1: (self._copy_index(i), "break"))

    def _update_status_bar(self):
        store = self.session.store
        cap = self.session.prefs.current.max_history_items
        self.status_var.set(f"v{APP_VERSION}   Items: {len(store)}/{cap}   Data: {self.storage.data_dir}")

    def _refresh_list(self):
        self.view_items = self.session.store.search(self.search_var.get())
        self.listbox.delete(0, tk.END)
        for i, entry in enumerate(self.view_items, start=1):
            self.listbox.insert(tk.END, format_list_item(entry, i))
        if self.view_items:
            self.listbox.selection_set(0)
        self._update_status_bar()

    def _on_history_changed(self, _entries):
        self._refresh_list()

    def _show_toast(self, title: str, body: str):
        ToastNotification(title=title, message=body, duration=3000).show_toast()

    # -----------------------------
    # Actions
    # -----------------------------
    def toggle_visible(self):
        if self.state() == "withdrawn":
            self.deiconify()
            self.lift()
            self.focus_force()
            self._refresh_list()
            self.listbox.focus_set()
        else:
            self.withdraw()

    def _selected_entry(self):
        sel = self.listbox.curselection()
        if not sel or sel[0] >= len(self.view_items):
            return None
        return self.view_items[sel[0]]

    def _copy_index(self, i: int):
        if 0 <= i < len(self.view_items):
            self._copy_entry(self.view_items[i])

    def _copy_selected(self):
        entry = self._selected_entry()
        if entry is not None:
            self._copy_entry(entry)

    def _copy_entry(self, entry):
        if self.session.poller.copy_entry(entry):
            self._hide()
        else:
            messagebox.showerror(APP_NAME, "Failed to copy to clipboard.")

    def _delete_selected(self):
        entry = self._selected_entry()
        if entry is None:
            return
        ids = [e.id for e in self.session.store.list()]
        if entry.id in ids:
            self.session.store.delete_at(ids.index(entry.id))

    def _clear_history(self):
        if not len(self.session.store):
            return
        if messagebox.askyesno(APP_NAME, "Clear the whole clipboard history?"):
            self.session.store.clear()

    # -----------------------------
    # Preferences
    # -----------------------------
    def _open_preferences(self):
        cur = self.session.prefs.current

        dlg = tk.Toplevel(self)
        dlg.title("Preferences")
        dlg.transient(self)
        dlg.grab_set()
        dlg.resizable(False, False)

        g = tb.Frame(dlg, padding=14)
        g.pack(fill=BOTH, expand=True)
        g.columnconfigure(1, weight=1)

        max_var = tk.StringVar(value=str(cur.max_history_items))
        hotkey_var = tk.StringVar(value=cur.hotkey)
        startup_var = tk.BooleanVar(value=cur.launch_at_startup)
        notify_var = tk.BooleanVar(value=cur.show_notifications)
        pw_var = tk.BooleanVar(value=cur.exclude_passwords)

        choices = list(AUTO_CLEAR_CHOICES)
        if cur.auto_clear_interval not in choices:
            choices.append(cur.auto_clear_interval)
        labels = [_auto_clear_label(h) for h in choices]
        clear_var = tk.StringVar(value=_auto_clear_label(cur.auto_clear_interval))

        tb.Label(g, text=f"Maximum history items ({MIN_HISTORY}-{MAX_HISTORY}):").grid(row=0, column=0, sticky="w", pady=6)
        tb.Spinbox(g, from_=MIN_HISTORY, to=MAX_HISTORY, textvariable=max_var, width=8).grid(row=0, column=1, sticky="w", padx=(10, 0), pady=6)

        tb.Label(g, text="Global hotkey:").grid(row=1, column=0, sticky="w", pady=6)
        tb.Entry(g, textvariable=hotkey_var, width=24).grid(row=1, column=1, sticky="w", padx=(10, 0), pady=6)

        tb.Label(g, text="Auto-clear history:").grid(row=2, column=0, sticky="w", pady=6)
        tb.Combobox(g, textvariable=clear_var, values=labels, state="readonly", width=16).grid(row=2, column=1, sticky="w", padx=(10, 0), pady=6)

        tb.Checkbutton(g, text="Launch at startup", variable=startup_var, bootstyle="round-toggle").grid(row=3, column=0, columnspan=2, sticky="w", pady=6)
        tb.Checkbutton(g, text="Show notifications", variable=notify_var, bootstyle="round-toggle").grid(row=4, column=0, columnspan=2, sticky="w", pady=6)
        tb.Checkbutton(g, text="Skip text that looks like a password", variable=pw_var, bootstyle="round-toggle").grid(row=5, column=0, columnspan=2, sticky="w", pady=6)

        def save():
            try:
                hours = choices[labels.index(clear_var.get())]
            except ValueError:
                hours = cur.auto_clear_interval
            try:
                max_items = int(max_var.get().strip())
            except ValueError:
                max_items = cur.max_history_items
            new = Preferences.from_dict({
                "max_history_items": max_items,
                "launch_at_startup": startup_var.get(),
                "show_notifications": notify_var.get(),
                "hotkey": hotkey_var.get(),
                "auto_clear_interval": hours,
                "exclude_passwords": pw_var.get(),
            })
            self.session.save_preferences(new)
            self._update_status_bar()
            dlg.destroy()

        btns = tb.Frame(g)
        btns.grid(row=6, column=0, columnspan=2, sticky="e", pady=(12, 0))
        tb.Button(btns, text="Cancel", command=dlg.destroy, bootstyle=SECONDARY).pack(side=LEFT)
        tb.Button(btns, text="Save", command=save, bootstyle=PRIMARY).pack(side=LEFT, padx=(8, 0))

    # -----------------------------
    # Shutdown
    # -----------------------------
    def _hide(self):
        # Without a working hotkey there is no way back to a hidden window.
        if self.hotkey.active:
            self.withdraw()

    def _on_close(self):
        if self.hotkey.active:
            self.withdraw()
        else:
            self._quit()

    def _quit(self):
        self.session.shutdown()
        self.destroy()


def main():
    app = ClipStackApp()
    app.mainloop()


if __name__ == "__main__":
    main()
