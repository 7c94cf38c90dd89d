"""Tkinter-based front-end for the caption editing session."""
from __future__ import annotations

import logging
import tkinter as tk
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps, ImageTk

from .session import EditSession, SessionState


class TkCaptionEditor:
    """Listbox of captions with a modal edit dialog, plugged into :class:`EditSession`."""

    def __init__(
        self,
        *,
        list_size: tuple[int, int] = (80, 24),
        thumbnail_max_size: tuple[int, int] = (420, 320),
    ) -> None:
        self._list_size = list_size
        self._thumbnail_max_size = thumbnail_max_size
        self._root: Optional[tk.Tk] = None
        self._listbox: Optional[tk.Listbox] = None
        self._dialog: Optional[tk.Toplevel] = None
        self._entry: Optional[tk.Entry] = None
        self._thumbnail: Optional[ImageTk.PhotoImage] = None
        self._session: Optional[EditSession] = None

    def run(self, session: EditSession) -> None:
        self._session = session
        self._root = tk.Tk()
        self._root.title("Caption Editor")
        self._root.protocol("WM_DELETE_WINDOW", self._on_quit)

        layout = tk.Frame(self._root, padx=12, pady=12)
        layout.pack(fill="both", expand=True)

        scrollbar = tk.Scrollbar(layout, orient="vertical")
        width, height = self._list_size
        self._listbox = tk.Listbox(
            layout,
            width=width,
            height=height,
            activestyle="dotbox",
            exportselection=False,
            yscrollcommand=scrollbar.set,
        )
        scrollbar.configure(command=self._listbox.yview)
        self._listbox.pack(side="left", fill="both", expand=True)
        scrollbar.pack(side="left", fill="y")
        for label in session.labels():
            self._listbox.insert(tk.END, label)
        self._listbox.bind("<Double-Button-1>", lambda _e: self._on_select())
        self._listbox.bind("<Return>", lambda _e: self._on_select())

        ok_btn = tk.Button(self._root, text="Ok", command=self._on_quit)
        ok_btn.pack(pady=(0, 12))

        if len(session):
            self._listbox.selection_set(0)
            self._listbox.activate(0)
        self._listbox.focus_set()
        try:
            self._root.mainloop()
        finally:
            self.destroy()

    def destroy(self) -> None:
        if self._root is None:
            return
        try:
            self._root.destroy()
        except tk.TclError:
            pass
        self._root = None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _on_select(self) -> None:
        assert self._session is not None and self._listbox is not None
        if self._session.state is not SessionState.LISTING:
            return
        selection = self._listbox.curselection()
        if not selection:
            return
        index = int(selection[0])
        caption = self._session.select(index)
        self._open_dialog(index, caption)

    def _on_submit(self) -> None:
        assert self._session is not None and self._listbox is not None and self._entry is not None
        index = self._session.selected
        label = self._session.submit(self._entry.get())
        self._listbox.delete(index)
        self._listbox.insert(index, label)
        self._listbox.selection_clear(0, tk.END)
        self._listbox.selection_set(index)
        self._listbox.activate(index)
        self._close_dialog()

    def _on_cancel(self) -> None:
        assert self._session is not None
        self._session.cancel()
        self._close_dialog()

    def _on_quit(self) -> None:
        assert self._session is not None and self._root is not None
        if self._session.state is SessionState.EDITING:
            self._on_cancel()
        self._session.quit()
        self._root.quit()

    # ------------------------------------------------------------------
    # Dialog helpers
    # ------------------------------------------------------------------
    def _open_dialog(self, index: int, caption: str) -> None:
        assert self._session is not None and self._root is not None
        record = self._session.records[index]
        dialog = tk.Toplevel(self._root)
        dialog.title(f"Editing caption for image {record.filename}")
        dialog.transient(self._root)
        dialog.protocol("WM_DELETE_WINDOW", self._on_cancel)

        canvas = tk.Canvas(dialog, bg="#222", highlightthickness=0)
        if self._render_thumbnail(canvas, record.image_path):
            canvas.pack(padx=12, pady=(12, 0))

        self._entry = tk.Entry(dialog, width=60)
        self._entry.insert(0, caption)
        self._entry.bind("<Return>", lambda _e: self._on_submit())
        self._entry.bind("<Escape>", lambda _e: self._on_cancel())
        self._entry.pack(fill="x", padx=12, pady=12)

        buttons = tk.Frame(dialog)
        buttons.pack(pady=(0, 12))
        tk.Button(buttons, text="Ok", command=self._on_submit).pack(side="left")
        tk.Button(buttons, text="Cancel", command=self._on_cancel).pack(side="left", padx=8)

        self._dialog = dialog
        dialog.grab_set()
        self._entry.focus_set()
        self._entry.select_range(0, tk.END)

    def _close_dialog(self) -> None:
        if self._dialog is not None:
            self._dialog.grab_release()
            self._dialog.destroy()
        self._dialog = None
        self._entry = None
        self._thumbnail = None
        if self._listbox is not None:
            self._listbox.focus_set()

    def _render_thumbnail(self, canvas: tk.Canvas, image_path: Path) -> bool:
        try:
            with Image.open(image_path) as image:
                image = ImageOps.exif_transpose(image)
                image = image.convert("RGB")
                image.thumbnail(self._thumbnail_max_size, Image.LANCZOS)
                self._thumbnail = ImageTk.PhotoImage(image)
        except (OSError, ValueError) as exc:
            logging.debug("No preview for %s: %s", image_path, exc)
            return False
        canvas.configure(width=self._thumbnail.width(), height=self._thumbnail.height())
        canvas.create_image(0, 0, image=self._thumbnail, anchor="nw")
        return True


__all__ = ["TkCaptionEditor"]
