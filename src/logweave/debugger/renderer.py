"""
Exception page renderer.

Writes one HTML page per distinct exception into the log directory:

    exception--2026-02-12--14-32--3f2a9c1d0b.html

The hash covers the exception type, message and traceback locations, so
the same failure maps to the same page. An existing page with the same hash
is reused regardless of its date.

The renderer is a standalone component. Processors and the debugger adapter
hold a handle to it instead of building their own, so none of them depends
on the logger being fully constructed.
"""

from __future__ import annotations

import hashlib
import html
import traceback
from datetime import datetime
from pathlib import Path


class ExceptionRenderer:

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self._files: dict[str, Path] = {}

    def get_exception_file(self, exception: BaseException) -> Path:
        """Path of the page for this exception. Does not write anything."""
        digest = exception_hash(exception)
        if digest in self._files:
            return self._files[digest]

        path = None
        if self.directory.is_dir():
            for existing in sorted(self.directory.glob(f"exception--*--{digest}.html")):
                path = existing
                break
        if path is None:
            stamp = datetime.now().strftime("%Y-%m-%d--%H-%M")
            path = self.directory / f"exception--{stamp}--{digest}.html"
        # same exception, same name for the lifetime of the renderer
        self._files[digest] = path
        return path

    def render(self, exception: BaseException) -> Path:
        """Write the page once. Returns its path."""
        path = self.get_exception_file(exception)
        if not path.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(render_html(exception), encoding="utf-8")
        return path


def exception_hash(exception: BaseException) -> str:
    parts = [type(exception).__module__, type(exception).__qualname__, str(exception)]
    for frame in traceback.extract_tb(exception.__traceback__):
        parts.append(f"{frame.filename}:{frame.lineno}")
    return hashlib.md5("\0".join(parts).encode("utf-8")).hexdigest()[:10]


def render_html(exception: BaseException) -> str:
    title = html.escape(f"{type(exception).__name__}: {exception}")
    trace = "".join(
        traceback.format_exception(type(exception), exception, exception.__traceback__)
    )
    return (
        "<!DOCTYPE html>\n"
        "<html><head><meta charset=\"utf-8\">"
        f"<title>{title}</title></head>\n"
        f"<body><h1>{title}</h1>\n"
        f"<pre>{html.escape(trace)}</pre>\n"
        "</body></html>\n"
    )
