# handlers/render.py
from __future__ import annotations

from html import escape

from database.errors import NotFound, PartialCascadeFailure, StoreUnavailable, ThreadError, ValidationFailed
from database.views import ThreadView

PREVIEW = 100


def author_label(view: ThreadView) -> str:
    return escape(view.author.pseudo or "?") if view.author else "(удалён)"


def preview(text: str, n: int = PREVIEW) -> str:
    return escape(text[:n] + "…") if len(text) > n else escape(text)


def render_thread(view: ThreadView) -> str:
    hdr = f"<b>#{view.id}</b> · {author_label(view)} · {view.created_at:%d.%m.%Y %H:%M}"
    if view.group:
        hdr += f" · #{escape(view.group.code)}"
    if view.parent_id is not None:
        hdr += f" · ↪️ #{view.parent_id}"
    lines = [hdr, "", escape(view.text)]

    if view.children:
        lines.append("")
        for child in view.children:
            lines.append(f"└ #{child.id} {author_label(child)}: {preview(child.text, 60)}")
            for gc in child.children:
                lines.append(f"    └ #{gc.id} {author_label(gc)}: {preview(gc.text, 40)}")
    return "\n".join(lines)


def render_feed_item(view: ThreadView) -> str:
    n = len(view.children)
    replies = f"✅ {n} ответ" if n == 1 else f"✅ {n} ответа" if 2 <= n <= 4 else f"✅ {n} ответов"
    return f"<b>#{view.id}</b> · {author_label(view)}\n{preview(view.text)}\n{replies}"


def explain(e: ThreadError) -> str:
    if isinstance(e, ValidationFailed):
        return f"❌ {escape(str(e))}"
    if isinstance(e, NotFound):
        return "⛔ Пост не найден."
    if isinstance(e, PartialCascadeFailure):
        return "⚠️ Пост удалён, но профили обновятся позже."
    if isinstance(e, StoreUnavailable):
        return "⚠️ База недоступна, попробуй позже."
    return "⚠️ Ошибка."
