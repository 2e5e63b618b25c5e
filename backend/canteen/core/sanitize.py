"""Text sanitization utilities to prevent XSS attacks."""

import html


def sanitize_text(value: str | None) -> str | None:
    """HTML-escape user-supplied free text (notes, descriptions, reasons)
    before it is stored, so the back-office can render it verbatim."""
    if value is None:
        return None
    return html.escape(value, quote=True)
