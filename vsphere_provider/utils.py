UNICODE_FALLBACKS = {
    "\u2713": "[OK]",   # check mark
    "\u2717": "[X]",    # ballot x
    "\u2192": "->",     # right arrow
    "\u2026": "...",    # ellipsis
    "\u2013": "-",      # en dash
    "\u2014": "-",      # em dash
}


def _normalize_unicode(text: str) -> str:
    """Replace problematic Unicode characters with ASCII equivalents."""
    for bad, repl in UNICODE_FALLBACKS.items():
        text = text.replace(bad, repl)
    return text

