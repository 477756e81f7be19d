ELLIPSIS = "..."


def truncate(text: str, limit: int = 100, marker: str = ELLIPSIS) -> str:
    """Shorten ``text`` to at most ``limit`` characters, ending with ``marker``.

    The marker counts towards the limit, so truncating an already truncated
    string returns it unchanged.
    """
    if len(text) <= limit:
        return text
    return text[: max(limit - len(marker), 0)] + marker
