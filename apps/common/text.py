def sanitize_text(value, max_length: int = 500) -> str:
    """Strip angle brackets and surrounding whitespace, then truncate."""
    if not value:
        return ""
    cleaned = str(value).replace("<", "").replace(">", "").strip()
    return cleaned[:max_length]
