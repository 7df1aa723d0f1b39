def eur_cents(value) -> str:
    """Format integer cents as euros (e.g., 1234 -> €12.34)."""
    try:
        cents = int(value)
    except (TypeError, ValueError):
        return str(value)
    return f"€{cents / 100:.2f}"
