def fmt_pct(fraction: float | None, decimals: int = 2) -> str:
    """Render a 0-1 fraction as a percentage, e.g. 0.7 -> ``70.00%``."""
    if fraction is None:
        return "N/A"
    return f"{fraction * 100:.{decimals}f}%"


def fmt_money(value: float | None, currency: str = "USD") -> str:
    if value is None:
        return "N/A"
    return f"{value:,.2f} {currency}"


def fmt_price(value: float | None, currency: str = "USD") -> str:
    if value is None:
        return "N/A"
    return f"{value:.2f} {currency}"


def confidence_color(confidence: float) -> str:
    if confidence >= 0.95:
        return "bold green"
    if confidence >= 0.85:
        return "green"
    if confidence >= 0.75:
        return "yellow"
    return "orange3"


def confidence_bar(confidence: float, width: int = 10) -> str:
    filled = round(confidence * width)
    return "█" * filled + "░" * (width - filled)
