from decimal import Decimal


def format_amount(value: float) -> str:
    # Shortest round trip digits in positional notation: 900000, 0.5, 0.0000001
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
