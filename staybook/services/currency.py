from decimal import Decimal

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "THB": "฿",
    # Add other currencies as needed
}

def get_currency_symbol(currency_code: str) -> str:
    """Returns the currency symbol for a given currency code."""
    return CURRENCY_SYMBOLS.get((currency_code or "").upper(), "")

def format_money(amount, currency_code: str) -> str:
    """Format an amount with two decimals, prefixed by the symbol or suffixed by the code."""
    value = Decimal(str(amount or 0)).quantize(Decimal("0.01"))
    symbol = get_currency_symbol(currency_code)
    return f"{symbol}{value:,.2f}" if symbol else f"{value:,.2f} {currency_code.upper()}"
