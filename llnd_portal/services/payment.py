"""Card checks run before a card payment is sent to the gateway."""

import re
from datetime import date
from typing import Dict, Optional

from llnd_portal.schemas.payment import CardDetails

_NON_DIGITS = re.compile(r"\D")

DEFAULT_FAILURE_MESSAGE = "Payment failed. Please try again."


def clean_card_number(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_card_number(value: str) -> str:
    """'4111111111111111' -> '4111 1111 1111 1111'"""
    digits = clean_card_number(value)
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def validate_card_number(card_number: str) -> bool:
    digits = clean_card_number(card_number)
    if len(digits) < 13 or len(digits) > 19:
        return False

    # Luhn
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def detect_card_type(card_number: str) -> str:
    digits = clean_card_number(card_number)
    if re.match(r"^4", digits):
        return "visa"
    if re.match(r"^5[1-5]", digits) or re.match(r"^2[2-7]", digits):
        return "mastercard"
    if re.match(r"^3[47]", digits):
        return "amex"
    return "unknown"


def cvv_length(card_type: str) -> int:
    return 4 if card_type == "amex" else 3


def validate_expiry(month: str, year: str, today: Optional[date] = None) -> bool:
    today = today or date.today()
    try:
        exp_month = int(month)
        exp_year = int(year)
    except (TypeError, ValueError):
        return False

    current_year = today.year % 100
    if exp_month < 1 or exp_month > 12:
        return False
    if exp_year < current_year:
        return False
    if exp_year == current_year and exp_month < today.month:
        return False
    return True


def validate_card(details: CardDetails, today: Optional[date] = None) -> Dict[str, str]:
    errors = {}
    if not details.card_name.strip():
        errors["cardName"] = "Name on card is required"

    number = clean_card_number(details.card_number)
    if not number:
        errors["cardNumber"] = "Card number is required"
    elif not validate_card_number(number):
        errors["cardNumber"] = "Please enter a valid card number"

    if not details.expiry_month:
        errors["expiryMonth"] = "Expiry month is required"
    if not details.expiry_year:
        errors["expiryYear"] = "Expiry year is required"
    if details.expiry_month and details.expiry_year:
        if not validate_expiry(details.expiry_month, details.expiry_year, today):
            errors["expiryMonth"] = "Card has expired"

    expected = cvv_length(detect_card_type(number))
    if not details.cvv:
        errors["cvv"] = "CVV is required"
    elif not details.cvv.isdigit() or len(details.cvv) != expected:
        errors["cvv"] = f"CVV must be {expected} digits"
    return errors


def amount_in_cents(price: float) -> int:
    return int(round(price * 100))


def failure_message(body: Optional[dict]) -> str:
    """Pick the most specific failure text out of a card payment response."""
    if not body:
        return DEFAULT_FAILURE_MESSAGE
    data = body.get("data") or {}
    if isinstance(data, dict) and data.get("errorMessages"):
        return data["errorMessages"]
    if body.get("message"):
        return body["message"]
    if body.get("errors"):
        return ", ".join(body["errors"])
    return DEFAULT_FAILURE_MESSAGE
