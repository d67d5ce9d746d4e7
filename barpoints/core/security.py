# barpoints/core/security.py


def normalize_phone(phone: str) -> str:
    digits = "".join(ch for ch in (phone or "") if ch.isdigit())
    # Россия: часто вводят 8XXXXXXXXXX -> 7XXXXXXXXXX
    if len(digits) == 11 and digits.startswith("8"):
        digits = "7" + digits[1:]
    return digits


def is_valid_sbp_phone(phone: str) -> bool:
    """Номер для СБП: ровно 11 цифр и начинается с 7."""
    digits = normalize_phone(phone)
    return len(digits) == 11 and digits.startswith("7")
