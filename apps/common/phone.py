import phonenumbers


def to_e164(raw: str, default_region: str = "IT") -> str:
    try:
        n = phonenumbers.parse(raw, default_region)
    except phonenumbers.NumberParseException:
        raise ValueError("Numero di telefono non valido")
    if not phonenumbers.is_valid_number(n):
        raise ValueError("Numero di telefono non valido")
    return phonenumbers.format_number(n, phonenumbers.PhoneNumberFormat.E164)
