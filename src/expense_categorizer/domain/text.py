def normalize_text(value: str | None) -> str:
    if not value:
        return ""
    return value.lower().strip()


def normalize_merchant(merchant: str | None) -> str:
    return normalize_text(merchant)


def split_words(text: str) -> list[str]:
    return text.split()
