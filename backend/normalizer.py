"""Text normalization and keyword generation for hearing search."""
import unicodedata


def normalize_text(text: str | None) -> str:
    """Lowercase, strip diacritics and trim.

    Idempotent: normalizing an already normalized string returns it unchanged.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip()


def generate_keywords(
    location: str | None = "",
    officer: str | None = "",
    modality: str | None = "",
    case_ref: str | None = "",
    date_key: str | None = "",
    time: str | None = "",
) -> list[str]:
    """Build the searchable keyword set from the record's current fields.

    Each non-empty field contributes its whitespace tokens plus its full
    normalized value. The result is deduplicated and returned sorted so the
    stored value does not depend on field order.
    """
    keywords = set()
    for field in (location, officer, modality, case_ref, date_key, time):
        if not field or not field.strip():
            continue
        normalized = normalize_text(field)
        keywords.update(normalized.split())
        keywords.add(normalized)
    keywords.discard("")
    return sorted(keywords)
