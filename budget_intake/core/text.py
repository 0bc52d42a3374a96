"""Text normalization helpers shared by extraction, categorization and duplicate detection."""

import re
import unicodedata

_NOISE_RE = re.compile(r"[^A-Za-z0-9\s.&'-]")
_SPACE_RE = re.compile(r"\s+")
_CORP_SUFFIX_RE = re.compile(r"\b(inc\.?|llc|co\.?|corp\.?|ltd\.?)(?=\s|$)", re.IGNORECASE)


def strip_accents(text: str) -> str:
    """Decompose accented characters and drop the combining marks."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def collapse_spaces(text: str) -> str:
    """Collapse runs of whitespace to a single space and trim."""
    return _SPACE_RE.sub(" ", text).strip()


def strip_noise(text: str | None) -> str:
    """Remove accents and punctuation other than . & ' - from free text."""
    return collapse_spaces(_NOISE_RE.sub(" ", strip_accents(text or "")))


def normalize_text(text: str | None) -> str:
    """Build the lowercase matching key used by rule and vendor lookups."""
    lowered = strip_noise(text).lower().replace("&", " and ")
    return collapse_spaces(lowered)


def title_case(text: str) -> str:
    """Lowercase, collapse whitespace and capitalize the first letter of each word."""
    lowered = collapse_spaces(text.lower())
    return re.sub(r"\b([a-z])", lambda m: m.group(1).upper(), lowered)


def normalize_merchant_name(name: str | None) -> str:
    """Clean a merchant name for display: no accents, no corporate suffix, title case."""
    cleaned = strip_noise(name)
    trimmed = collapse_spaces(_CORP_SUFFIX_RE.sub("", cleaned))
    return title_case(trimmed or cleaned) or "Unknown"


def slugify(text: str) -> str:
    """Lowercase alphanumeric slug used in deterministic ids."""
    return re.sub(r"[^a-z0-9]", "", (text or "x").lower())
