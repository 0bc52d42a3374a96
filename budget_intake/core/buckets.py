"""Bucket catalogue: the fixed category keys budget items are filed under."""

from enum import StrEnum


class BucketKey(StrEnum):
    """Fixed bucket keys for budget line items."""

    INCOME = "income"
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    FOOD = "food"
    PERSONAL = "personal"
    HOME_OFFICE = "homeOffice"
    BANKING = "banking"
    SUBSCRIPTIONS = "subscriptions"
    EMERGENCY_FUND = "emergencyFund"
    MISC = "misc"


BUCKET_LABELS: dict[BucketKey, str] = {
    BucketKey.INCOME: "Income",
    BucketKey.HOUSING: "Housing",
    BucketKey.TRANSPORTATION: "Transportation",
    BucketKey.FOOD: "Food",
    BucketKey.PERSONAL: "Personal",
    BucketKey.HOME_OFFICE: "Home Office",
    BucketKey.BANKING: "Banking & Credit",
    BucketKey.SUBSCRIPTIONS: "Subscriptions",
    BucketKey.EMERGENCY_FUND: "Emergency Fund",
    BucketKey.MISC: "Misc",
}

_LOOKUP: dict[str, BucketKey] = {}
for _key, _label in BUCKET_LABELS.items():
    _LOOKUP[_key.value.lower()] = _key
    _LOOKUP[_label.lower()] = _key


def bucket_label(key: BucketKey | str) -> str:
    """Return the display label for a bucket key (Misc for unknown keys)."""
    resolved = resolve_bucket_key(key)
    return BUCKET_LABELS[resolved] if resolved else BUCKET_LABELS[BucketKey.MISC]


def resolve_bucket_key(value: object) -> BucketKey | None:
    """Resolve a bucket key or display label (case-insensitive) to a BucketKey."""
    if isinstance(value, BucketKey):
        return value
    if not isinstance(value, str):
        return None
    return _LOOKUP.get(value.strip().lower())
