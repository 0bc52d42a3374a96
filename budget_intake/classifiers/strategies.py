"""Concrete classifiers, one per category source, registered under their engine names."""

from collections.abc import Sequence
from typing import Self

from budget_intake.classifiers.base import BaseClassifier, CategorizationRecord
from budget_intake.classifiers.registry import ClassifierRegistry
from budget_intake.core.buckets import BucketKey, resolve_bucket_key
from budget_intake.core.models import CategorizationRule, VendorEntry
from budget_intake.core.text import normalize_merchant_name, normalize_text
from budget_intake.core.utils import get_logger

logger = get_logger("budget-intake.classifiers")


def _to_bucket(value: str | None, source: str) -> BucketKey | None:
    key = resolve_bucket_key(value)
    if value and key is None:
        logger.debug(f"{source}: ignoring unknown category '{value}'")
    return key


class ExplicitCategoryClassifier(BaseClassifier):
    """A category supplied by the caller wins outright."""

    name = "explicit"

    def match(self, record: CategorizationRecord) -> BucketKey | None:
        """Return the caller's category when it names a known bucket."""
        return _to_bucket(record.explicit_category, self.name)


class MerchantDefaultClassifier(BaseClassifier):
    """User rules mapping an exact (normalized) merchant to a default category."""

    name = "merchant_default"

    def __init__(self, defaults: Sequence[tuple[str, str]] = ()) -> None:
        """Initialize with (normalized merchant, category) pairs in rule order."""
        self.defaults = list(defaults)

    @classmethod
    def from_sources(cls, rules: Sequence[CategorizationRule], vendors: Sequence[VendorEntry]) -> Self:
        """Collect every rule carrying both a merchant and a default category."""
        _ = vendors
        pairs = [
            (normalize_text(normalize_merchant_name(rule.merchant)), rule.default_category)
            for rule in rules
            if rule.merchant and rule.default_category
        ]
        return cls(pairs)

    def match(self, record: CategorizationRecord) -> BucketKey | None:
        """Return the default category of the first rule whose merchant equals the record's."""
        for merchant, category in self.defaults:
            if merchant == record.merchant_key:
                key = _to_bucket(category, self.name)
                if key:
                    return key
        return None


class KeywordRuleClassifier(BaseClassifier):
    """User keyword rules, scanned in list order against merchant and item text."""

    name = "keyword_rule"

    def __init__(self, keywords: Sequence[tuple[str, str]] = ()) -> None:
        """Initialize with (normalized keyword, category) pairs in rule order."""
        self.keywords = list(keywords)

    @classmethod
    def from_sources(cls, rules: Sequence[CategorizationRule], vendors: Sequence[VendorEntry]) -> Self:
        """Collect every rule carrying a non-empty keyword and a category."""
        _ = vendors
        pairs = []
        for rule in rules:
            if not rule.match or not rule.category:
                continue
            needle = normalize_text(rule.match)
            if needle:
                pairs.append((needle, rule.category))
        return cls(pairs)

    def match(self, record: CategorizationRecord) -> BucketKey | None:
        """Return the category of the first keyword contained in the record's text."""
        for needle, category in self.keywords:
            if needle in record.text_bag:
                key = _to_bucket(category, self.name)
                if key:
                    return key
        return None


class TransactionTypeClassifier(BaseClassifier):
    """Statement transaction types that imply a bucket regardless of merchant."""

    name = "transaction_type"

    def match(self, record: CategorizationRecord) -> BucketKey | None:
        """Fees go to banking; deposits, and incoming transfers or Zelle, go to income."""
        kind = record.transaction_type.lower()
        if not kind:
            return None
        if "fee" in kind or "service" in kind:
            return BucketKey.BANKING
        if "deposit" in kind:
            return BucketKey.INCOME
        if record.is_credit and ("zelle" in kind or "transfer" in kind):
            return BucketKey.INCOME
        return None


class VendorTableClassifier(BaseClassifier):
    """Substring lookup against the built-in vendor table."""

    name = "vendor_table"

    def __init__(self, vendors: Sequence[VendorEntry] = ()) -> None:
        """Initialize with the vendor table, pre-normalizing its terms."""
        self.vendors = list(vendors)
        self._terms = [
            (normalize_text(term), vendor) for vendor in self.vendors for term in vendor.match_terms
        ]

    @classmethod
    def from_sources(cls, rules: Sequence[CategorizationRule], vendors: Sequence[VendorEntry]) -> Self:
        """Use the vendor table; user rules are handled elsewhere."""
        _ = rules
        return cls(vendors)

    def find_vendor(self, text: str) -> VendorEntry | None:
        """Return the first vendor with a term contained in the normalized text."""
        haystack = normalize_text(text)
        if not haystack:
            return None
        for term, vendor in self._terms:
            if term and term in haystack:
                return vendor
        return None

    def match(self, record: CategorizationRecord) -> BucketKey | None:
        """Return the bucket of the first vendor matching the merchant."""
        vendor = self.find_vendor(record.merchant_text)
        return vendor.category_key if vendor else None


for _cls in (
    ExplicitCategoryClassifier,
    MerchantDefaultClassifier,
    KeywordRuleClassifier,
    TransactionTypeClassifier,
    VendorTableClassifier,
):
    ClassifierRegistry.register(_cls.name, _cls)
