"""Base classifier abstraction for the categorization rule engine.

Every category source (caller input, user rules, transaction type, vendor table) is a classifier
sharing one contract: given a record, return a bucket key or None to let the next classifier try.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from functools import cached_property
from typing import ClassVar, Self

from pydantic import BaseModel

from budget_intake.core.buckets import BucketKey
from budget_intake.core.models import CategorizationRule, VendorEntry
from budget_intake.core.text import normalize_merchant_name, normalize_text


class CategorizationRecord(BaseModel):
    """The fields of an extracted record that classifiers look at."""

    merchant: str = ""
    item_text: str = ""
    explicit_category: str | None = None
    transaction_type: str = ""
    is_credit: bool = False

    @cached_property
    def merchant_key(self) -> str:
        """Normalized merchant used for exact merchant rules."""
        return normalize_text(normalize_merchant_name(self.merchant))

    @cached_property
    def merchant_text(self) -> str:
        """Normalized raw merchant text used for vendor substring matching."""
        return normalize_text(self.merchant)

    @cached_property
    def text_bag(self) -> str:
        """Normalized merchant plus item text used for keyword rules."""
        return f"{self.merchant_key} {normalize_text(self.item_text)}".strip()


class BaseClassifier(ABC):
    """Abstract base class for all category classifiers."""

    name: ClassVar[str]

    @classmethod
    def from_sources(cls, rules: Sequence[CategorizationRule], vendors: Sequence[VendorEntry]) -> Self:
        """Build the classifier from the rule sources it needs."""
        _ = rules, vendors
        return cls()

    @abstractmethod
    def match(self, record: CategorizationRecord) -> BucketKey | None:
        """Return the bucket for the record, or None when this source has no opinion."""
