"""Categorization rule engine: runs the ordered classifiers and falls back to misc."""

from collections.abc import Sequence

from pydantic import BaseModel

from budget_intake.classifiers import strategies  # noqa: F401  (registers the built-in classifiers)
from budget_intake.classifiers.base import BaseClassifier, CategorizationRecord
from budget_intake.classifiers.registry import ClassifierRegistry
from budget_intake.classifiers.vendors import VENDOR_TABLE
from budget_intake.core.buckets import BucketKey, bucket_label
from budget_intake.core.models import CategorizationRule, VendorEntry
from budget_intake.core.settings import DEFAULT_CLASSIFIER_ORDER
from budget_intake.core.utils import get_logger

logger = get_logger("budget-intake.classifiers")

FALLBACK_SOURCE = "fallback"


class CategoryMatch(BaseModel):
    """The bucket chosen for a record and which classifier chose it."""

    key: BucketKey
    label: str
    source: str


class CategorizationEngine:
    """Resolve a bucket by asking each classifier in order; the first answer wins."""

    def __init__(self, classifiers: Sequence[BaseClassifier]) -> None:
        """Initialize the engine with classifiers in priority order."""
        self.classifiers = list(classifiers)

    def categorize(self, record: CategorizationRecord) -> CategoryMatch:
        """Return the bucket for the record; never fails, misc is the universal fallback."""
        for classifier in self.classifiers:
            key = classifier.match(record)
            if key is not None:
                logger.debug(f"'{record.merchant}' -> {key} via {classifier.name}")
                return CategoryMatch(key=key, label=bucket_label(key), source=classifier.name)
        return CategoryMatch(key=BucketKey.MISC, label=bucket_label(BucketKey.MISC), source=FALLBACK_SOURCE)

    def categorize_fields(
        self,
        merchant: str,
        item_text: str = "",
        explicit_category: str | None = None,
        transaction_type: str = "",
        *,
        is_credit: bool = False,
    ) -> CategoryMatch:
        """Build a record from loose fields and categorize it."""
        record = CategorizationRecord(
            merchant=merchant,
            item_text=item_text,
            explicit_category=explicit_category,
            transaction_type=transaction_type,
            is_credit=is_credit,
        )
        return self.categorize(record)


def build_engine(
    rules: Sequence[CategorizationRule] | None = None,
    vendors: Sequence[VendorEntry] = VENDOR_TABLE,
    order: Sequence[str] | None = None,
) -> CategorizationEngine:
    """Assemble an engine from registered classifiers, the user's rule list and the vendor table."""
    rules = list(rules or [])
    classifiers = [
        ClassifierRegistry.get(name).from_sources(rules, vendors) for name in (order or DEFAULT_CLASSIFIER_ORDER)
    ]
    return CategorizationEngine(classifiers)
