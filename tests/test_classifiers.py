"""Tests for the categorization rule engine."""

from budget_intake.classifiers import BaseClassifier, CategorizationRecord, ClassifierRegistry, build_engine
from budget_intake.classifiers.engine import FALLBACK_SOURCE
from budget_intake.core.buckets import BucketKey
from budget_intake.core.models import CategorizationRule

RULES = [
    CategorizationRule(match="coffee", category="personal"),
    CategorizationRule(match="coffee", category="food"),
    CategorizationRule(match="bottle", category="not-a-bucket"),
    CategorizationRule(merchant="Blue Bottle Coffee LLC", default_category="Home Office"),
]


def test_resolution_order() -> None:
    """Explicit beats merchant default, which beats keyword rules, which beat the vendor table."""
    engine = build_engine(RULES)
    cases = [
        ({"merchant": "Blue Bottle Coffee", "explicit_category": "Housing"}, BucketKey.HOUSING, "explicit"),
        ({"merchant": "Blue Bottle Coffee"}, BucketKey.HOME_OFFICE, "merchant_default"),
        ({"merchant": "Coffee Shop Starbucks"}, BucketKey.PERSONAL, "keyword_rule"),
        ({"merchant": "Starbucks"}, BucketKey.FOOD, "vendor_table"),
        ({"merchant": "Corner Store"}, BucketKey.MISC, FALLBACK_SOURCE),
    ]
    for fields, key, source in cases:
        match = engine.categorize_fields(**fields)
        if (match.key, match.source) != (key, source):
            msg = f"{fields}: expected {key} via {source}, got {match.key} via {match.source}"
            raise AssertionError(msg)


def test_unknown_rule_category_is_ignored() -> None:
    """A rule naming an unknown bucket lets later sources decide."""
    engine = build_engine([CategorizationRule(match="uber", category="not-a-bucket")])
    match = engine.categorize_fields("Uber Trip")
    if match.key != BucketKey.TRANSPORTATION:
        msg = f"Expected the vendor table to decide, got {match.key}"
        raise AssertionError(msg)


def test_keyword_rules_see_item_text() -> None:
    """Keyword rules match item names as well as the merchant."""
    engine = build_engine([CategorizationRule(match="printer paper", category="homeOffice")])
    match = engine.categorize_fields("Corner Store", item_text="Printer Paper 2.99")
    if match.key != BucketKey.HOME_OFFICE:
        msg = f"Expected homeOffice from item text, got {match.key}"
        raise AssertionError(msg)


def test_transaction_type_classifier() -> None:
    """Fees are banking; Zelle counts as income only when money comes in."""
    engine = build_engine()
    cases = [
        ({"merchant": "Unknown Merchant", "transaction_type": "Overdraft Fee"}, BucketKey.BANKING),
        ({"merchant": "John", "transaction_type": "Zelle", "is_credit": True}, BucketKey.INCOME),
        ({"merchant": "John", "transaction_type": "Zelle", "is_credit": False}, BucketKey.MISC),
        ({"merchant": "Payroll", "transaction_type": "Deposit"}, BucketKey.INCOME),
    ]
    for fields, key in cases:
        match = engine.categorize_fields(**fields)
        if match.key != key:
            msg = f"{fields}: expected {key}, got {match.key}"
            raise AssertionError(msg)


def test_vendor_table_prefers_specific_terms() -> None:
    """'Uber Eats' is food even though 'Uber' alone is transportation."""
    engine = build_engine()
    if engine.categorize_fields("UBER EATS 8005928996").key != BucketKey.FOOD:
        msg = "Expected Uber Eats to be food"
        raise AssertionError(msg)
    if engine.categorize_fields("Uber Trip").key != BucketKey.TRANSPORTATION:
        msg = "Expected Uber to be transportation"
        raise AssertionError(msg)


def test_registry_and_custom_order() -> None:
    """Classifiers are looked up by name, so new sources plug in without touching the engine."""
    expected = {"explicit", "merchant_default", "keyword_rule", "transaction_type", "vendor_table"}
    if not expected <= set(ClassifierRegistry.available()):
        msg = f"Missing built-in classifiers: {ClassifierRegistry.available()}"
        raise AssertionError(msg)

    class EverythingIsFood(BaseClassifier):
        name = "everything_is_food"

        def match(self, record: CategorizationRecord) -> BucketKey | None:
            _ = record
            return BucketKey.FOOD

    ClassifierRegistry.register(EverythingIsFood.name, EverythingIsFood)
    engine = build_engine(order=["vendor_table", "everything_is_food"])
    if engine.categorize_fields("Shell").key != BucketKey.TRANSPORTATION:
        msg = "Expected the vendor table to run first"
        raise AssertionError(msg)
    if engine.categorize_fields("Corner Store").source != "everything_is_food":
        msg = "Expected the custom classifier to answer for unknown merchants"
        raise AssertionError(msg)
