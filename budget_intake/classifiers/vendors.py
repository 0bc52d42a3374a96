"""Built-in vendor table: default merchant knowledge used when no user rule applies.

Entries are checked in order and the first entry with a term contained in the normalized merchant
wins, so more specific terms (``spectrum mobile``, ``uber eats``) sit above broader ones.
"""

from budget_intake.core.buckets import BucketKey
from budget_intake.core.models import VendorEntry


def _vendor(terms: tuple[str, ...], key: BucketKey, label: str) -> VendorEntry:
    return VendorEntry(match_terms=terms, category_key=key, label=label)


VENDOR_TABLE: tuple[VendorEntry, ...] = (
    # Housing: telecom and utilities
    _vendor(("spectrum mobile",), BucketKey.HOUSING, "Spectrum Mobile"),
    _vendor(("spectrum internet", "spectrum"), BucketKey.HOUSING, "Spectrum Internet"),
    _vendor(("verizon",), BucketKey.HOUSING, "Verizon"),
    _vendor(("at&t",), BucketKey.HOUSING, "AT&T"),
    _vendor(("t-mobile",), BucketKey.HOUSING, "T-Mobile"),
    _vendor(("comcast", "xfinity"), BucketKey.HOUSING, "Xfinity"),
    _vendor(("electric", "utilities"), BucketKey.HOUSING, "Utilities"),
    # Banking
    _vendor(("wells fargo",), BucketKey.BANKING, "Wells Fargo Service Fee"),
    _vendor(("credit one",), BucketKey.BANKING, "Credit One Bank"),
    _vendor(("bank of america",), BucketKey.BANKING, "Bank of America"),
    # Home office
    _vendor(("chatgpt", "openai"), BucketKey.HOME_OFFICE, "ChatGPT Plus"),
    _vendor(("google ai",), BucketKey.HOME_OFFICE, "Google AI Pro"),
    _vendor(("linkedin",), BucketKey.HOME_OFFICE, "LinkedIn Premium"),
    _vendor(("supergrok", "grok"), BucketKey.HOME_OFFICE, "SuperGrok"),
    # Personal: streaming and pharmacy
    _vendor(("netflix",), BucketKey.PERSONAL, "Netflix"),
    _vendor(("hulu",), BucketKey.PERSONAL, "Hulu"),
    _vendor(("paramount",), BucketKey.PERSONAL, "Paramount+"),
    _vendor(("amazon prime", "prime video"), BucketKey.PERSONAL, "Prime"),
    _vendor(("espn+",), BucketKey.PERSONAL, "ESPN+"),
    _vendor(("mlb.tv", "mlb"), BucketKey.PERSONAL, "MLB.tv"),
    _vendor(("moviepass",), BucketKey.PERSONAL, "MoviePass"),
    _vendor(("xbox game pass",), BucketKey.PERSONAL, "Xbox Game Pass"),
    _vendor(("spotify",), BucketKey.PERSONAL, "Spotify"),
    _vendor(("hbo",), BucketKey.PERSONAL, "HBO Max"),
    _vendor(("disney",), BucketKey.PERSONAL, "Disney+"),
    _vendor(("cvs extracare", "cvs"), BucketKey.PERSONAL, "CVS ExtraCare"),
    # Food
    _vendor(("uber eats", "ubereats"), BucketKey.FOOD, "Uber Eats"),
    _vendor(("instacart",), BucketKey.FOOD, "Instacart"),
    _vendor(("doordash",), BucketKey.FOOD, "DoorDash"),
    _vendor(("grubhub",), BucketKey.FOOD, "Grubhub"),
    _vendor(("starbucks",), BucketKey.FOOD, "Starbucks"),
    _vendor(("mcdonald",), BucketKey.FOOD, "McDonald's"),
    _vendor(("7-eleven",), BucketKey.FOOD, "7-Eleven"),
    _vendor(("grocery", "groceries"), BucketKey.FOOD, "Groceries"),
    _vendor(("restaurant",), BucketKey.FOOD, "Restaurant"),
    # Transportation
    _vendor(("uber one", "uber"), BucketKey.TRANSPORTATION, "Uber One"),
    _vendor(("lyft",), BucketKey.TRANSPORTATION, "Lyft"),
    _vendor(("shell",), BucketKey.TRANSPORTATION, "Shell"),
    _vendor(("chevron",), BucketKey.TRANSPORTATION, "Chevron"),
    _vendor(("exxon",), BucketKey.TRANSPORTATION, "ExxonMobil"),
    _vendor(("mobil",), BucketKey.TRANSPORTATION, "Mobil"),
    _vendor(("gas station",), BucketKey.TRANSPORTATION, "Gas Station"),
    # Shopping has no dedicated bucket
    _vendor(("costco",), BucketKey.MISC, "Costco"),
    _vendor(("walmart",), BucketKey.MISC, "Walmart"),
    _vendor(("target",), BucketKey.MISC, "Target"),
    _vendor(("best buy",), BucketKey.MISC, "Best Buy"),
    _vendor(("amazon",), BucketKey.MISC, "Amazon"),
    # Broadest term last
    _vendor(("rent",), BucketKey.HOUSING, "Rent"),
)
