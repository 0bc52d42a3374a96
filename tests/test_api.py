"""API integration tests for the budget intake service."""

from fastapi.testclient import TestClient

HTTP_200_OK = 200
HTTP_400_BAD_REQUEST = 400
HTTP_404_NOT_FOUND = 404

RECEIPT = {
    "id": "r-costco-2024-05-01-4510",
    "merchant": "Costco",
    "date": "2024-05-01",
    "total": 45.10,
    "meta": {"createdAt": "2024-05-01T12:00:00+00:00", "source": "ocr"},
}


def _ok(response, expected: int = HTTP_200_OK) -> dict:  # noqa: ANN001
    if response.status_code != expected:
        msg = f"Expected status {expected}, got {response.status_code}: {response.text}"
        raise AssertionError(msg)
    return response.json()


def test_health(client: TestClient) -> None:
    """Test the /health endpoint returns status ok."""
    if _ok(client.get("/health")) != {"status": "ok"}:
        msg = "Expected response {'status': 'ok'}"
        raise AssertionError(msg)


def test_scalar_docs(client: TestClient) -> None:
    """Test the /scalar endpoint returns the API reference page."""
    response = client.get("/scalar")
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
        raise AssertionError(msg)
    if not ("openapi" in response.text or "swagger" in response.text):
        msg = "Expected 'openapi' or 'swagger' in response text"
        raise AssertionError(msg)


def test_parse_statement_and_convert(client: TestClient) -> None:
    """Parsed statement transactions come back camelCased and convert to budget items."""
    body = _ok(client.post("/statements/parse", json={"text": "8/1\tMonthly Service Fee\t25.00\t463.27", "year": 2024}))
    [txn] = body["transactions"]
    if (txn["date"], txn["transactionType"], txn["categoryKey"]) != ("2024-08-01", "Monthly Service Fee", "banking"):
        msg = f"Unexpected transaction: {txn}"
        raise AssertionError(msg)
    entries = _ok(client.post("/statements/budget-items", json={"transactions": body["transactions"]}))
    if entries[0]["categoryKey"] != "banking" or entries[0]["item"]["estBudget"] != 25.0:
        msg = f"Unexpected budget entries: {entries}"
        raise AssertionError(msg)


def test_rules_drive_categorization(client: TestClient) -> None:
    """Rules saved through PUT /rules apply to later parses."""
    rules = [{"match": "shell", "category": "misc"}, {"merchant": "Costco", "defaultCategory": "food"}]
    saved = _ok(client.put("/rules", json=rules))
    if _ok(client.get("/rules")) != saved or len(saved) != 2:
        msg = f"Rules did not round-trip: {saved}"
        raise AssertionError(msg)
    body = _ok(client.post("/statements/parse", json={"text": "05/03 Purchase Shell Oil 40.00", "year": 2024}))
    if body["transactions"][0]["categoryKey"] != "misc":
        msg = f"Expected the keyword rule to apply, got {body['transactions'][0]}"
        raise AssertionError(msg)
    receipt = _ok(client.post("/receipts/parse", json={"text": "COSTCO WHOLESALE\nTotal $45.10"}))
    if receipt["categoryKey"] != "food" or receipt["total"] != 45.10:
        msg = f"Expected the merchant default to apply, got {receipt}"
        raise AssertionError(msg)


def test_duplicate_endpoints(client: TestClient) -> None:
    """Pairwise and best-match duplicate checks."""
    incoming = {**RECEIPT, "total": 45.40}
    verdict = _ok(client.post("/receipts/duplicates", json={"existing": RECEIPT, "incoming": incoming}))
    if not verdict["exact"] or verdict["score"] != 1.0:
        msg = f"Expected an exact duplicate, got {verdict}"
        raise AssertionError(msg)
    best = _ok(client.post("/receipts/duplicates/best", json={"existing": [RECEIPT], "incoming": incoming}))
    if best["receipt"]["id"] != RECEIPT["id"]:
        msg = f"Unexpected best match: {best}"
        raise AssertionError(msg)
    other = {**RECEIPT, "merchant": "Target"}
    if _ok(client.post("/receipts/duplicates/best", json={"existing": [other], "incoming": incoming})) is not None:
        msg = "Expected no match"
        raise AssertionError(msg)


def test_export_csv(client: TestClient) -> None:
    """Receipts export as a CSV attachment."""
    response = client.post("/receipts/export-csv", json={"receipts": [RECEIPT]})
    if response.status_code != HTTP_200_OK or not response.headers["content-type"].startswith("text/csv"):
        msg = f"Unexpected export response: {response.status_code} {response.headers}"
        raise AssertionError(msg)
    if not response.text.startswith("merchant,date,currency") or "Costco,2024-05-01,USD,0.00,0.00,45.10" not in response.text:
        msg = f"Unexpected CSV: {response.text}"
        raise AssertionError(msg)


def test_health_score_records_history(client: TestClient) -> None:
    """Scoring returns the result and one history entry per day."""
    payload = {"buckets": {"income": [{"category": "Salary", "estBudget": 2000, "actualCost": 2000}],
                           "housing": [{"category": "Rent", "estBudget": 700, "actualCost": 700}]}}  # fmt: skip
    body = _ok(client.post("/health-score", json=payload))
    if body["result"]["categoryBreakdown"]["housing"]["status"] != "over":
        msg = f"Unexpected category breakdown: {body['result']['categoryBreakdown']}"
        raise AssertionError(msg)
    if body["totals"]["totalIncome"] != 2000:
        msg = f"Unexpected totals: {body['totals']}"
        raise AssertionError(msg)
    _ok(client.post("/health-score", json=payload))
    history = _ok(client.get("/health-score/history"))
    if len(history) != 1 or history[0]["score"] != body["result"]["overallScore"]:
        msg = f"Expected a single entry for today, got {history}"
        raise AssertionError(msg)


def test_health_score_accepts_formatted_amounts(client: TestClient) -> None:
    """Amounts typed as money strings score normally instead of failing the request."""
    payload = {"buckets": {"income": [{"category": "Salary", "estBudget": "$4,000.00"}],
                           "housing": [{"category": "Rent", "estBudget": "$1,200.00", "actualCost": "1,200"}]}}  # fmt: skip
    body = _ok(client.post("/health-score", json=payload))
    if (body["totals"]["totalIncome"], body["totals"]["totalExpenses"]) != (4000, 1200):
        msg = f"Unexpected totals: {body['totals']}"
        raise AssertionError(msg)


def test_upload_rejects_unsupported_files(client: TestClient) -> None:
    """Only PDF, image and text uploads are accepted."""
    files = {"file": ("setup.exe", b"MZ", "application/octet-stream")}
    _ok(client.post("/documents/upload", files=files), HTTP_400_BAD_REQUEST)


def test_unknown_job(client: TestClient) -> None:
    """Unknown job ids are 404 for both status and download."""
    _ok(client.get("/status/does-not-exist"), HTTP_404_NOT_FOUND)
    _ok(client.get("/download/does-not-exist"), HTTP_404_NOT_FOUND)
