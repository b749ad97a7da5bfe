import httpx
import pytest

from src.integrations.sheets.guide_registry import (
    CATEGORIES,
    GuideRegistryClient,
    GuideRegistryConfigurationError,
    find_guide,
    map_guide_row,
    normalize_ic_number,
)


class FakeCredentials:
    valid = True
    token = "test-token"


def _row(ic="900101101234", name="Ali"):
    return ["R-01", name, "Li", ic, "x", "y"] + [f"c{i}" for i in range(len(CATEGORIES) * 4)]


def test_normalize_ic_number():
    assert normalize_ic_number(" 900101-10 1234 ") == "900101101234"
    assert normalize_ic_number(None) == ""


def test_map_guide_row_assigns_four_columns_per_category():
    record = map_guide_row(_row())
    assert record["RegNo"] == "R-01"
    assert record["name"] == "Ali"
    assert record["nickname"] == "Li"
    assert record["WWRFTR"] == "c0"
    assert record["WWRFTRVALID"] == "c1"
    assert record["WWRFTRCERT"] == "c2"
    assert record["WWRFTRCARD"] == "c3"
    assert record["WA"] == "c4"
    assert record["DRIVERCARD"] == "c27"
    assert len(record) == 3 + 28


def test_map_guide_row_tolerates_short_rows():
    record = map_guide_row(["R-02", "Abu"])
    assert record["nickname"] is None
    assert record["ATV"] is None


def test_find_guide_matches_ic_column():
    rows = [_row("111", "One"), ["short"], _row("222", "Two")]
    assert find_guide(rows, "222")["name"] == "Two"
    assert find_guide(rows, "333") is None


def test_client_fetches_sheet_with_bearer_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"range": "DATABASE!A2:AZ", "values": [_row()]})

    client = GuideRegistryClient(
        sheet_id="sheet-123",
        credentials=FakeCredentials(),
        transport=httpx.MockTransport(handler),
    )
    record = client.lookup("900101101234")

    assert record["name"] == "Ali"
    assert seen[0].headers["Authorization"] == "Bearer test-token"
    assert seen[0].url.host == "sheets.googleapis.com"
    assert "sheet-123" in str(seen[0].url)


def test_client_without_values_finds_nothing():
    client = GuideRegistryClient(
        sheet_id="sheet-123",
        credentials=FakeCredentials(),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
    )
    assert client.lookup("900101101234") is None


def test_client_http_error_propagates():
    client = GuideRegistryClient(
        sheet_id="sheet-123",
        credentials=FakeCredentials(),
        transport=httpx.MockTransport(lambda request: httpx.Response(403, json={"error": "denied"})),
    )
    with pytest.raises(httpx.HTTPStatusError):
        client.lookup("900101101234")


def test_missing_configuration(monkeypatch):
    for name in ("GOOGLE_CLIENT_EMAIL", "GOOGLE_PRIVATE_KEY", "SHEET_ID"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(GuideRegistryConfigurationError, match="GOOGLE_CLIENT_EMAIL"):
        GuideRegistryClient().lookup("900101101234")
