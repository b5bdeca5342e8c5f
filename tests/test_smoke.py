from fastapi.testclient import TestClient
from salesboard.main import app

client = TestClient(app)

CSV = (
    "Product,Region,Sales\n"
    '"Acme, Inc.",North,100\n'
    "Widget,South,50.5\n"
    "Widget,North,N/A\n"
)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_summary_upload():
    files = {"file": ("data.csv", CSV.encode("utf-8-sig"), "text/csv")}
    r = client.post("/summary", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["total_formatted"] == "150.50"
    assert data["currency"] == "INR"
    assert data["region"] == "all"
    assert [(g["name"], g["formatted"]) for g in data["groups"]] == [("Acme, Inc.", "100"), ("Widget", "50.50")]
    assert data["regions"] == ["North", "South"]
    assert data["currencies"] == ["INR"]


def test_summary_upload_with_rates_and_region():
    files = {
        "file": ("data.csv", CSV.encode("utf-8"), "text/csv"),
        "rates": ("rates.json", b'{"INR": 1, "USD": 2}', "application/json"),
    }
    r = client.post("/summary", files=files, params={"region": "North", "currency": "USD"})
    assert r.status_code == 200

    data = r.json()
    assert data["total"] == 200
    assert data["total_formatted"] == "200"
    assert data["included"] == 2
    assert data["currencies"] == ["INR", "USD"]


def test_summary_rejects_non_csv():
    files = {"file": ("data.txt", b"a,b\n", "text/plain")}
    r = client.post("/summary", files=files)
    assert r.status_code == 422


def test_summary_empty_csv():
    files = {"file": ("data.csv", b"", "text/csv")}
    r = client.post("/summary", files=files)
    assert r.status_code == 422
    assert r.json()["detail"] == "CSV appears to be empty"


def test_summary_from_configured_sources(tmp_path, monkeypatch):
    csv_path = tmp_path / "data.csv"
    csv_path.write_text("item,area,amount\nA,East,10\nB,West,5\n", encoding="utf-8")
    monkeypatch.setenv("SALESBOARD_CSV_SOURCE", str(csv_path))
    monkeypatch.setenv("SALESBOARD_RATES_SOURCE", str(tmp_path / "missing.json"))

    r = client.get("/summary", params={"region": "West"})
    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 5
    assert data["currencies"] == ["INR"]


def test_summary_unreadable_source(tmp_path, monkeypatch):
    monkeypatch.setenv("SALESBOARD_CSV_SOURCE", str(tmp_path / "missing.csv"))
    r = client.get("/summary")
    assert r.status_code == 502


def test_column_total():
    files = {"file": ("data.csv", CSV.encode("utf-8"), "text/csv")}
    r = client.post("/column-total", files=files)
    assert r.status_code == 200
    assert r.json() == {
        "column": "Sales",
        "total": 150.5,
        "total_formatted": "150.50",
        "counted": 2,
        "skipped": 1,
    }


def test_column_total_missing_column():
    files = {"file": ("data.csv", CSV.encode("utf-8"), "text/csv")}
    r = client.post("/column-total", files=files, params={"column": "revenue"})
    assert r.status_code == 422
    assert "Required column not found" in r.json()["detail"]


def test_summary_with_overflowing_total():
    big = "1" * 309
    files = {"file": ("data.csv", f"product,sales\nA,{big}\nB,{big}\n".encode("utf-8"), "text/csv")}
    r = client.post("/summary", files=files)
    assert r.status_code == 200
    data = r.json()
    assert data["total_formatted"] == "0"
    assert [g["name"] for g in data["groups"]] == ["A", "B"]
