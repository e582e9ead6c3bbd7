import pytest

from allertify.config import ScanConfig

API = "/api/v1"
CHOCO = "8992761111111"
WATER = "8990000000017"


@pytest.fixture
def milk_allergy(client, user_headers):
    response = client.put(
        f"{API}/users/me/allergens",
        json={"allergens": [{"name": "Milk", "securityLevel": 3}]},
        headers=user_headers,
    )
    assert response.status_code == 200


def test_scan_requires_authentication(client):
    response = client.post(f"{API}/scans/barcode/{CHOCO}")
    assert response.status_code == 401


@pytest.mark.parametrize("barcode", ["1234567", "123456789012345", "12ab5678"])
def test_malformed_barcode_is_rejected(client, user_headers, off_client, barcode):
    response = client.post(f"{API}/scans/barcode/{barcode}", headers=user_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ValidationException"
    assert off_client.calls == []


def test_barcode_scan(client, user_headers, milk_allergy):
    response = client.post(f"{API}/scans/barcode/{CHOCO}", headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["riskLevel"] == "RISKY"
    assert body["matchedAllergens"] == "Milk"
    assert body["product"]["barcode"] == CHOCO
    assert body["scanDateLocal"] == "2025-08-19T15:10:21+07:00"
    assert body["scanLimit"] == {"remainingScans": 99, "dailyLimit": 100}


def test_unknown_barcode_is_404(client, user_headers):
    response = client.post(f"{API}/scans/barcode/00000000", headers=user_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ProductNotFoundException"


def test_exhausted_quota_is_a_generic_failure(client, user_headers, api_config):
    api_config["config"] = ScanConfig(use_deterministic_classifier=True, default_daily_limit=1)

    assert client.post(f"{API}/scans/barcode/{WATER}", headers=user_headers).status_code == 200
    response = client.post(f"{API}/scans/barcode/{WATER}", headers=user_headers)

    assert response.status_code == 500
    error = response.json()["error"]
    assert "Daily scan limit exceeded" in error["message"]
    assert error["details"]["dailyLimit"] == 1

    history = client.get(f"{API}/scans/history", headers=user_headers).json()
    assert len(history["scans"]) == 1


def test_limit_endpoints(client, user_headers):
    client.post(f"{API}/scans/barcode/{WATER}", headers=user_headers)

    status = client.get(f"{API}/scans/limit", headers=user_headers).json()
    assert status["currentUsage"] == 1
    assert status["remainingScans"] == 99
    assert status["canScan"] is True
    assert status["isLimitExceeded"] is False

    history = client.get(f"{API}/scans/limit/history?days=3", headers=user_headers).json()
    assert [row["scanCount"] for row in history] == [1]

    reset = client.delete(f"{API}/scans/limit", headers=user_headers).json()
    assert reset["currentUsage"] == 0


def test_limit_reset_is_refused_in_production(client, user_headers, monkeypatch):
    from allertify.config import get_settings

    monkeypatch.setattr(get_settings(), "ENVIRONMENT", "production")
    response = client.delete(f"{API}/scans/limit", headers=user_headers)
    assert response.status_code == 403


def test_image_scan(client, user_headers, milk_allergy):
    response = client.post(
        f"{API}/scans/image",
        json={"imageUrl": "https://img.example.com/label.jpg"},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["product"]["barcode"].startswith("IMG_")


def test_image_scan_requires_a_url(client, user_headers):
    response = client.post(f"{API}/scans/image", json={"imageUrl": "not a url"}, headers=user_headers)
    assert response.status_code == 400


def test_upload_scan(client, user_headers, image_host):
    response = client.post(
        f"{API}/scans/upload",
        files={"image": ("label.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")},
        data={"productName": "Rice Crackers"},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["product"]["name"] == "Rice Crackers"
    assert len(image_host.uploads) == 1


def test_upload_rejects_non_images_before_uploading(client, user_headers, image_host):
    response = client.post(
        f"{API}/scans/upload",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=user_headers,
    )
    assert response.status_code == 400
    assert image_host.uploads == []


def test_upload_rejects_oversize_images_before_uploading(client, user_headers, image_host, monkeypatch):
    from allertify.config import get_settings

    monkeypatch.setattr(get_settings(), "MAX_UPLOAD_BYTES", 16)
    response = client.post(
        f"{API}/scans/upload",
        files={"image": ("label.jpg", b"\xff\xd8\xff" + b"\x00" * 64, "image/jpeg")},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"maxBytes": 16}
    assert image_host.uploads == []


def test_save_toggle_and_ownership(client, user_headers, other_headers):
    scan = client.post(f"{API}/scans/barcode/{CHOCO}", headers=user_headers).json()

    saved = client.put(f"{API}/scans/{scan['id']}/save", headers=user_headers)
    assert saved.json()["isSaved"] is True

    stranger = client.put(f"{API}/scans/{scan['id']}/save", headers=other_headers)
    assert stranger.status_code == 404
    assert stranger.json()["error"]["message"] == "Scan not found or access denied"

    saved_list = client.get(f"{API}/scans/saved", headers=user_headers).json()
    assert [s["id"] for s in saved_list["scans"]] == [scan["id"]]


def test_history_filters_by_list(client, user_headers):
    choco = client.post(f"{API}/scans/barcode/{CHOCO}", headers=user_headers).json()
    client.post(f"{API}/scans/barcode/{WATER}", headers=user_headers)

    listed = client.post(
        f"{API}/scans/list",
        json={"productId": choco["productId"], "listType": "RED"},
        headers=user_headers,
    )
    assert listed.json() == {"productId": choco["productId"], "listType": "RED"}

    red = client.get(f"{API}/scans/history?listType=RED", headers=user_headers).json()
    assert [s["productId"] for s in red["scans"]] == [choco["productId"]]

    client.post(f"{API}/scans/list", json={"productId": choco["productId"], "listType": None}, headers=user_headers)
    red = client.get(f"{API}/scans/history?listType=RED", headers=user_headers).json()
    assert red["scans"] == []


def test_history_limit_is_bounded(client, user_headers):
    response = client.get(f"{API}/scans/history?limit=101", headers=user_headers)
    assert response.status_code == 400
