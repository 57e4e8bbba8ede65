"""License routes — status codes and wire shape of redemption and listing.

Invariants:
    - POST /redeem-license: 200 {success, email, paymentId}; 400; 404; 409
    - GET /admin-license-codes: camelCase fields, newest first
    - POST /universal-license: 200 {success, message}; 404 wrong key
"""

from datetime import datetime, timedelta, timezone

import pytest


T0 = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)


async def _issue(stores, code, **fields):
    doc = {
        "used": False, "used_at": None, "email": None,
        "payment_id": None, "created_at": T0,
    }
    doc.update(fields)
    await stores.signup_codes.create(code, doc)


async def test_redeem_then_redeem_again(client, stores):
    await _issue(stores, "ABC123")

    first = await client.post("/api/v1/redeem-license", json={"code": "ABC123"})
    assert first.status_code == 200
    assert first.json() == {"success": True, "email": None, "paymentId": None}

    second = await client.post("/api/v1/redeem-license", json={"code": "ABC123"})
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "LICENSE_ALREADY_USED"
    assert second.json()["error"]["message"] == "License key already used"


async def test_redeem_returns_issuance_fields(client, stores):
    await _issue(stores, "PAID1", email="buyer@example.com", payment_id="pi_9")

    res = await client.post("/api/v1/redeem-license", json={"code": "PAID1"})

    assert res.status_code == 200
    assert res.json() == {
        "success": True, "email": "buyer@example.com", "paymentId": "pi_9",
    }


async def test_redeem_unknown_code_is_404(client):
    res = await client.post("/api/v1/redeem-license", json={"code": "NOPE"})
    assert res.status_code == 404
    body = res.json()["error"]
    assert body["message"] == "Invalid license key"
    assert "NOPE" not in res.text


@pytest.mark.parametrize("payload", [{"code": ""}, {"code": 42}, {"code": None}, {}])
async def test_redeem_missing_or_invalid_code_is_400(client, payload):
    res = await client.post("/api/v1/redeem-license", json=payload)
    assert res.status_code == 400
    assert res.json()["error"]["code"] in {"INVALID_INPUT", "VALIDATION_ERROR"}


async def test_admin_listing_newest_first(client, stores):
    await _issue(stores, "OLD", created_at=T0)
    await _issue(stores, "NEW", created_at=T0 + timedelta(hours=1), email="n@example.com")
    await client.post("/api/v1/redeem-license", json={"code": "OLD"})

    res = await client.get("/api/v1/admin-license-codes")

    assert res.status_code == 200
    codes = res.json()["codes"]
    assert [c["code"] for c in codes] == ["NEW", "OLD"]
    assert set(codes[0]) == {"code", "paymentId", "email", "used", "createdAt", "usedAt"}
    assert codes[0]["used"] is False
    assert codes[0]["usedAt"] is None
    assert codes[1]["used"] is True
    assert codes[1]["usedAt"] is not None


async def test_admin_listing_empty(client):
    res = await client.get("/api/v1/admin-license-codes")
    assert res.status_code == 200
    assert res.json() == {"codes": []}


async def test_universal_license_activation(client, test_settings):
    key = test_settings.universal_license_key
    res = await client.post(
        "/api/v1/universal-license",
        json={"code": key, "email": "team@example.com"},
    )
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Universal license activated"}

    again = await client.post(
        "/api/v1/universal-license",
        json={"code": key, "email": "team@example.com"},
    )
    assert again.json()["message"] == "Email already authorized"


async def test_universal_license_wrong_key(client):
    res = await client.post(
        "/api/v1/universal-license",
        json={"code": "WRONG", "email": "team@example.com"},
    )
    assert res.status_code == 404


async def test_universal_license_disabled_without_key(client, test_settings):
    test_settings.universal_license_key = None
    res = await client.post(
        "/api/v1/universal-license",
        json={"code": "ANY", "email": "team@example.com"},
    )
    assert res.status_code == 503
    assert res.json()["error"]["code"] == "FEATURE_DISABLED"


# --- universal license administration ---------------------------------------------

ADMIN_URL = "/api/v1/admin/universal-license"


async def test_admin_lists_authorized_emails(client):
    assert (await client.get(ADMIN_URL)).json() == {"authorizedEmails": []}

    await client.post(ADMIN_URL, json={"email": "A@example.com"})
    await client.post(ADMIN_URL, json={"email": "b@example.com"})

    res = await client.get(ADMIN_URL)
    assert res.status_code == 200
    assert res.json() == {"authorizedEmails": ["a@example.com", "b@example.com"]}


async def test_admin_add_duplicate_is_409(client):
    first = await client.post(ADMIN_URL, json={"email": "a@example.com"})
    assert first.status_code == 200
    assert first.json() == {"success": True, "message": "Email added to universal license"}

    again = await client.post(ADMIN_URL, json={"email": "a@example.com"})
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "EMAIL_ALREADY_AUTHORIZED"


async def test_admin_add_without_email_is_400(client):
    res = await client.post(ADMIN_URL, json={})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_INPUT"


async def test_admin_remove(client):
    await client.post(ADMIN_URL, json={"email": "a@example.com"})

    res = await client.request("DELETE", ADMIN_URL, json={"email": "a@example.com"})

    assert res.status_code == 200
    assert res.json()["message"] == "Email removed from universal license"
    assert (await client.get(ADMIN_URL)).json() == {"authorizedEmails": []}


async def test_admin_remove_absent_is_404(client):
    res = await client.request("DELETE", ADMIN_URL, json={"email": "ghost@example.com"})
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "AUTHORIZED_EMAIL_NOT_FOUND"


async def test_admin_routes_work_while_activation_is_disabled(client, test_settings):
    test_settings.universal_license_key = None
    res = await client.post(ADMIN_URL, json={"email": "a@example.com"})
    assert res.status_code == 200


async def test_admin_added_email_counts_as_activated(client, test_settings):
    await client.post(ADMIN_URL, json={"email": "team@example.com"})

    res = await client.post(
        "/api/v1/universal-license",
        json={"code": test_settings.universal_license_key, "email": "team@example.com"},
    )

    assert res.json()["message"] == "Email already authorized"
