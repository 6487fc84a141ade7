"""Tests for the /creator product creation Blink."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
from solders.keypair import Keypair

from clickcrate_actions.services import clickcrate_api, email_service, solana_service
from clickcrate_actions.services.clickcrate_api import ApiResponse
from clickcrate_actions.storage import pending_products

ACCOUNT = str(Keypair().pubkey())


def _product_form(**overrides: Any) -> Dict[str, Any]:
    data = {
        "type": "hat",
        "imageUri": "https://example.com/merch/hat.png",
        "name": "Team Hat",
        "description": "An embroidered dad hat.",
        "quantity": "2",
        "unitPrice": "0.5",
        "email": "creator@example.com",
    }
    data.update(overrides)
    return data


@pytest.fixture
def sent_emails(monkeypatch: pytest.MonkeyPatch) -> List[Dict[str, str]]:
    sent: List[Dict[str, str]] = []
    monkeypatch.setattr(
        email_service,
        "send_verification_email",
        lambda to, code: sent.append({"to": to, "code": code}),
    )
    return sent


@pytest.fixture
def merchant_calls(monkeypatch: pytest.MonkeyPatch) -> List[str]:
    calls: List[str] = []

    def recorder(name):
        def call(*args, **kwargs):
            calls.append(name)
            return ApiResponse(status=200, data={"success": True})

        return call

    for name in (
        "register_clickcrate",
        "activate_clickcrate",
        "register_product_listing",
        "activate_product_listing",
        "place_product_listing",
    ):
        monkeypatch.setattr(clickcrate_api, name, recorder(name))
    return calls


@pytest.fixture
def minting(monkeypatch: pytest.MonkeyPatch) -> Dict[str, Any]:
    state: Dict[str, Any] = {}

    def fake_create_products(plan, creator):
        state["plan"] = plan
        state["creator"] = str(creator)
        return {
            "total_cost": 7_500_000,
            "pos_address": "PosAddress111",
            "pos_signature": "sig-pos",
            "listing_address": "ListingAddress111",
            "listing_signature": "sig-listing",
            "product_addresses": ["Product1", "Product2"],
            "product_signatures": ["sig-1", "sig-2"],
        }

    def fake_relay_payment(lamports, from_pubkey):
        state["payment"] = (lamports, str(from_pubkey))
        return "cGF5bWVudA=="

    monkeypatch.setattr(solana_service, "create_products", fake_create_products)
    monkeypatch.setattr(solana_service, "relay_payment_transaction", fake_relay_payment)
    return state


def _create(client, sent_emails, **overrides: Any) -> str:
    response = client.post(
        "/creator/create-product", json={"account": ACCOUNT, "data": _product_form(**overrides)}
    )
    assert response.status_code == 200
    href = response.get_json()["links"]["next"]["action"]["links"]["actions"][0]["href"]
    return href


def test_get_creator_action_lists_form_fields(client):
    response = client.get("/creator")

    assert response.status_code == 200
    body = response.get_json()
    assert body["type"] == "action"
    assert body["label"] == "CREATE"
    action = body["links"]["actions"][0]
    assert action["href"] == "/creator/create-product"
    names = [param["name"] for param in action["parameters"]]
    assert names == ["type", "imageUri", "name", "description", "quantity", "unitPrice", "email"]
    assert response.headers["X-Action-Version"]
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_create_product_stores_submission_and_emails_code(client, sent_emails, mongo_db):
    href = _create(client, sent_emails)

    assert href.startswith("/creator/verify-and-place?id=")
    assert len(pending_products) == 1
    product_id, record = next(iter(pending_products.items()))
    assert record["quantity"] == 2
    assert record["unit_price"] == 0.5
    assert record["account"] == ACCOUNT
    assert len(record["verification_code"]) == 6 and record["verification_code"].isdigit()
    assert sent_emails == [{"to": "creator@example.com", "code": record["verification_code"]}]
    assert mongo_db.pending_products.count_documents({"product_id": product_id}) == 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"quantity": "4"},
        {"unitPrice": "0"},
        {"email": "not-an-email"},
        {"imageUri": "https://example.com/merch/hat.bmp"},
        {"imageUri": "https://example.com/merch/hat"},
        {"type": "hoodie"},
        {"name": ""},
    ],
)
def test_create_product_rejects_malformed_input(client, sent_emails, overrides):
    response = client.post(
        "/creator/create-product", json={"account": ACCOUNT, "data": _product_form(**overrides)}
    )

    assert response.status_code == 400
    assert response.get_json() == {"message": "Validation failed"}
    assert pending_products == {}
    assert sent_emails == []


def test_create_product_rejects_invalid_account(client, sent_emails):
    response = client.post("/creator/create-product", json={"account": "nope", "data": _product_form()})

    assert response.status_code == 400
    assert response.get_json() == {"message": "Invalid account"}


def test_verify_and_place_completes_flow_and_clears_store(
    client, sent_emails, merchant_calls, minting, mongo_db
):
    href = _create(client, sent_emails)
    code = sent_emails[0]["code"]

    response = client.post(href, json={"account": ACCOUNT, "data": {"code": code}})

    assert response.status_code == 200
    body = response.get_json()
    assert body["type"] == "transaction"
    assert body["transaction"] == "cGF5bWVudA=="
    completed = body["links"]["next"]["action"]
    assert completed["type"] == "completed"
    assert "https://api.clickcrate.xyz/blink/PosAddress111" in completed["description"]

    assert merchant_calls == [
        "register_clickcrate",
        "activate_clickcrate",
        "register_product_listing",
        "activate_product_listing",
        "place_product_listing",
    ]
    assert minting["creator"] == ACCOUNT
    assert [unit["name"] for unit in minting["plan"]["products"]] == ["Team Hat #1", "Team Hat #2"]
    assert {"key": "Product Category", "value": "Clothing"} in minting["plan"]["listing"]["attributes"]
    assert minting["payment"] == (7_500_000, ACCOUNT)
    assert pending_products == {}
    assert mongo_db.pending_products.count_documents({}) == 0


def test_verify_and_place_wrong_code_keeps_submission(client, sent_emails, merchant_calls, minting):
    href = _create(client, sent_emails)
    wrong = "000000" if sent_emails[0]["code"] != "000000" else "111111"

    response = client.post(href, json={"account": ACCOUNT, "data": {"code": wrong}})

    assert response.status_code == 400
    assert response.get_json() == {"message": "Invalid verification code"}
    assert len(pending_products) == 1
    assert merchant_calls == []
    assert "plan" not in minting


def test_verify_and_place_requires_parameters(client):
    response = client.post("/creator/verify-and-place", json={"account": ACCOUNT, "data": {"code": "123456"}})

    assert response.status_code == 400
    assert response.get_json() == {"message": "Missing required parameters"}


def test_verify_and_place_unknown_submission(client):
    response = client.post(
        "/creator/verify-and-place?id=prod_missing", json={"account": ACCOUNT, "data": {"code": "123456"}}
    )

    assert response.status_code == 404


def test_verify_and_place_rejects_other_account(client, sent_emails):
    href = _create(client, sent_emails)
    other = str(Keypair().pubkey())

    response = client.post(href, json={"account": other, "data": {"code": sent_emails[0]["code"]}})

    assert response.status_code == 403
    assert len(pending_products) == 1


def test_verify_and_place_reports_merchant_failure(
    client, sent_emails, merchant_calls, minting, monkeypatch
):
    monkeypatch.setattr(
        clickcrate_api,
        "activate_clickcrate",
        lambda clickcrate_id: ApiResponse(status=409, data={"message": "already active"}),
    )
    href = _create(client, sent_emails)

    response = client.post(href, json={"account": ACCOUNT, "data": {"code": sent_emails[0]["code"]}})

    assert response.status_code == 500
    assert response.get_json() == {"message": "Failed to activate ClickCrate: already active"}
    assert merchant_calls == ["register_clickcrate"]


def test_verify_and_place_video_product(client, sent_emails, merchant_calls, minting):
    href = _create(client, sent_emails, imageUri="https://example.com/merch/hat-spin.mp4")

    response = client.post(href, json={"account": ACCOUNT, "data": {"code": sent_emails[0]["code"]}})

    assert response.status_code == 200
    assert pending_products == {}
    metadata_id = minting["plan"]["products"][0]["uri"].rsplit("/", 1)[-1]
    document = client.get(f"/metadata/{metadata_id}").get_json()
    assert document["properties"]["category"] == "video"
    assert document["properties"]["files"][0]["type"] == "video/mp4"
    assert document["animation_url"] == "https://example.com/merch/hat-spin.mp4"


def test_verify_and_place_keeps_submission_when_metadata_fails(
    client, sent_emails, merchant_calls, minting, monkeypatch
):
    def failing_prepare(record, creator, category):
        raise ValueError("Unsupported file type: bmp")

    monkeypatch.setattr(solana_service, "prepare_products", failing_prepare)
    href = _create(client, sent_emails)
    code = sent_emails[0]["code"]

    response = client.post(href, json={"account": ACCOUNT, "data": {"code": code}})

    assert response.status_code == 400
    assert response.get_json() == {"message": "Failed to prepare product metadata: Unsupported file type: bmp"}
    assert len(pending_products) == 1
    assert "plan" not in minting

    retry = client.post(href, json={"account": ACCOUNT, "data": {"code": code}})
    assert retry.status_code == 400
    assert len(pending_products) == 1
