"""
Tests for checkout creation and payment confirmation.

Confirmation must record a payment exactly once per provider transaction,
assign the parcel's tracking id once, and write nothing for unpaid sessions.
"""

import re
import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from backend.app.core.config import settings
from backend.app.domain.payments.payment_service import PaymentService, to_minor_units
from backend.app.schemas.payment import PaymentAlreadyRecorded


# TEST 1: Paid session, no prior record
@pytest.mark.asyncio
async def test_paid_session_updates_parcel_and_records_payment(client, mongo, payment_provider, parcel_id):
    payment_provider.add_session("cs_paid", parcel_id, transaction_id="pi_123", amount_total=15050)

    response = await client.patch("/payment-success", params={"session_id": "cs_paid"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["transactionId"] == "pi_123"
    assert re.match(r"^PRCL-\d{8}-[0-9A-F]{6}$", data["trackingId"])
    assert data["modifyParcel"]["matchedCount"] == 1
    assert data["modifyParcel"]["modifiedCount"] == 1
    assert data["paymentInfo"]["acknowledged"] is True

    # Exactly one parcel update and one payment insert
    assert [w[0] for w in mongo.parcels.writes] == ["update_one"]
    assert [w[0] for w in mongo.payments.writes] == ["insert_one"]

    parcel = await mongo.parcels.find_one({"_id": ObjectId(parcel_id)})
    assert parcel["paymentStatus"] == "paid"
    assert parcel["trackingId"] == data["trackingId"]

    payment = await mongo.payments.find_one({"transactionId": "pi_123"})
    assert str(payment["_id"]) == data["paymentInfo"]["insertedId"]
    assert payment["amount"] == 150.5
    assert payment["currency"] == "usd"
    assert payment["customerEmail"] == "sender@test.com"
    assert payment["parcelId"] == parcel_id
    assert payment["parcelName"] == "Books"
    assert payment["paymentStatus"] == "paid"
    assert payment["trackingId"] == data["trackingId"]
    assert payment["paidAt"] is not None


# TEST 2: Replayed redirect
@pytest.mark.asyncio
async def test_confirmation_is_idempotent(client, mongo, payment_provider, parcel_id):
    payment_provider.add_session("cs_paid", parcel_id, transaction_id="pi_123")

    first = await client.patch("/payment-success", params={"session_id": "cs_paid"})
    second = await client.patch("/payment-success", params={"session_id": "cs_paid"})

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json() == {
        "message": "already exist",
        "transactionId": "pi_123",
        "trackingId": first.json()["trackingId"],
    }
    assert len(mongo.payments.documents) == 1
    assert len(mongo.parcels.writes) == 1


@pytest.mark.asyncio
async def test_existing_record_short_circuits_before_tracking_id(mongo, payment_provider, parcel_id, mocker):
    payment_provider.add_session("cs_paid", parcel_id, transaction_id="pi_123")
    await mongo.payments.insert_one({"transactionId": "pi_123", "trackingId": "PRCL-20240521-A1F90C"})
    generate = mocker.patch("backend.app.domain.payments.payment_service.generate_tracking_id")

    result = await PaymentService.confirm_checkout(mongo, payment_provider, "cs_paid")

    assert isinstance(result, PaymentAlreadyRecorded)
    assert result.tracking_id == "PRCL-20240521-A1F90C"
    generate.assert_not_called()
    assert mongo.parcels.writes == []


# TEST 3: Session not paid
@pytest.mark.asyncio
async def test_unpaid_session_writes_nothing(client, mongo, payment_provider, parcel_id):
    payment_provider.add_session("cs_unpaid", parcel_id, payment_status="unpaid", transaction_id=None)

    response = await client.patch("/payment-success", params={"session_id": "cs_unpaid"})

    assert response.status_code == 200
    assert response.json() == {"success": False}
    assert mongo.parcels.writes == []
    assert mongo.payments.writes == []
    parcel = await mongo.parcels.find_one({"_id": ObjectId(parcel_id)})
    assert "trackingId" not in parcel


# TEST 4: Two confirmations racing past the idempotency check
@pytest.mark.asyncio
async def test_concurrent_duplicate_resolved_by_unique_index(mongo, payment_provider, parcel_id, mocker):
    payment_provider.add_session("cs_paid", parcel_id, transaction_id="pi_race")
    winner = await PaymentService.confirm_checkout(mongo, payment_provider, "cs_paid")

    # The loser's idempotency lookup ran before the winner inserted
    original_find_one = mongo.payments.find_one
    mocker.patch.object(
        mongo.payments, "find_one",
        side_effect=[None, await original_find_one({"transactionId": "pi_race"})],
    )

    loser = await PaymentService.confirm_checkout(mongo, payment_provider, "cs_paid")

    assert isinstance(loser, PaymentAlreadyRecorded)
    assert loser.tracking_id == winner.tracking_id
    assert len(mongo.payments.documents) == 1
    stored = mongo.parcels.documents[0]
    assert stored["trackingId"] == winner.tracking_id


@pytest.mark.asyncio
async def test_already_tracked_parcel_keeps_its_tracking_id(client, mongo, payment_provider, parcel_id):
    """Parcel updated by an earlier confirmation that never recorded its payment."""
    await mongo.parcels.update_one(
        {"_id": ObjectId(parcel_id)},
        {"$set": {"paymentStatus": "paid", "trackingId": "PRCL-20240101-AAAAAA"}},
    )
    mongo.parcels.writes.clear()
    payment_provider.add_session("cs_paid", parcel_id, transaction_id="pi_replay")

    response = await client.patch("/payment-success", params={"session_id": "cs_paid"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["trackingId"] == "PRCL-20240101-AAAAAA"
    assert data["modifyParcel"]["matchedCount"] == 0

    parcel = await mongo.parcels.find_one({"_id": ObjectId(parcel_id)})
    payment = await mongo.payments.find_one({"transactionId": "pi_replay"})
    assert parcel["trackingId"] == "PRCL-20240101-AAAAAA"
    assert payment["trackingId"] == "PRCL-20240101-AAAAAA"


@pytest.mark.asyncio
async def test_unique_index_rejects_second_insert(mongo):
    await mongo.payments.insert_one({"transactionId": "pi_1"})
    with pytest.raises(DuplicateKeyError):
        await mongo.payments.insert_one({"transactionId": "pi_1"})


# TEST 5: Provider failures
@pytest.mark.asyncio
async def test_unknown_session_reports_provider_failure(client, mongo):
    response = await client.patch("/payment-success", params={"session_id": "cs_missing"})

    assert response.status_code == 502
    assert response.json()["error_code"] == "ERR_PROVIDER_001"
    assert mongo.payments.writes == []


@pytest.mark.asyncio
async def test_session_id_is_required(client):
    response = await client.patch("/payment-success")
    assert response.status_code == 422


# Checkout creation
@pytest.mark.asyncio
async def test_create_checkout_session(client, payment_provider, parcel_id):
    response = await client.post("/payment-checkout-session", json={
        "cost": 150.5,
        "parcelId": parcel_id,
        "parcelName": "Books",
        "senderEmail": "sender@test.com",
    })

    assert response.status_code == 200
    assert response.json()["url"].startswith("https://checkout.stripe.test/")

    checkout = payment_provider.checkouts[0]
    assert checkout.amount == 15050
    assert checkout.currency == settings.payment_currency
    assert checkout.product_name == "Please pay for :Books"
    assert checkout.customer_email == "sender@test.com"
    assert checkout.metadata["parcelId"] == parcel_id
    assert checkout.metadata["parcelName"] == "Books"
    assert checkout.success_url == (
        f"{settings.site_domain}/dashboard/payment-success?session_id={{CHECKOUT_SESSION_ID}}"
    )
    assert checkout.cancel_url == f"{settings.site_domain}/dashboard/payment-cancelled"


@pytest.mark.asyncio
async def test_create_checkout_session_validates_cost(client, parcel_id):
    response = await client.post("/payment-checkout-session", json={
        "cost": 0,
        "parcelId": parcel_id,
        "parcelName": "Books",
        "senderEmail": "sender@test.com",
    })
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


def test_to_minor_units_rounds_half_up():
    assert to_minor_units(150) == 15000
    assert to_minor_units(19.99) == 1999
    assert to_minor_units(0.125) == 13
