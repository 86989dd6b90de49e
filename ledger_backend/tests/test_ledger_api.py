"""
Integration tests for payments, deposits and admin reports over HTTP.
"""

import logging
import pytest
from decimal import Decimal
from datetime import datetime, timezone
from sqlalchemy.exc import OperationalError

from ledger_backend.app.db.ledger_store import LedgerTransaction


def as_profile(profile):
    return {"profile-id": str(profile.id)}


@pytest.fixture
async def billed(factory):
    """Payer with 100, performer with 0, one unpaid job of 80."""
    payer = await factory.payer(balance="100")
    performer = await factory.performer()
    contract = await factory.contract(payer, performer)
    job = await factory.job(contract, price="80")
    return payer, performer, job


# --- Pay ---

@pytest.mark.asyncio
async def test_pay_job(client, factory, billed):
    payer, performer, job = billed

    response = await client.post(f"/v1/jobs/{job.id}/pay", headers=as_profile(payer))

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Payment successful"
    assert Decimal(data["amount"]) == Decimal("80")
    assert Decimal(data["payer_balance"]) == Decimal("20")
    assert Decimal(data["performer_balance"]) == Decimal("80")
    assert await factory.balance(performer) == Decimal("80")


@pytest.mark.asyncio
async def test_pay_job_twice_conflicts(client, factory, billed):
    payer, _, job = billed

    await client.post(f"/v1/jobs/{job.id}/pay", headers=as_profile(payer))
    response = await client.post(f"/v1/jobs/{job.id}/pay", headers=as_profile(payer))

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_LEDGER_001"
    assert await factory.balance(payer) == Decimal("20")


@pytest.mark.asyncio
async def test_pay_job_insufficient_funds(client, factory):
    payer = await factory.payer(balance="50")
    performer = await factory.performer()
    job = await factory.job(await factory.contract(payer, performer), price="80")

    response = await client.post(f"/v1/jobs/{job.id}/pay", headers=as_profile(payer))

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_LEDGER_002"
    assert await factory.balance(payer) == Decimal("50")


@pytest.mark.asyncio
async def test_pay_unknown_job(client, billed):
    payer = billed[0]

    response = await client.post("/v1/jobs/9999/pay", headers=as_profile(payer))

    assert response.status_code == 404
    assert response.json()["details"]["resource"] == "job"


@pytest.mark.asyncio
async def test_performer_cannot_pay_over_http(client, billed):
    _, performer, job = billed

    response = await client.post(f"/v1/jobs/{job.id}/pay", headers=as_profile(performer))

    assert response.status_code == 404
    assert response.json()["details"]["resource"] == "payer"


@pytest.mark.asyncio
async def test_store_failure_is_503(client, factory, billed, mocker):
    payer, _, job = billed
    mocker.patch.object(
        LedgerTransaction,
        "mark_job_paid",
        side_effect=OperationalError("UPDATE jobs", {}, Exception("database is locked")),
    )

    response = await client.post(f"/v1/jobs/{job.id}/pay", headers=as_profile(payer))

    assert response.status_code == 503
    assert response.json()["error_code"] == "ERR_STORE_001"
    assert await factory.balance(payer) == Decimal("100")


# --- Deposits ---

@pytest.mark.asyncio
async def test_max_deposit(client, factory):
    payer = await factory.payer()
    performer = await factory.performer()
    await factory.job(await factory.contract(payer, performer), price="200")

    response = await client.get(f"/v1/balances/{payer.id}/max-deposit")

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["outstanding"]) == Decimal("200")
    assert Decimal(data["max_deposit"]) == Decimal("50")


@pytest.mark.asyncio
async def test_deposit_within_cap(client, factory, billed):
    payer = billed[0]

    response = await client.post(f"/v1/balances/deposit/{payer.id}", json={"amount": "20"})

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Deposit successful"
    assert Decimal(data["new_balance"]) == Decimal("120")


@pytest.mark.asyncio
async def test_deposit_over_cap(client, factory, billed):
    payer = billed[0]

    response = await client.post(f"/v1/balances/deposit/{payer.id}", json={"amount": "21"})

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_LEDGER_004"
    assert body["message"] == "Deposit exceeds the maximum allowed limit of 20.00"
    assert await factory.balance(payer) == Decimal("100")


@pytest.mark.asyncio
async def test_deposit_non_positive_amount(client, billed):
    payer = billed[0]

    response = await client.post(f"/v1/balances/deposit/{payer.id}", json={"amount": "-5"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_LEDGER_003"


@pytest.mark.asyncio
async def test_deposit_malformed_body(client, billed):
    payer = billed[0]

    response = await client.post(f"/v1/balances/deposit/{payer.id}", json={})

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_deposit_unknown_payer(client):
    response = await client.post("/v1/balances/deposit/9999", json={"amount": "1"})

    assert response.status_code == 404


# --- Admin reports ---

@pytest.fixture
async def paid_history(factory):
    payer = await factory.payer(first_name="Harry", last_name="Potter")
    other = await factory.payer(first_name="Mr", last_name="Robot")
    coder = await factory.performer(profession="Programmer")
    fighter = await factory.performer(profession="Fighter")
    when = datetime(2020, 8, 10, 12, tzinfo=timezone.utc)
    await factory.job(await factory.contract(payer, coder), price="300", paid_on=when)
    await factory.job(await factory.contract(other, fighter), price="200", paid_on=when)
    return payer, other


@pytest.mark.asyncio
async def test_best_profession_endpoint(client, paid_history):
    response = await client.get(
        "/v1/admin/best-profession", params={"start": "2020-08-01", "end": "2020-08-31"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["profession"] == "Programmer"
    assert Decimal(data["total_earnings"]) == Decimal("300")


@pytest.mark.asyncio
async def test_best_profession_missing_range(client):
    response = await client.get("/v1/admin/best-profession", params={"start": "2020-08-01"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_LEDGER_005"


@pytest.mark.asyncio
async def test_best_profession_empty_window(client, paid_history):
    response = await client.get(
        "/v1/admin/best-profession", params={"start": "2021-01-01", "end": "2021-01-31"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_best_payers_endpoint(client, paid_history):
    payer, _ = paid_history

    response = await client.get(
        "/v1/admin/best-payers", params={"start": "2020-08-01", "end": "2020-08-31", "limit": "1"}
    )

    assert response.status_code == 200
    top = response.json()
    assert len(top) == 1
    assert top[0]["payer_id"] == payer.id
    assert top[0]["payer_name"] == "Harry Potter"
    assert Decimal(top[0]["total_paid"]) == Decimal("300")


@pytest.mark.asyncio
async def test_best_payers_bad_limit_uses_default(client, paid_history):
    response = await client.get(
        "/v1/admin/best-payers", params={"start": "2020-08-01", "end": "2020-08-31", "limit": "zero"}
    )

    assert response.status_code == 200
    assert [p["payer_name"] for p in response.json()] == ["Harry Potter", "Mr Robot"]


@pytest.mark.asyncio
async def test_best_payers_huge_limit_is_capped(client, paid_history):
    response = await client.get(
        "/v1/admin/best-payers",
        params={"start": "2020-08-01", "end": "2020-08-31", "limit": "99999999999999999999"},
    )

    assert response.status_code == 200
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_best_profession_offset_window(client, paid_history):
    # 10th 12:00 UTC is 17:00 at +05:00, after this window closes
    response = await client.get(
        "/v1/admin/best-profession",
        params={"start": "2020-08-10T00:00:00+05:00", "end": "2020-08-10T16:00:00+05:00"},
    )

    assert response.status_code == 404


# --- Plumbing ---

@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_request_log_line_carries_context(client, billed, caplog):
    payer = billed[0]
    caplog.set_level(logging.INFO, logger="ledger.http")

    await client.get(
        "/v1/jobs/unpaid",
        headers={**as_profile(payer), "X-Correlation-ID": "corr-42"},
    )

    records = [r for r in caplog.records if r.name == "ledger.http"]
    assert len(records) == 1
    message = records[0].getMessage()
    assert "GET /v1/jobs/unpaid -> 200" in message
    assert "correlation_id=corr-42" in message
    assert f"profile_id={payer.id}" in message
