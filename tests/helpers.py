"""
Shared fixtures for the API tests: users with tokens, a committee with
checkposts, and receipt payloads.
"""
from datetime import date
from decimal import Decimal

from rest_framework.test import APIClient

from amc.models import Checkpost, Committee, Receipt, User
from amc.serializers.auth_serializers import issue_token

PASSWORD = "testpass123"


def make_user(role=User.USER, email=None, **extra):
    email = email or f"{role.lower()}@example.com"
    return User.objects.create_user(email, PASSWORD, name=f"{role.title()} User", role=role, **extra)


def client_for(user=None):
    client = APIClient()
    if user is not None:
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")
    return client


def make_committee(code="KRP-AMC", name="Karapa", checkposts=()):
    committee = Committee.objects.create(code=code, name=name, has_checkposts=bool(checkposts))
    for checkpost_name in checkposts:
        Checkpost.objects.create(committee=committee, name=checkpost_name, location=checkpost_name)
    return committee


def receipt_payload(committee, **overrides):
    payload = {
        "bookNumber": "B1",
        "receiptNumber": "R1",
        "date": "2025-05-10",
        "financialYear": "2025-26",
        "traderName": "Sri Lakshmi Traders",
        "payeeName": "K. Ramana",
        "commodity": "Paddy",
        "transactionValue": "100000.00",
        "marketFee": "1000.00",
        "natureOfReceipt": "MF",
        "collectionLocation": "OFFICE",
        "committeeId": committee.pk,
    }
    payload.update(overrides)
    return payload


def make_receipt(committee, book="B1", number="R1", on=date(2025, 5, 10), fee="1000.00", **extra):
    fields = {
        "book_number": book,
        "receipt_number": number,
        "date": on,
        "financial_year": extra.pop("financial_year", "2025-26"),
        "trader_name": "Trader",
        "payee_name": "Payee",
        "commodity": extra.pop("commodity", "Paddy"),
        "transaction_value": Decimal(fee) * 100,
        "market_fee": Decimal(fee),
        "nature_of_receipt": extra.pop("nature_of_receipt", Receipt.MF),
        "collection_location": extra.pop("collection_location", Receipt.OFFICE),
        "committee": committee,
    }
    fields.update(extra)
    return Receipt.objects.create(**fields)
