"""
Mock Rivhit responses for development without an API token.

Canned payloads wrapped in the standard envelope. Unknown method paths answer
with the NO_DATA_FOUND envelope (error_code 204), like the real API does when
a query matches nothing.
"""

import random
from typing import Any, Callable, Dict, Optional

from connectors.rivhit.models import RivhitEnvelope


# =============================================================================
# CANNED DATA
# =============================================================================

MOCK_CUSTOMERS = [
    {
        "customer_id": 64,
        "last_name": "ישראלי",
        "first_name": "ישראל",
        "street": "הרצל 1",
        "city": "תל אביב",
        "zipcode": "61000",
        "phone": "03-5551234",
        "email": "israel@example.com",
        "id_number": 123456789,
        "vat_number": 123456789,
        "customer_type": 1,
        "price_list_id": 1,
        "discount_percent": 0,
        "acc_ref": "CUST-64",
        "comments": "",
    },
    {
        "customer_id": 101,
        "last_name": "כהן",
        "first_name": "שרה",
        "street": "דיזנגוף 10",
        "city": "תל אביב",
        "zipcode": "62000",
        "phone": "03-5555678",
        "email": "sara@example.com",
        "id_number": 987654321,
        "vat_number": 987654321,
        "customer_type": 2,
        "price_list_id": 1,
        "discount_percent": 5,
        "acc_ref": "CUST-101",
        "comments": "VIP",
    },
]

MOCK_ITEMS = [
    {
        "item_id": 1001,
        "item_name": "חולצה כותנה",
        "item_part_num": "SHIRT-CTN",
        "barcode": "729000000001",
        "item_group_id": 1,
        "storage_id": 1,
        "quantity": 25,
        "cost_nis": 30.0,
        "sale_nis": 59.9,
        "currency_id": 1,
    },
    {
        "item_id": 1002,
        "item_name": "מכנסי ג׳ינס",
        "item_part_num": "JEANS-STD",
        "barcode": "729000000002",
        "item_group_id": 1,
        "storage_id": 1,
        "quantity": 4,
        "cost_nis": 80.0,
        "sale_nis": 159.9,
        "currency_id": 1,
    },
]

MOCK_ITEM_GROUPS = [
    {"item_group_id": 1, "item_group_name": "הלבשה"},
    {"item_group_id": 2, "item_group_name": "אקססוריז"},
]

MOCK_STORAGES = [
    {"storage_id": 1, "storage_name": "מחסן ראשי"},
    {"storage_id": 2, "storage_name": "מחסן משני"},
]

MOCK_DOCUMENT_TYPES = [
    {"document_type": 1, "document_name": "חשבונית מס", "is_invoice_receipt": False, "is_accounting": True, "price_include_vat": True},
    {"document_type": 2, "document_name": "חשבונית מס קבלה", "is_invoice_receipt": True, "is_accounting": True, "price_include_vat": True},
    {"document_type": 4, "document_name": "תעודת משלוח", "is_invoice_receipt": False, "is_accounting": False, "price_include_vat": True},
    {"document_type": 10, "document_name": "הזמנה", "is_invoice_receipt": False, "is_accounting": False, "price_include_vat": True},
]

MOCK_DOCUMENTS = [
    {"document_type": 1, "document_number": 184, "document_date": "06/03/2024", "document_time": "21:06:32", "amount": 191.14, "customer_id": 64, "agent_id": 0},
    {"document_type": 2, "document_number": 369, "document_date": "10/07/2024", "document_time": "14:22:10", "amount": 70.0, "customer_id": 101, "agent_id": 0},
    {"document_type": 10, "document_number": 5021, "document_date": "01/09/2024", "document_time": "10:12:05", "amount": 450.0, "customer_id": 64, "agent_id": 0},
    {"document_type": 10, "document_number": 5022, "document_date": "03/09/2024", "document_time": "16:45:40", "amount": 1299.0, "customer_id": 101, "agent_id": 0},
]

MOCK_RECEIPT_TYPES = [
    {"receipt_type": 1, "receipt_name": "קבלה", "is_invoice_receipt": False},
    {"receipt_type": 2, "receipt_name": "חשבונית מס קבלה", "is_invoice_receipt": True},
    {"receipt_type": 3, "receipt_name": "קבלת דחויים", "is_invoice_receipt": False},
]

MOCK_RECEIPTS = [
    {"receipt_type": 1, "receipt_number": 353, "receipt_date": "09/03/2024", "receipt_time": "21:03:12", "amount": 1416.0, "customer_id": 64},
    {"receipt_type": 1, "receipt_number": 354, "receipt_date": "09/03/2024", "receipt_time": "21:03:40", "amount": 4212.0, "customer_id": 101},
]

MOCK_CURRENCIES = [
    {"currency_id": 1, "currency_name": 'ש"ח', "iso_code": "ILS"},
    {"currency_id": 2, "currency_name": "USD", "iso_code": "USD"},
    {"currency_id": 3, "currency_name": "EURO", "iso_code": "EUR"},
]

MOCK_PAYMENT_TYPES = [
    {"payment_type": 1, "payment_name": "שיק", "type_code": 2},
    {"payment_type": 2, "payment_name": "מזומן", "type_code": 1},
    {"payment_type": 4, "payment_name": "ישראכרט", "type_code": 3},
]

MOCK_BANKS = [
    {"bank_code": 10, "bank_name": "לאומי"},
    {"bank_code": 11, "bank_name": "דיסקונט"},
    {"bank_code": 12, "bank_name": "הפועלים"},
]


# =============================================================================
# HANDLERS
# =============================================================================

def _new_document(body: Dict[str, Any]) -> Dict[str, Any]:
    doc_type = int(body.get("document_type") or 10)
    doc_number = random.randint(5000, 9999)
    return {
        "document_type": doc_type,
        "document_number": doc_number,
        "document_identity": f"mock-doc-identity-{doc_number}",
        "document_link": f"https://example.com/mock-doc/{doc_number}",
        "print_status": 0,
        "customer_id": int(body.get("customer_id") or 64),
    }


MOCK_HANDLERS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    "Customer.List": lambda body: {"customer_list": MOCK_CUSTOMERS},
    "Item.List": lambda body: {"item_list": MOCK_ITEMS},
    "Item.Groups": lambda body: {"item_group_list": MOCK_ITEM_GROUPS},
    "Item.StorageList": lambda body: {"storage_list": MOCK_STORAGES},
    "Document.TypeList": lambda body: {"document_type_list": MOCK_DOCUMENT_TYPES},
    "Document.List": lambda body: {"document_list": MOCK_DOCUMENTS},
    "Document.New": _new_document,
    "Receipt.TypeList": lambda body: {"receipt_type_list": MOCK_RECEIPT_TYPES},
    "Receipt.List": lambda body: {"receipt_list": MOCK_RECEIPTS},
    "Accounting.VatRate": lambda body: {"vat_rate": 0.17},
    "Currency.List": lambda body: {"currency_list": MOCK_CURRENCIES},
    "Payment.TypeList": lambda body: {"payment_type_list": MOCK_PAYMENT_TYPES},
    "Payment.BankList": lambda body: {"bank_list": MOCK_BANKS},
}


def mock_response(method_path: str, body: Optional[Dict[str, Any]] = None) -> RivhitEnvelope:
    """Canned envelope for a method path."""
    path = method_path.strip("/")
    handler = MOCK_HANDLERS.get(path)
    if handler is None:
        return RivhitEnvelope.no_data(f"No mock for {path}")
    return RivhitEnvelope.success(handler(body or {}))
