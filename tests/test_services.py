"""Tests for the Timber entity services.

Each service is exercised through a TimberClient whose transport has
``httpx.AsyncClient.request`` patched, so the tests see exactly the method,
URL and body every operation puts on the wire.
"""

import json
from datetime import date
from unittest.mock import MagicMock, patch

import httpx
import pytest
from pydantic import ValidationError as PydanticValidationError

from timber.client import TimberClient
from timber.core.errors import EncodingError, ErrorCode, ValidationError
from timber.services.base import QueryParams
from timber.services.bill_payment import BillPaymentData, BillPaymentQueryParams
from timber.services.customer import CustomerData
from timber.services.employee import CreateEmployeeRequest, UpdateEmployeeRequest
from timber.services.expense import CreateExpenseRequest, UpdateExpenseRequest
from timber.services.expense_category import ExpenseCategoryRequest
from timber.services.http import TimberHTTPClient
from timber.services.invoice import BillerDetails, CustomerDetails, InvoiceData, LineItem
from timber.services.invoice_payment import InvoicePaymentData, InvoicePaymentQueryParams
from timber.services.payload import Attachment
from timber.services.raw_expense import CreateRawExpenseRequest
from timber.services.salary import CreateSalaryRequest
from timber.services.vendor_payment import VendorPaymentData

from tests.conftest import BASE_URL, AsyncIter, RequestRecorder


def url(path: str) -> str:
    return f"{BASE_URL}{path}"


# =============================================================================
# JSON Services
# =============================================================================


class TestExpenseService:
    """Tests for ExpenseService."""

    @pytest.mark.asyncio
    async def test_list_with_params(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense.list({"page": 1, "limit": 10})

        assert recorder.last["method"] == "GET"
        assert recorder.last["url"] == url("/customer/expense")
        assert recorder.last["params"] == {"page": 1, "limit": 10}

    @pytest.mark.asyncio
    async def test_list_drops_unset_params(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense.list(QueryParams(page=2, sort=None))
            await timber_client.expense.list({"page": None})

        assert recorder.calls[0]["params"] == {"page": 2}
        assert recorder.calls[1]["params"] is None

    @pytest.mark.asyncio
    async def test_get(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            result = await timber_client.expense.get("e1")

        assert result == {"_id": "abc123"}
        assert recorder.last["url"] == url("/customer/expense/e1")

    @pytest.mark.asyncio
    async def test_create_sends_json(self, timber_client, recorder):
        request = CreateExpenseRequest(
            type="travel",
            merchant="Uber",
            category="Transportation",
            date=date(2025, 6, 23),
            payment_method="credit_card",
            amount=45.75,
        )

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense.create(request)

        assert recorder.last["method"] == "POST"
        assert recorder.last["url"] == url("/customer/expense")
        assert recorder.last["json"] == {
            "type": "travel",
            "merchant": "Uber",
            "category": "Transportation",
            "date": "2025-06-23",
            "payment_method": "credit_card",
            "amount": 45.75,
        }
        assert recorder.last["files"] is None

    @pytest.mark.asyncio
    async def test_update_sends_only_set_fields(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense.update("e1", UpdateExpenseRequest(amount=10))

        assert recorder.last["method"] == "PUT"
        assert recorder.last["url"] == url("/customer/expense/e1")
        assert recorder.last["json"] == {"amount": 10.0}

    @pytest.mark.asyncio
    async def test_delete_is_patch(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense.delete("e1")

        assert recorder.last["method"] == "PATCH"
        assert recorder.last["url"] == url("/customer/expense/e1")
        assert recorder.last["json"] is None

    @pytest.mark.asyncio
    async def test_missing_id_raises_without_request(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            with pytest.raises(ValidationError) as exc_info:
                await timber_client.expense.get("")

        assert "ID is required" in str(exc_info.value)
        assert exc_info.value.error_code == ErrorCode.API_VALIDATION_ERROR
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_create_accepts_plain_dict(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense.create({"merchant": "Uber", "amount": 5})

        assert recorder.last["json"] == {"merchant": "Uber", "amount": 5}

    @pytest.mark.asyncio
    async def test_create_dict_with_date_is_json_ready(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense.create({"date": date(2025, 6, 23), "amount": 1})

        assert recorder.last["json"] == {"date": "2025-06-23", "amount": 1}

    @pytest.mark.asyncio
    async def test_dict_with_date_on_the_wire(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.read())
            return httpx.Response(201, json={"_id": "e1"})

        injected = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = TimberClient(TimberHTTPClient(base_url=BASE_URL, api_key="k", http_client=injected))

        result = await client.expense.create({"date": date(2025, 6, 23), "amount": 1})

        assert result == {"_id": "e1"}
        assert seen["body"] == {"date": "2025-06-23", "amount": 1}
        await injected.aclose()


class TestExpenseCategoryService:
    """Tests for ExpenseCategoryService."""

    @pytest.mark.asyncio
    async def test_crud_routes(self, timber_client, recorder):
        category = ExpenseCategoryRequest(category="Travel")

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.expense_category.list()
            await timber_client.expense_category.create(category)
            await timber_client.expense_category.update("c1", category)
            await timber_client.expense_category.delete("c1")

        routes = [(call["method"], call["url"]) for call in recorder.calls]
        assert routes == [
            ("GET", url("/customer/expense/category")),
            ("POST", url("/customer/expense/category")),
            ("PUT", url("/customer/expense/category/c1")),
            ("DELETE", url("/customer/expense/category/c1")),
        ]
        assert recorder.calls[1]["json"] == {"category": "Travel"}


class TestCustomerService:
    """Tests for CustomerService."""

    @pytest.mark.asyncio
    async def test_create_passes_extra_fields(self, timber_client, recorder):
        customer = CustomerData(name="John Doe", email="john@example.com", loyalty_tier="gold")

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.customer.create(customer)

        assert recorder.last["method"] == "POST"
        assert recorder.last["url"] == url("/customer/customer")
        assert recorder.last["json"] == {
            "name": "John Doe",
            "email": "john@example.com",
            "loyalty_tier": "gold",
        }

    @pytest.mark.asyncio
    async def test_update_and_delete(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.customer.update("u1", CustomerData(city="Dubai"))
            await timber_client.customer.delete("u1")

        assert recorder.calls[0]["method"] == "PUT"
        assert recorder.calls[0]["json"] == {"city": "Dubai"}
        assert recorder.calls[1]["method"] == "DELETE"
        assert recorder.calls[1]["url"] == url("/customer/customer/u1")


class TestTaxRateService:
    """Tests for TaxRateService."""

    @pytest.mark.asyncio
    async def test_read_only(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.tax_rate.list()
            await timber_client.tax_rate.get("t1")

        assert [call["url"] for call in recorder.calls] == [
            url("/customer/tax-rate"),
            url("/customer/tax-rate/t1"),
        ]
        assert not hasattr(timber_client.tax_rate, "create")


class TestEmployeeService:
    """Tests for EmployeeService."""

    @pytest.mark.asyncio
    async def test_create(self, timber_client, recorder):
        employee = CreateEmployeeRequest(
            employee_id="EMP001",
            name="Jane",
            designation="Accountant",
            mobile="501234567",
            country_code="+971",
            basic_salary=5000,
            allowance=500,
            joining_date="2024-01-15",
        )

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.employee.create(employee)

        body = recorder.last["json"]
        assert recorder.last["url"] == url("/customer/employee")
        assert body["employee_id"] == "EMP001"
        assert body["is_active"] is True
        assert body["joining_date"] == "2024-01-15"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.employee.update("emp1", UpdateEmployeeRequest(is_active=False))
            await timber_client.employee.delete("emp1")

        assert recorder.calls[0]["method"] == "PUT"
        assert recorder.calls[0]["json"] == {"is_active": False}
        assert recorder.calls[1]["method"] == "DELETE"


class TestSalaryService:
    """Tests for SalaryService."""

    @pytest.mark.asyncio
    async def test_create(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.salary.create(CreateSalaryRequest(month=6, year=2025))

        assert recorder.last["method"] == "POST"
        assert recorder.last["url"] == url("/customer/salary")
        assert recorder.last["json"] == {"month": 6, "year": 2025}

    def test_month_is_validated(self):
        with pytest.raises(PydanticValidationError):
            CreateSalaryRequest(month=13, year=2025)

    def test_no_delete(self, timber_client):
        assert not hasattr(timber_client.salary, "delete")


# =============================================================================
# Multipart Services
# =============================================================================


class TestVendorPaymentService:
    """Tests for VendorPaymentService."""

    @pytest.mark.asyncio
    async def test_create_multipart_order(self, timber_client, recorder):
        logo = Attachment(content=b"PNG", filename="logo.png", content_type="image/png")
        request = VendorPaymentData(
            title="Test Purchase",
            customer=CustomerDetails(name="John Doe", email="john@example.com"),
            items=[
                LineItem(title="Item 1", rate=100),
                LineItem(title="Item 2", rate=50),
            ],
            logo=logo,
        )

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.vendor_payment.create(request)

        assert recorder.last["method"] == "POST"
        assert recorder.last["url"] == url("/customer/purchase")
        assert recorder.last["json"] is None
        assert recorder.last["files"] == [
            ("title", (None, "Test Purchase")),
            ("customer[name]", (None, "John Doe")),
            ("customer[email]", (None, "john@example.com")),
            ("items[0][title]", (None, "Item 1")),
            ("items[0][rate]", (None, "100")),
            ("items[1][title]", (None, "Item 2")),
            ("items[1][rate]", (None, "50")),
            ("file", ("logo.png", b"PNG", "image/png")),
        ]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.vendor_payment.update("p1", VendorPaymentData(status="paid"))
            await timber_client.vendor_payment.delete("p1")

        assert recorder.calls[0]["method"] == "PUT"
        assert recorder.calls[0]["url"] == url("/customer/purchase/p1")
        assert recorder.calls[0]["files"] == [("status", (None, "paid"))]
        assert recorder.calls[1]["method"] == "PATCH"

    @pytest.mark.asyncio
    async def test_encoding_error_sends_nothing(self, timber_client, recorder):
        bad = {"title": "x", "customer": {"address": {"city": "Dubai"}}}

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            with pytest.raises(EncodingError) as exc_info:
                await timber_client.vendor_payment.create(bad)

        assert exc_info.value.error_code == ErrorCode.ENCODING_UNSUPPORTED_NESTING
        assert recorder.calls == []


class TestInvoiceService:
    """Tests for InvoiceService."""

    @pytest.mark.asyncio
    async def test_create_with_aliases_and_dates(self, timber_client, recorder):
        invoice = InvoiceData(
            title="Consulting",
            is_title_changed=True,
            biller=BillerDetails(name="Acme", trn=""),
            invoice_date=date(2025, 6, 23),
            items=[LineItem(title="Day", quantity=2, rate=800, discount=0)],
        )

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.invoice.create(invoice)

        assert recorder.last["method"] == "POST"
        assert recorder.last["url"] == url("/customer/invoice")
        assert recorder.last["files"] == [
            ("title", (None, "Consulting")),
            ("isTitleChanged", (None, "true")),
            ("biller[name]", (None, "Acme")),
            ("invoice_date", (None, "2025-06-23T00:00:00.000Z")),
            ("items[0][title]", (None, "Day")),
            ("items[0][quantity]", (None, "2")),
            ("items[0][rate]", (None, "800")),
            ("items[0][discount]", (None, "0")),
        ]

    @pytest.mark.asyncio
    async def test_update_is_multipart_put(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.invoice.update("inv1", InvoiceData(notes="Thanks"))

        assert recorder.last["method"] == "PUT"
        assert recorder.last["url"] == url("/customer/invoice/inv1")
        assert recorder.last["files"] == [("notes", (None, "Thanks"))]

    @pytest.mark.asyncio
    async def test_delete_sends_remarks(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.invoice.delete("inv1", remarks="Duplicate")
            await timber_client.invoice.delete("inv2")

        assert recorder.calls[0]["method"] == "DELETE"
        assert recorder.calls[0]["json"] == {"remarks": "Duplicate"}
        assert recorder.calls[1]["json"] == {"remarks": ""}


class TestInvoicePaymentService:
    """Tests for InvoicePaymentService."""

    @pytest.mark.asyncio
    async def test_list_filters_by_invoice(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.invoice_payment.list(InvoicePaymentQueryParams(invoice="inv1", page=1))

        assert recorder.last["url"] == url("/customer/invoice/payment-records")
        assert recorder.last["params"] == {"page": 1, "invoice": "inv1"}

    @pytest.mark.asyncio
    async def test_create_puts_file_last(self, timber_client, recorder):
        payment = InvoicePaymentData(
            invoice="inv1",
            file=Attachment(content=b"scan", filename="cheque.jpg"),
            amount="100.50",
        )

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.invoice_payment.create(payment)

        files = recorder.last["files"]
        assert [key for key, _ in files] == ["invoice", "amount", "file"]
        assert files[-1] == ("file", ("cheque.jpg", b"scan", None))

    @pytest.mark.asyncio
    async def test_update_and_delete(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.invoice_payment.update("r1", {"amount": 20})
            await timber_client.invoice_payment.delete("r1", remarks="Bounced")

        assert recorder.calls[0]["method"] == "PUT"
        assert recorder.calls[0]["files"] == [("amount", (None, "20"))]
        assert recorder.calls[1]["json"] == {"remarks": "Bounced"}


class TestBillPaymentService:
    """Tests for BillPaymentService."""

    @pytest.mark.asyncio
    async def test_create_cheque_payment(self, timber_client, recorder):
        payment = BillPaymentData(
            invoice="purchase-1",
            payment_method="cheque",
            cheque_no="123456789",
            amount=45.75,
            is_paid=False,
            file=[Attachment(content=b"img", filename="cheque.jpg")],
        )

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.bill_payment.create(payment)

        assert recorder.last["url"] == url("/customer/purchase/payment-record")
        assert recorder.last["files"] == [
            ("invoice", (None, "purchase-1")),
            ("payment_method", (None, "cheque")),
            ("cheque_no", (None, "123456789")),
            ("amount", (None, "45.75")),
            ("is_paid", (None, "false")),
            ("file", ("cheque.jpg", b"img", None)),
        ]

    def test_payment_method_validated(self):
        with pytest.raises(PydanticValidationError):
            BillPaymentData(payment_method="barter")

    @pytest.mark.asyncio
    async def test_list_and_delete(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.bill_payment.list(BillPaymentQueryParams(invoice="purchase-1"))
            await timber_client.bill_payment.delete("bp1")

        assert recorder.calls[0]["params"] == {"invoice": "purchase-1"}
        assert recorder.calls[1]["method"] == "DELETE"
        assert recorder.calls[1]["url"] == url("/customer/purchase/payment-record/bp1")


class TestRawExpenseService:
    """Tests for RawExpenseService."""

    @pytest.mark.asyncio
    async def test_upload_attachment(self, timber_client, recorder):
        receipt = Attachment(content=b"%PDF", filename="receipt.pdf", content_type="application/pdf")

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.raw_expense.create(receipt)
            await timber_client.raw_expense.create(CreateRawExpenseRequest(file=receipt))

        expected = [("file", ("receipt.pdf", b"%PDF", "application/pdf"))]
        assert recorder.calls[0]["method"] == "POST"
        assert recorder.calls[0]["url"] == url("/customer/expense/raw")
        assert recorder.calls[0]["files"] == expected
        assert recorder.calls[1]["files"] == expected

    @pytest.mark.asyncio
    async def test_list_and_delete(self, timber_client, recorder):
        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await timber_client.raw_expense.list()
            await timber_client.raw_expense.delete("r1")

        assert recorder.calls[1]["method"] == "DELETE"
        assert recorder.calls[1]["url"] == url("/customer/expense/raw/r1")


# =============================================================================
# Caching Across Services
# =============================================================================


class TestServiceCaching:
    """Writes through a service invalidate that service's cached reads."""

    @pytest.mark.asyncio
    async def test_write_invalidates_service_resource(self, mock_redis):
        http = TimberHTTPClient(base_url=BASE_URL, api_key="k", cache=mock_redis)
        client = TimberClient(http)
        mock_redis.scan_iter = MagicMock(return_value=AsyncIter(["cached-key"]))
        recorder = RequestRecorder()

        with patch.object(httpx.AsyncClient, "request", side_effect=recorder):
            await client.invoice.get("inv1")
            await client.invoice.delete("inv1", remarks="x")

        get_key = mock_redis.setex.call_args[0][0]
        assert get_key.startswith(http._cache_prefix("/customer/invoice") + ":")
        pattern = mock_redis.scan_iter.call_args.kwargs["match"]
        assert pattern == f"{http._cache_prefix('/customer/invoice')}:*"
        mock_redis.delete.assert_called_once_with("cached-key")

        await client.close()
