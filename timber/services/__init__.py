"""Entity services and the shared transport."""

from timber.services.base import BaseService, QueryParams, RequestModel
from timber.services.bill_payment import BillPaymentData, BillPaymentQueryParams, BillPaymentService
from timber.services.customer import CustomerData, CustomerService
from timber.services.employee import CreateEmployeeRequest, EmployeeService, UpdateEmployeeRequest
from timber.services.expense import CreateExpenseRequest, ExpenseService, UpdateExpenseRequest
from timber.services.expense_category import ExpenseCategoryRequest, ExpenseCategoryService
from timber.services.http import TimberHTTPClient
from timber.services.invoice import (
    BillerDetails,
    CustomerDetails,
    InvoiceData,
    InvoiceService,
    LineItem,
)
from timber.services.invoice_payment import (
    InvoicePaymentData,
    InvoicePaymentQueryParams,
    InvoicePaymentService,
)
from timber.services.payload import (
    ABSENT,
    Attachment,
    FlatObject,
    ObjectArray,
    PayloadEncoder,
    Scalar,
    to_multipart,
)
from timber.services.raw_expense import CreateRawExpenseRequest, RawExpenseService
from timber.services.salary import CreateSalaryRequest, SalaryService, UpdateSalaryRequest
from timber.services.tax_rate import TaxRateService
from timber.services.vendor_payment import VendorPaymentData, VendorPaymentService

__all__ = [
    "ABSENT",
    "Attachment",
    "BaseService",
    "BillPaymentData",
    "BillPaymentQueryParams",
    "BillPaymentService",
    "BillerDetails",
    "CreateEmployeeRequest",
    "CreateExpenseRequest",
    "CreateRawExpenseRequest",
    "CreateSalaryRequest",
    "CustomerData",
    "CustomerDetails",
    "CustomerService",
    "EmployeeService",
    "ExpenseCategoryRequest",
    "ExpenseCategoryService",
    "ExpenseService",
    "FlatObject",
    "InvoiceData",
    "InvoicePaymentData",
    "InvoicePaymentQueryParams",
    "InvoicePaymentService",
    "InvoiceService",
    "LineItem",
    "ObjectArray",
    "PayloadEncoder",
    "QueryParams",
    "RawExpenseService",
    "RequestModel",
    "SalaryService",
    "Scalar",
    "TaxRateService",
    "TimberHTTPClient",
    "UpdateEmployeeRequest",
    "UpdateExpenseRequest",
    "UpdateSalaryRequest",
    "VendorPaymentData",
    "VendorPaymentService",
    "to_multipart",
]
