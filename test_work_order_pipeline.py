"""Tests for the work-order pipeline entry points."""

import pytest

from customer_profiles import build_registry
from settings import ExtractionSettings
from work_order_pipeline import WorkOrderPipeline

CLEAR_VISION_ORDER = (
    "Clear Vision Facility Management\n"
    "Work Order Number: 771234\n"
    "PO: 4500123\n"
    "SERVICE LOCATION\n"
    "#122 Sweetgreen Restaurant #122\n"
    "1471 N. Milwaukee Ave Wicker Park\n"
    "Chicago IL 60622\n"
    "PROBLEM REPORTED\n"
    "front door glass shattered, needs board up\n"
)

TRUESOURCE_ORDER = (
    "TrueSource Work Order\n"
    "Work Order: TS-55821\n"
    "Site Name: walgreens #4410\n"
    "Description of Work: replace cracked storefront glass\n"
    "PO #998877\n"
)

GENERIC_ORDER = (
    "WORK ORDER\n"
    "WO# 55123\n"
    "PO #44556\n"
    "Bill To\n"
    "Acme Property Management\n"
    "Ship To\n"
    "Little Caesars #01752\n"
    "123 Main St\n"
    "Springfield, IL 62701\n"
    "\n"
    "Problem Description: Front door glass cracked\n"
)


class FakeAcquirer:
    def __init__(self, text):
        self.text = text
        self.paths = []

    def acquire_text(self, file_path):
        self.paths.append(file_path)
        return self.text


@pytest.fixture
def pipeline():
    return WorkOrderPipeline(acquirer=FakeAcquirer(""), settings=ExtractionSettings())


def test_analyze_document_reports_supplier_and_po():
    acquirer = FakeAcquirer("purchase order\nvendor: oldcastle\nPO #12345\n")
    pipeline = WorkOrderPipeline(acquirer=acquirer, settings=ExtractionSettings())

    result = pipeline.analyze_document("order.pdf")

    assert acquirer.paths == ["order.pdf"]
    assert result.supplier == "Oldcastle"
    assert result.po_number == "12345"
    assert result.to_dict()["textLength"] == len(result.text)


def test_analyze_unreadable_document_is_empty_not_an_error():
    pipeline = WorkOrderPipeline(acquirer=FakeAcquirer(""), settings=ExtractionSettings())
    result = pipeline.analyze_document("blank.pdf")
    assert result.text == ""
    assert result.supplier is None
    assert result.po_number is None


@pytest.mark.parametrize("text", ["", "short", None])
def test_short_or_missing_text_yields_empty_record(pipeline, text):
    fields = pipeline.extract_work_order_fields(text)
    assert fields.customer is None
    assert fields.work_order_number is None
    assert fields.po_number is None
    assert fields.site_address is None
    assert fields.detected_customer_profile is False
    assert fields.raw_text == (text or "")


def test_non_string_text_raises_type_error(pipeline):
    with pytest.raises(TypeError):
        pipeline.extract_work_order_fields(12345)


def test_raw_text_is_clamped(pipeline):
    fields = pipeline.extract_work_order_fields("x" * 1500)
    assert len(fields.raw_text) == 1000


def test_profile_document(pipeline):
    fields = pipeline.extract_work_order_fields(CLEAR_VISION_ORDER)
    assert fields.detected_customer_profile is True
    assert fields.customer == "Clear Vision"
    assert fields.work_order_number == "771234"
    assert fields.po_number == "4500123"
    assert fields.site_location == "Sweetgreen Restaurant #122"
    assert fields.site_address == "1471 N. Milwaukee Ave Wicker Park, Chicago, IL 60622"
    assert fields.problem_description == "Front door glass shattered, needs board up"


def test_profile_display_name_beats_customer_label(pipeline):
    text = "KFM247 Work Order\nCustomer: Acme Corp\nWork Order #: 6610042\n"
    fields = pipeline.extract_work_order_fields(text)
    assert fields.customer == "KFM247"
    assert fields.work_order_number == "6610042"


def test_profile_without_po_numbers_ignores_po_labels(pipeline):
    fields = pipeline.extract_work_order_fields(TRUESOURCE_ORDER)
    assert fields.customer == "True Source"
    assert fields.work_order_number == "TS-55821"
    assert fields.po_number is None


def test_generic_document_uses_po_detector(pipeline):
    fields = pipeline.extract_work_order_fields(GENERIC_ORDER)
    assert fields.detected_customer_profile is False
    assert fields.customer == "Acme Property Management"
    assert fields.billing_address is None
    assert fields.work_order_number == "55123"
    assert fields.po_number == "44556"
    assert fields.site_address == "123 Main St, Springfield, IL 62701"


def test_billing_address_comes_from_matched_profile():
    registry = build_registry({"clear_vision": "PO Box 100, Chicago, IL 60601"})
    pipeline = WorkOrderPipeline(acquirer=FakeAcquirer(""), registry=registry, settings=ExtractionSettings())
    fields = pipeline.extract_work_order_fields(CLEAR_VISION_ORDER)
    assert fields.billing_address == "PO Box 100, Chicago, IL 60601"


def test_default_registry_supplies_billing_address(pipeline):
    fields = pipeline.extract_work_order_fields("Clear Vision Facility Management\nWork Order Number: 771234\n")
    assert fields.customer == "Clear Vision"
    assert fields.billing_address == "1525 Rancho Conejo Blvd. STE #207, Newbury Park, CA 91320"
    assert fields.work_order_number == "771234"
    assert fields.po_number is None


def test_fallback_po_equal_to_work_order_is_dropped(pipeline):
    fields = pipeline.extract_work_order_fields("service ticket: 88123\nref po 88123\n")
    assert fields.work_order_number == "88123"
    assert fields.po_number is None


def test_extract_and_score_returns_fields_with_their_score(pipeline):
    fields, validation = pipeline.extract_and_score(GENERIC_ORDER)
    assert fields == pipeline.extract_work_order_fields(GENERIC_ORDER)
    assert validation.confidence == 1.0
    assert validation.is_confident is True


def test_extract_and_score_on_empty_text(pipeline):
    fields, validation = pipeline.extract_and_score("")
    assert fields.customer is None
    assert validation.confidence == 0.0
    assert validation.has_identifier is False


def test_extraction_is_idempotent(pipeline):
    first = pipeline.extract_work_order_fields(GENERIC_ORDER)
    second = pipeline.extract_work_order_fields(GENERIC_ORDER)
    assert first == second


def test_to_dict_uses_camel_case_keys(pipeline):
    record = pipeline.extract_work_order_fields(CLEAR_VISION_ORDER).to_dict()
    assert set(record) == {
        "customer", "billingAddress", "workOrderNumber", "poNumber", "siteLocation",
        "siteAddress", "problemDescription", "detectedCustomerProfile", "rawText",
    }
    assert record["workOrderNumber"] == "771234"
