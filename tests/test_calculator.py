"""Tests for GST line and invoice calculations."""

import itertools

import pytest

from gst_invoice.calculator import compute_invoice, compute_line, compute_totals
from gst_invoice.models import InvoiceTotals, LineItem, TaxRegime


def _item(qty, price, discount=0, regime="intra", name="Widget"):
    return LineItem(name=name, quantity=qty, unit_price=price, discount_percent=discount, tax_regime=regime)


def test_intra_state_line_splits_nine_percent_into_cgst_and_sgst():
    line = compute_line(_item(2, 100))

    assert line.taxable_amount == pytest.approx(200.0)
    assert line.tax_amount == pytest.approx(18.0)
    assert line.line_total == pytest.approx(218.0)
    assert line.cgst == line.sgst == line.tax_amount
    assert line.igst == 0


def test_inter_state_line_is_all_igst():
    line = compute_line(_item(1, 99.50, 10, "inter"))

    assert line.taxable_amount == pytest.approx(89.55)
    assert line.tax_amount == pytest.approx(16.119)
    assert line.line_total == pytest.approx(105.669)
    assert line.igst == line.tax_amount
    assert line.cgst == line.sgst == 0


def test_untaxed_line_total_equals_taxable():
    line = compute_line(_item(1, 50, 0, "none"))

    assert line.tax_amount == 0
    assert line.line_total == line.taxable_amount == pytest.approx(50.0)


@pytest.mark.parametrize("qty, price, discount", [("abc", 100, 0), (2, "", 0), (2, 100, None), (float("nan"), 1, 0)])
def test_unparseable_numbers_count_as_zero(qty, price, discount):
    line = compute_line(_item(qty, price, discount))

    if discount is None:
        assert line.taxable_amount == pytest.approx(200.0)
    else:
        assert line.taxable_amount == 0
        assert line.line_total == 0


def test_string_fields_from_the_form_are_parsed():
    line = compute_line(_item(" 3 ", "12.50", "20"))

    assert line.taxable_amount == pytest.approx(30.0)


def test_discount_above_hundred_is_not_clamped():
    line = compute_line(_item(1, 100, 150, "none"))

    assert line.taxable_amount == pytest.approx(-50.0)


def test_missing_regime_defaults_to_intra_and_unknown_is_untaxed():
    assert compute_line(_item(1, 100, regime=None)).cgst == pytest.approx(9.0)
    assert compute_line(_item(1, 100, regime="vat")).tax_amount == 0


def test_compute_line_does_not_mutate_item():
    item = _item("2", "100", "5", TaxRegime.INTER)
    before = item.to_dict()

    compute_line(item)

    assert item.to_dict() == before


def test_empty_invoice_is_all_zero():
    assert compute_totals([]) == InvoiceTotals()


def test_single_intra_invoice_totals():
    totals = compute_totals([_item(2, 100)])

    assert totals.subtotal == pytest.approx(200.0)
    assert totals.total_cgst == pytest.approx(18.0)
    assert totals.total_sgst == pytest.approx(18.0)
    assert totals.total_igst == 0
    assert totals.pre_round_total == pytest.approx(236.0)
    assert totals.rounding == pytest.approx(0.0)
    assert totals.grand_total == 236.0


def test_grand_total_rounds_to_whole_currency_unit():
    totals = compute_totals([_item(1, 99.50, 10, "inter")])

    assert totals.grand_total == 106.0
    assert totals.rounding == pytest.approx(0.331)
    assert totals.grand_total == round(totals.subtotal + totals.total_cgst + totals.total_sgst + totals.total_igst)


def test_rounding_can_be_negative():
    totals = compute_totals([_item(1, 10.2, 0, "none")])

    assert totals.grand_total == 10.0
    assert totals.rounding == pytest.approx(-0.2)


def test_mixed_regimes_attribute_tax_to_the_right_components():
    intra = _item(1, 1000, 0, "intra")
    inter = _item(2, 250, 10, "inter")

    totals = compute_totals([intra, inter])

    assert totals.total_cgst == pytest.approx(90.0)
    assert totals.total_sgst == pytest.approx(90.0)
    assert totals.total_igst == pytest.approx(450.0 * 0.18)
    assert totals.subtotal == pytest.approx(1450.0)


def test_totals_do_not_depend_on_item_order():
    items = [_item(3, 19.99, 5, "intra"), _item(1, 250, 0, "inter"), _item(7, 3.333, 12.5, "none")]
    expected = compute_totals(items)

    for perm in itertools.permutations(items):
        totals = compute_totals(perm)
        assert totals.subtotal == pytest.approx(expected.subtotal)
        assert totals.total_tax == pytest.approx(expected.total_tax)
        assert totals.grand_total == expected.grand_total


def test_compute_invoice_returns_lines_in_input_order():
    items = [_item(1, 10, regime="none"), _item(1, 20, regime="none")]

    lines, totals = compute_invoice(items)

    assert [line.taxable_amount for line in lines] == [10.0, 20.0]
    assert totals.grand_total == 30.0


def test_grand_total_is_integer_valued():
    totals = compute_totals([_item(3, 33.37, 2.5, "intra"), _item(1, 0.49, 0, "inter")])

    assert totals.grand_total == int(totals.grand_total)
    assert abs(totals.rounding) <= 0.5


@pytest.mark.parametrize("qty, price", [("inf", "0"), ("inf", "1"), ("-inf", "5"), ("1e400", "2")])
def test_non_finite_input_counts_as_zero(qty, price):
    totals = compute_totals([_item(qty, price)])

    assert totals == InvoiceTotals()


def test_overflowing_product_does_not_raise():
    totals = compute_totals([_item("1e200", "1e200")])

    assert totals.subtotal == float("inf")
    assert totals.grand_total == float("inf")
    assert totals.rounding == 0.0


def test_opposite_overflows_leave_totals_unrounded():
    totals = compute_totals([_item("1e200", "1e200", 0, "none"), _item("1e200", "1e200", 300, "none")])

    assert totals.rounding == 0.0
    assert totals.grand_total != totals.grand_total
