from datetime import date
from decimal import Decimal

import pytest

from swedbank_ynab.models import Direction, Transaction
from swedbank_ynab.payees import (
    BANK_PAYEE,
    PayeeMatch,
    recognize_card_purchase,
    recognize_merchant_of_record,
    resolve,
    strip_leading,
    strip_processor,
)
from tests.helpers.statements import fee_row, make_row


def _txn(**overrides) -> Transaction:
    return Transaction(principal=make_row(**overrides))


def test_documented_card_purchase_uses_embedded_purchase_date():
    txn = _txn(
        counterparty="A STORE",
        description="PIRKUMS 1234 01.09.2019 1 EUR (10) A STORE",
        date=date(2019, 9, 3),
    )

    resolved = resolve(txn)

    assert resolved.payee == "A STORE"
    assert resolved.memo == ""
    assert resolved.date == date(2019, 9, 1)


def test_documented_transfer_keeps_counterparty_and_description():
    txn = _txn(
        counterparty="JOHN DOE",
        description="Taco Money",
        direction=Direction.CREDIT,
        payment_method="INB",
        date=date(2019, 9, 4),
    )

    resolved = resolve(txn)

    assert resolved.payee == "JOHN DOE"
    assert resolved.memo == "Taco Money"
    assert resolved.date == date(2019, 9, 4)


def test_card_purchase_memo_keeps_text_after_payee():
    txn = _txn(
        counterparty="RIMI",
        description="PIRKUMS 1234 07.07.2019 1.00 EUR (975255) RIMI HYPERMARKET AKROPOLE",
    )

    resolved = resolve(txn)

    assert resolved.payee == "RIMI"
    assert resolved.memo == "HYPERMARKET AKROPOLE"
    assert resolved.date == date(2019, 7, 7)


def test_card_purchase_through_processor_without_counterparty():
    txn = _txn(description="PIRKUMS 1234 05.09.2019 12.99 USD (77) PAYPAL *STEAM")

    resolved = resolve(txn)

    assert resolved.payee == "STEAM"
    assert resolved.memo == ""


def test_card_purchase_with_processor_counterparty():
    txn = _txn(
        counterparty="SQ *BLUE BOTTLE",
        description="PIRKUMS 1234 05.09.2019 4.50 EUR (12) SQ *BLUE BOTTLE COFFEE",
    )

    resolved = resolve(txn)

    assert resolved.payee == "BLUE BOTTLE"
    assert resolved.memo == "COFFEE"


def test_card_purchase_with_impossible_embedded_date_falls_back_to_settlement():
    match = recognize_card_purchase(
        _txn(description="PIRKUMS 1234 31.02.2019 1 EUR (10) A STORE", counterparty="A STORE")
    )

    assert match == PayeeMatch(payee="A STORE", memo="", date=None)


def test_processor_marker_in_description_names_the_merchant():
    txn = _txn(
        counterparty="PayPal Europe S.a.r.l. et Cie S.C.A",
        description="1040012345678 PAYPAL *SPOTIFY 12,99 EUR",
        payment_method="MK",
    )

    resolved = resolve(txn)

    assert resolved.payee == "SPOTIFY"
    assert resolved.memo == ""


def test_processor_marker_residual_text_becomes_memo():
    match = recognize_merchant_of_record(
        _txn(description="PAYPAL *STEAM GAMES, order 55 from 02.09.2019")
    )

    assert match == PayeeMatch(payee="STEAM GAMES", memo="order 55 from")


def test_merchant_of_record_counterparty_without_marker():
    match = recognize_merchant_of_record(
        _txn(counterparty="Paysera LT", description="Vilnius Coffee, order 12345678")
    )

    assert match == PayeeMatch(payee="Vilnius Coffee", memo="order")


def test_plain_counterparty_is_not_a_merchant_of_record():
    assert recognize_merchant_of_record(_txn(counterparty="JOHN DOE", description="rent")) is None


def test_fallback_uses_description_when_counterparty_empty():
    resolved = resolve(_txn(description="Procentu   izmaksa ", payment_method="PRC"))

    assert resolved.payee == "Procentu izmaksa"
    assert resolved.memo == ""


def test_fallback_to_bank_name_when_nothing_to_use():
    assert resolve(_txn()).payee == BANK_PAYEE


def test_standalone_fee_is_paid_to_the_bank():
    resolved = resolve(Transaction(principal=fee_row()))

    assert resolved.payee == BANK_PAYEE
    assert resolved.memo == "Komisijas maksa par maksājumu"


def test_merged_fees_are_noted_in_memo():
    principal = make_row(counterparty="SIA LATVENERGO", description="Rēķins 123")
    txn = Transaction(principal=principal, fees=(fee_row(amount=Decimal("0.25")),))

    resolved = resolve(txn)

    assert resolved.payee == "SIA LATVENERGO"
    assert resolved.memo == "Rēķins 123; Fee 0,25 EUR"


def test_memo_drops_repeated_payee_prefix():
    resolved = resolve(_txn(counterparty="JOHN DOE", description="JOHN DOE   rent   September"))

    assert resolved.memo == "rent September"


def test_custom_recognizers_first_match_wins():
    calls: list[str] = []

    def never(txn):
        calls.append("never")
        return None

    def always(txn):
        calls.append("always")
        return PayeeMatch(payee="Custom", memo="m")

    def unreachable(txn):  # pragma: no cover - must not be called
        raise AssertionError("later recognizers are not consulted")

    resolved = resolve(_txn(counterparty="X"), recognizers=[never, always, unreachable])

    assert resolved.payee == "Custom"
    assert resolved.memo == "m"
    assert calls == ["never", "always"]


def test_resolution_is_deterministic():
    txn = _txn(description="1040012345678 PAYPAL *SPOTIFY 12,99 EUR", counterparty="PayPal")
    assert resolve(txn) == resolve(txn)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("PAYPAL *STEAM", "STEAM"),
        ("paypal*steam", "steam"),
        ("SUMUP  *  Cafe Nr 1", "Cafe Nr 1"),
        ("SUMUP *Cafe", "Cafe"),
        ("ZETTLE_*Bakery", "Bakery"),
        ("A STORE", "A STORE"),
        ("", ""),
    ],
)
def test_strip_processor(raw: str, expected: str):
    assert strip_processor(raw) == expected


def test_strip_leading_requires_word_boundary():
    assert strip_leading("RIMI HYPER", "RIMI") == "HYPER"
    assert strip_leading("RIMIX", "RIMI") == "RIMIX"
    assert strip_leading("rimi", "RIMI") == ""
    assert strip_leading("text", "") == "text"


def test_bank_fee_recognizer_runs_before_card_purchase():
    fee = fee_row(description="PIRKUMS 1234 01.09.2019 1 EUR (10) ATM FEE")

    resolved = resolve(Transaction(principal=fee))

    assert resolved.payee == BANK_PAYEE
    assert resolved.date == fee.date


def test_loan_parts_are_noted_before_fees():
    principal = make_row(description="Kredīta atmaksa", payment_method="AZA")
    txn = Transaction(
        principal=principal,
        parts=(
            make_row(description="Procenti", amount=Decimal("12.34"), payment_method="AZA"),
            make_row(description="", amount=Decimal("1.00"), payment_method="AZA"),
        ),
        fees=(fee_row(amount=Decimal("0.25")),),
    )

    resolved = resolve(txn)

    assert resolved.payee == "Kredīta atmaksa"
    assert resolved.memo == "Procenti 12,34 EUR; Part 1,00 EUR; Fee 0,25 EUR"
