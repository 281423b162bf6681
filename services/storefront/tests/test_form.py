from __future__ import annotations

import pytest
from packages.shared.schemas.checkout_v1 import ShippingAddressV1
from services.storefront.app.checkout.form import (
    ShippingForm,
    coerce_quantity,
    validate_form,
)
from services.storefront.app.checkout.result import Err, ErrorKind, Ok


def _filled(**overrides: str) -> ShippingForm:
    form = ShippingForm(
        name="Ada Lovelace",
        phone="555-123-4567",
        address1="1 Main St",
        city="Austin",
        state="TX",
        postal="78701",
    )
    for key, value in overrides.items():
        form.update(key, value)
    return form


def test_complete_form_is_valid() -> None:
    result = validate_form(_filled())
    assert isinstance(result, Ok)


def test_address2_is_optional() -> None:
    assert isinstance(validate_form(_filled(address2="")), Ok)


def test_empty_form_lists_every_required_field() -> None:
    result = validate_form(ShippingForm())

    assert isinstance(result, Err)
    assert result.kind is ErrorKind.VALIDATION
    assert result.message == "Please fill in: name, phone, address1, city, state, postal"


@pytest.mark.parametrize("field", ["name", "phone", "address1", "city", "state", "postal"])
def test_single_missing_field_is_named(field: str) -> None:
    result = validate_form(_filled(**{field: ""}))

    assert isinstance(result, Err)
    assert result.message == f"Please fill in: {field}"


def test_whitespace_counts_as_missing() -> None:
    result = validate_form(_filled(city="   ", postal="\t"))

    assert isinstance(result, Err)
    assert result.message == "Please fill in: city, postal"


@pytest.mark.parametrize("country", ["CA", "MX", "USA", ""])
def test_non_us_country_is_rejected(country: str) -> None:
    result = validate_form(_filled(country=country))

    assert isinstance(result, Err)
    assert result.message == "Only US shipping is supported."


@pytest.mark.parametrize("country", ["US", "us", " Us "])
def test_us_country_any_case(country: str) -> None:
    assert isinstance(validate_form(_filled(country=country)), Ok)


def test_missing_fields_reported_before_country() -> None:
    result = validate_form(_filled(name="", country="CA"))

    assert isinstance(result, Err)
    assert result.message == "Please fill in: name"


def test_update_rejects_unknown_field() -> None:
    with pytest.raises(KeyError):
        ShippingForm().update("email", "a@example.com")


def test_from_address_defaults() -> None:
    address = ShippingAddressV1(
        name="Ada",
        phone="1",
        address1="x",
        city="c",
        state="TX",
        postal="78701",
    )
    form = ShippingForm.from_address(address)

    assert form.address2 == ""
    assert form.country == "US"
    assert form.to_payload()["name"] == "Ada"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (1, 1),
        (3, 3),
        ("4", 4),
        (" 7 ", 7),
        ("2.9", 2),
        (10, 10),
        (11, 10),
        (999, 10),
        (10**400, 10),
        (-(10**400), 1),
        ("1e400", 1),
        (0, 1),
        (-5, 1),
        ("", 1),
        ("abc", 1),
        (None, 1),
        (float("nan"), 1),
        (float("inf"), 1),
        (True, 1),
    ],
)
def test_coerce_quantity(raw: object, expected: int) -> None:
    assert coerce_quantity(raw) == expected
