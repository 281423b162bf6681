from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields

from packages.shared.schemas.checkout_v1 import (
    MAX_QUANTITY,
    MIN_QUANTITY,
    US_ONLY_MESSAGE,
    ShippingAddressV1,
)
from services.storefront.app.checkout.result import Err, ErrorKind, Ok, Result

REQUIRED_FIELDS = ("name", "phone", "address1", "city", "state", "postal")


@dataclass(slots=True)
class ShippingForm:
    name: str = ""
    phone: str = ""
    address1: str = ""
    address2: str = ""
    city: str = ""
    state: str = ""
    postal: str = ""
    country: str = "US"

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_address(cls, address: ShippingAddressV1) -> "ShippingForm":
        return cls(
            name=address.name or "",
            phone=address.phone or "",
            address1=address.address1 or "",
            address2=address.address2 or "",
            city=address.city or "",
            state=address.state or "",
            postal=address.postal or "",
            country=address.country or "US",
        )

    def update(self, field: str, value: str) -> None:
        if field not in self.field_names():
            raise KeyError(f"Unknown shipping field: {field}")
        setattr(self, field, "" if value is None else str(value))

    def to_payload(self) -> dict[str, str]:
        return asdict(self)


def coerce_quantity(value: object) -> int:
    """Clamp user input to [1, 10]; anything non-numeric becomes 1."""

    if isinstance(value, bool):
        return MIN_QUANTITY

    if isinstance(value, int):
        quantity = value
    else:
        try:
            number = float(str(value).strip()) if isinstance(value, str) else float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            return MIN_QUANTITY

        if not math.isfinite(number):
            return MIN_QUANTITY

        quantity = int(number)

    if quantity < MIN_QUANTITY:
        return MIN_QUANTITY
    return min(quantity, MAX_QUANTITY)


def missing_fields(form: ShippingForm) -> list[str]:
    return [name for name in REQUIRED_FIELDS if not getattr(form, name).strip()]


def validate_form(form: ShippingForm) -> Result[ShippingForm]:
    missing = missing_fields(form)
    if missing:
        return Err(ErrorKind.VALIDATION, f"Please fill in: {', '.join(missing)}")

    if form.country.strip().upper() != "US":
        return Err(ErrorKind.VALIDATION, US_ONLY_MESSAGE)

    return Ok(form)
