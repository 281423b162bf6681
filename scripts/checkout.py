"""Place an order against a running order service from the command line.

Example:
    STOREFRONT_FUNCTIONS_URL=http://localhost:8000 uv run python -m scripts.checkout \
        --name "Ada Lovelace" --phone 555-0100 --address1 "1 Main St" \
        --city Austin --state TX --postal 78701 --quantity 2
"""

from __future__ import annotations

import argparse
import asyncio

from packages.shared.logging_config import setup_logging
from services.storefront.app.checkout.client import OrderServiceClient
from services.storefront.app.checkout.config import CheckoutSettings
from services.storefront.app.checkout.controller import CheckoutController, IdempotencyKeyPolicy
from services.storefront.app.checkout.result import Ok
from services.storefront.app.checkout.session import GuestSessionProvider, StaticSessionProvider
from services.storefront.app.checkout.views import ConfirmationView, SummaryView


def _print_summary(view: SummaryView) -> None:
    print(f"{view.product_name} ({view.product_description}) x{view.quantity}")
    print(f"  Subtotal  {view.subtotal}")
    print(f"  Shipping  {view.shipping}")
    print(f"  {view.tax_label}  {view.tax}")
    print(f"  Total     {view.total}")


def _print_confirmation(view: ConfirmationView) -> None:
    print(f"Order #{view.order_number} ({view.status_label})")
    print(f"  Subtotal  {view.subtotal}")
    print(f"  Shipping  {view.shipping}")
    print(f"  Tax       {view.tax}")
    print(f"  Total     {view.total}")


async def _run(args: argparse.Namespace) -> int:
    settings = CheckoutSettings.from_env()
    client = OrderServiceClient.from_settings(settings)
    sessions = (
        StaticSessionProvider(access_token=args.token, user_id=args.user_id)
        if args.token
        else GuestSessionProvider()
    )
    controller = CheckoutController(
        client=client,
        sessions=sessions,
        settings=settings,
        key_policy=IdempotencyKeyPolicy(args.key_policy),
    )

    try:
        if args.prefill:
            await controller.load_prefill()

        for field in ("name", "phone", "address1", "address2", "city", "state", "postal", "country"):
            value = getattr(args, field)
            if value is not None:
                controller.update_shipping(field, value)
        controller.set_quantity(args.quantity)
        controller.set_notes(args.notes)

        summary = controller.view()
        if isinstance(summary, SummaryView):
            _print_summary(summary)

        result = None
        for _ in range(args.attempts):
            result = await controller.place_order()
            if isinstance(result, Ok):
                break
            print(f"Order failed: {result.message}")

        view = controller.view()
        if isinstance(view, ConfirmationView):
            _print_confirmation(view)
            return 0
        return 1
    finally:
        await client.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Place a storefront order")
    parser.add_argument("--name")
    parser.add_argument("--phone")
    parser.add_argument("--address1")
    parser.add_argument("--address2")
    parser.add_argument("--city")
    parser.add_argument("--state")
    parser.add_argument("--postal")
    parser.add_argument("--country")
    parser.add_argument("--quantity", default="1")
    parser.add_argument("--notes", default="")
    parser.add_argument("--token", help="Bearer token of a signed-in user")
    parser.add_argument("--user-id", help="User id that owns --token")
    parser.add_argument("--prefill", action="store_true", help="Copy shipping from the last order")
    parser.add_argument(
        "--attempts",
        type=int,
        default=1,
        help="Manual retries to make after a failed submission",
    )
    parser.add_argument(
        "--key-policy",
        choices=[p.value for p in IdempotencyKeyPolicy],
        default=IdempotencyKeyPolicy.PER_SUBMISSION.value,
    )
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()

    setup_logging(args.log_level)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
