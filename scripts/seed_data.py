from __future__ import annotations

import argparse
from datetime import datetime, timedelta
from uuid import uuid4

from packages.shared.schemas.checkout_v1 import PlaceOrderRequestV1, ShippingAddressV1
from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import AuthSession, Order, User
from services.api.app.services import orders
from services.api.app.settings import StoreSettings


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a demo storefront user and session")
    parser.add_argument("--user-id", default="u-1")
    parser.add_argument("--display-name", default="Demo Customer")
    parser.add_argument("--email", default="demo@example.com")
    parser.add_argument("--token", default=None, help="Access token to create (random if omitted)")
    parser.add_argument("--token-ttl-hours", type=int, default=24)
    parser.add_argument(
        "--with-order",
        action="store_true",
        help="Also place a prior order so checkout prefill has something to copy",
    )
    args = parser.parse_args()

    init_db()

    db = db_session()
    try:
        if db.get(User, args.user_id) is None:
            db.add(User(id=args.user_id, email=args.email, display_name=args.display_name))

        token = args.token or uuid4().hex
        if db.get(AuthSession, token) is None:
            db.add(
                AuthSession(
                    access_token=token,
                    user_id=args.user_id,
                    expires_at=datetime.utcnow() + timedelta(hours=args.token_ttl_hours),
                )
            )
        db.commit()

        has_order = db.query(Order).filter(Order.user_id == args.user_id).limit(1).count() > 0
        if args.with_order and not has_order:
            result = orders.place_order(
                db,
                payload=PlaceOrderRequestV1(
                    userId=args.user_id,
                    quantity=1,
                    shipping=ShippingAddressV1(
                        name=args.display_name,
                        phone="555-0100",
                        address1="100 Congress Ave",
                        city="Austin",
                        state="TX",
                        postal="78701",
                    ),
                    source="seed",
                ),
                user_id=args.user_id,
                idempotency_key=f"seed-{args.user_id}",
                settings=StoreSettings.from_env(),
            )
            print(f"Seeded order={result.confirmation.order.order_number}")

        print(f"Seeded user={args.user_id} token={token}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
