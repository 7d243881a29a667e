from datetime import datetime, timedelta, timezone

from eversol.repositories.coupon_repo import CouponRepository
from eversol.schemas.cart import Coupon

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = NOW):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


def make_coupons() -> CouponRepository:
    return CouponRepository(
        [
            Coupon(code="save10", discount_type="percentage", discount_value=10),
            Coupon(
                code="FLAT50",
                discount_type="fixed",
                discount_value=50,
                min_purchase=500,
            ),
            Coupon(
                code="BIG20",
                discount_type="percentage",
                discount_value=20,
                max_discount=30,
            ),
            Coupon(
                code="OLD5",
                discount_type="percentage",
                discount_value=5,
                valid_until=NOW - timedelta(days=1),
            ),
            Coupon(
                code="USEDUP",
                discount_type="fixed",
                discount_value=10,
                usage_limit=3,
                used_count=3,
            ),
            Coupon(
                code="PAUSED",
                discount_type="fixed",
                discount_value=10,
                is_active=False,
            ),
        ]
    )
