# eversol/repositories/coupon_repo.py
from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from eversol.schemas.cart import Coupon

_coupon_list = TypeAdapter(list[Coupon])


class CouponRepository:
    """
    In-process coupon catalog consulted by the cart.

    Coupons are managed by the back-office; the storefront only needs
    read access by code. Codes are matched case-insensitively.
    """

    def __init__(self, coupons: list[Coupon] | None = None):
        self._by_code: dict[str, Coupon] = {}
        for coupon in coupons or []:
            self.add(coupon)

    def get_by_code(self, code: str) -> Coupon | None:
        return self._by_code.get(code.strip().upper())

    def list(self) -> list[Coupon]:
        return list(self._by_code.values())

    def add(self, coupon: Coupon) -> Coupon:
        self._by_code[coupon.code] = coupon
        return coupon

    def delete(self, code: str) -> None:
        self._by_code.pop(code.strip().upper(), None)

    @classmethod
    def from_file(cls, path: str | Path) -> "CouponRepository":
        """
        Load coupons from a JSON file holding a list of coupon records.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls(_coupon_list.validate_python(json.loads(raw)))
