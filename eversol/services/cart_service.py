# eversol/services/cart_service.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from eversol.core.errors import ErrorKind
from eversol.core.events import CART_UPDATED, SHOW_TOAST, EventBus
from eversol.core.storage import KeyValueStore, StorageError
from eversol.repositories.cart_repo import CartRepository
from eversol.repositories.coupon_repo import CouponRepository
from eversol.schemas.cart import Cart, CartItem, CartResult, Coupon, Discount, StoredCart
from eversol.schemas.common import Notification, NotificationType
from eversol.schemas.product import CartProduct

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not available on server"

DEFAULT_TAX_RATE = 0.05


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive coupon dates are treated as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CartService:
    """
    Business logic for the shopper's cart.

    Responsibilities:
      - one line per variant; adding an existing variant merges quantities
      - quantity >= 1 and <= the line's stock snapshot
      - price / coop_price / stock snapshotted at add time
      - totals derived on every read, never stored:
          subtotal = sum(quantity * effective price)
          tax      = (subtotal - discount) * tax_rate
          total    = max(0, subtotal - discount + tax)
      - coupon discounts evaluated here against the current subtotal
      - persist the whole aggregate, then emit "cart-updated"
    """

    def __init__(
        self,
        repo: CartRepository,
        coupon_repo: CouponRepository,
        store: KeyValueStore,
        bus: EventBus,
        tax_rate: float = DEFAULT_TAX_RATE,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repo = repo
        self.coupon_repo = coupon_repo
        self.store = store
        self.bus = bus
        self.tax_rate = tax_rate
        self.clock = clock

    # ---- internal helpers ----

    def _notify(self, message: str, type_: NotificationType) -> None:
        self.bus.emit(SHOW_TOAST, Notification(message=message, type=type_))

    def _fail(self, error: ErrorKind | None, message: str) -> CartResult:
        self._notify(message, "error")
        return CartResult(success=False, error=error, message=message)

    def _persist(self, cart: StoredCart) -> CartResult:
        try:
            self.repo.save(self.store, cart)
        except StorageError as e:
            logger.error("Error saving cart to storage: %s", e)
            return self._fail(None, "Failed to update cart")
        self.bus.emit(CART_UPDATED)
        return CartResult(success=True, cart=self._summarize(cart))

    @staticmethod
    def _subtotal(cart: StoredCart) -> float:
        total = 0.0
        for item in cart.items:
            unit = item.coop_price if cart.is_coop_member else item.price
            total += item.quantity * unit
        return round(total, 2)

    def _coupon_amount(self, coupon: Coupon, subtotal: float) -> tuple[float, str | None]:
        """
        Discount a coupon grants on `subtotal`, or (0, reason) if it does
        not apply.

        Order: active -> validity window -> usage limit -> min purchase
               -> raw amount -> max_discount cap -> capped at subtotal
        """
        now = self.clock()

        if not coupon.is_active:
            return 0.0, "This coupon is no longer active"
        if coupon.valid_from and now < _as_utc(coupon.valid_from):
            return 0.0, "This coupon is not valid yet"
        if coupon.valid_until and now > _as_utc(coupon.valid_until):
            return 0.0, "This coupon has expired"
        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            return 0.0, "This coupon has reached its usage limit"
        if coupon.min_purchase and subtotal < coupon.min_purchase:
            return 0.0, f"Minimum purchase of ₹{coupon.min_purchase:.2f} required"

        if coupon.discount_type == "percentage":
            amount = subtotal * coupon.discount_value / 100
        else:
            amount = coupon.discount_value

        if coupon.max_discount is not None:
            amount = min(amount, coupon.max_discount)

        return round(min(amount, subtotal), 2), None

    def _summarize(self, cart: StoredCart) -> Cart:
        subtotal = self._subtotal(cart)

        discount = Discount()
        if cart.discount.code:
            coupon = self.coupon_repo.get_by_code(cart.discount.code)
            amount = self._coupon_amount(coupon, subtotal)[0] if coupon else 0.0
            discount = Discount(code=cart.discount.code, amount=amount)

        taxable = max(subtotal - discount.amount, 0.0)
        tax = round(taxable * self.tax_rate, 2)
        total = max(round(subtotal - discount.amount + tax, 2), 0.0)

        return Cart(
            items=cart.items,
            is_coop_member=cart.is_coop_member,
            discount=discount,
            subtotal=subtotal,
            tax=tax,
            total=total,
            item_count=sum(item.quantity for item in cart.items),
        )

    # ---- reads ----

    def get_state(self) -> Cart:
        """Current cart with freshly computed totals."""
        return self._summarize(self.repo.get(self.store))

    # ---- mutations ----

    def add_item(self, product: CartProduct, variant_id: str, quantity: int = 1) -> CartResult:
        """
        Add `quantity` units of a product variant.

        Rules:
          - quantity >= 1
          - existing line quantity + quantity <= variant.stock
          - merges into the existing line for the same variant
        """
        if not self.store.available:
            return CartResult(success=False, error="StorageUnavailable", message=NOT_AVAILABLE)

        if quantity < 1:
            return self._fail("Validation", "Quantity must be at least 1")

        variant = next((v for v in product.variants if v.id == variant_id), None)
        if variant is None:
            return self._fail("NotFound", "Selected variant is not available")

        cart = self.repo.get(self.store)
        existing = next((i for i in cart.items if i.variant_id == variant_id), None)
        new_qty = quantity + (existing.quantity if existing else 0)

        if new_qty > variant.stock:
            if existing:
                message = (
                    f"Only {variant.stock} in stock; "
                    f"you already have {existing.quantity} in your cart"
                )
            else:
                message = f"Only {variant.stock} in stock"
            return self._fail("CapacityExceeded", message)

        if existing:
            existing.quantity = new_qty
            existing.price = variant.price
            existing.coop_price = variant.coop_price
            existing.stock = variant.stock
        else:
            cart.items.append(
                CartItem(
                    id=f"item_{uuid.uuid4().hex}",
                    product_id=product.id,
                    product_name=product.name,
                    product_image=product.image_url,
                    variant_id=variant.id,
                    variant_name=variant.name,
                    price=variant.price,
                    coop_price=variant.coop_price,
                    quantity=quantity,
                    stock=variant.stock,
                )
            )

        result = self._persist(cart)
        if result.success:
            self._notify(f"{product.name} added to cart", "success")
        return result

    def update_quantity(self, item_id: str, new_quantity: int) -> CartResult:
        """
        Set a line's quantity. Zero or less removes the line; callers
        confirm that with the shopper before calling.
        """
        if new_quantity <= 0:
            return self.remove_item(item_id)

        if not self.store.available:
            return CartResult(success=False, error="StorageUnavailable", message=NOT_AVAILABLE)

        cart = self.repo.get(self.store)
        item = next((i for i in cart.items if i.id == item_id), None)
        if item is None:
            return self._fail("NotFound", "Item not in cart")

        if new_quantity > item.stock:
            return self._fail("CapacityExceeded", f"Only {item.stock} in stock")

        item.quantity = new_quantity
        return self._persist(cart)

    def remove_item(self, item_id: str) -> CartResult:
        """Delete a line. Removing an absent line is a no-op."""
        if not self.store.available:
            return CartResult(success=False, error="StorageUnavailable", message=NOT_AVAILABLE)

        cart = self.repo.get(self.store)
        remaining = [i for i in cart.items if i.id != item_id]
        if len(remaining) == len(cart.items):
            return CartResult(success=True, cart=self._summarize(cart))

        cart.items = remaining
        result = self._persist(cart)
        if result.success:
            self._notify("Item removed from cart", "info")
        return result

    def apply_discount(self, code: str) -> CartResult:
        """
        Attach a coupon to the cart if it applies to the current subtotal.
        """
        if not self.store.available:
            return CartResult(success=False, error="StorageUnavailable", message=NOT_AVAILABLE)

        if not code or not code.strip():
            return self._fail("Validation", "Please enter a coupon code")

        coupon = self.coupon_repo.get_by_code(code)
        if coupon is None:
            return self._fail("NotFound", "Invalid coupon code")

        cart = self.repo.get(self.store)
        amount, reason = self._coupon_amount(coupon, self._subtotal(cart))
        if reason:
            return self._fail("Validation", reason)

        cart.discount = Discount(code=coupon.code, amount=amount)
        result = self._persist(cart)
        if result.success:
            self._notify(f"Coupon {coupon.code} applied", "success")
        return result

    def clear_discount(self) -> CartResult:
        if not self.store.available:
            return CartResult(success=False, error="StorageUnavailable", message=NOT_AVAILABLE)

        cart = self.repo.get(self.store)
        cart.discount = Discount()
        return self._persist(cart)

    def set_coop_membership(self, is_member: bool) -> CartResult:
        if not self.store.available:
            return CartResult(success=False, error="StorageUnavailable", message=NOT_AVAILABLE)

        cart = self.repo.get(self.store)
        cart.is_coop_member = is_member
        return self._persist(cart)

    def clear(self) -> CartResult:
        """
        Empty the cart (items and discount); the membership flag stays.
        """
        if not self.store.available:
            return CartResult(success=False, error="StorageUnavailable", message=NOT_AVAILABLE)

        cart = self.repo.get(self.store)
        return self._persist(StoredCart(is_coop_member=cart.is_coop_member))

    def on_change(self, handler: Callable[[None], None]) -> Callable[[], None]:
        return self.bus.subscribe(CART_UPDATED, handler)

    @staticmethod
    def get_update_event_name() -> str:
        return CART_UPDATED
