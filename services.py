"""
Domain operations for VoidShop

Every function takes an open SQLAlchemy session and returns API schema
objects. Failures are raised as ``errors.ShopError`` subclasses; the HTTP
layer turns them into responses.
"""
import json
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional, Set, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import Select

from database import transaction
from errors import BadRequest, Conflict, InsufficientStock, NotFound, Unauthorized
from models import Address, CartItem, Coupon, Favorite, Order, OrderItem, PaymentMethod, Product, User
from schemas import (
    AddressIn,
    AddressOut,
    AddressUpdate,
    CartItemOut,
    CartLine,
    CouponIn,
    CouponOut,
    CouponQuote,
    DiscountType,
    FavoriteProduct,
    OrderIn,
    OrderItemOut,
    OrderOut,
    OrderStats,
    OrderStatus,
    OrderSummary,
    PaymentMethodIn,
    PaymentMethodOut,
    ProductIn,
    ProductOut,
    ProfileOut,
    ProfileUpdate,
    Purchaser,
    UserOut,
)
from security import CardCipher, Identity, Role, create_token, hash_password, verify_password
from settings import Settings

log = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value if value is not None else 0)


def money(value) -> Decimal:
    """Round to cents, halves away from zero."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# Auth

def identity_for(user: User) -> Identity:
    return Identity(id=user.id, email=user.email, role=Role(user.role), name=user.username)


def _user_out(user: User) -> UserOut:
    return UserOut(id=user.id, name=user.username, email=user.email, role=Role(user.role))


def register_user(db: Session, settings: Settings, name: str, email: str, password: str) -> Tuple[UserOut, str]:
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise Conflict("Email already registered")
    if db.scalar(select(User.id).where(User.username == name)) is not None:
        raise Conflict("Username already taken")

    user = User(username=name, email=email, password_hash=hash_password(password), role=Role.CUSTOMER.value)
    db.add(user)
    db.commit()
    log.info("Registered user %s (id=%s)", user.email, user.id)
    return _user_out(user), create_token(identity_for(user), settings)


def login_user(db: Session, settings: Settings, email: str, password: str) -> Tuple[UserOut, str]:
    user = db.scalar(select(User).where(User.email == email))
    # same answer for unknown email and wrong password
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    return _user_out(user), create_token(identity_for(user), settings)


def seed_admin(db: Session, settings: Settings) -> bool:
    if db.scalar(select(User.id).where(User.email == settings.admin_email)) is not None:
        return False
    if db.scalar(select(User.id).where(User.username == settings.admin_username)) is not None:
        log.warning("Cannot seed admin %s: username %r is taken", settings.admin_email, settings.admin_username)
        return False
    db.add(User(
        username=settings.admin_username,
        email=settings.admin_email,
        password_hash=hash_password(settings.admin_password),
        role=Role.ADMIN.value,
    ))
    db.commit()
    log.info("Admin account created: %s", settings.admin_email)
    return True


# Catalog

def _get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


def list_products(db: Session) -> List[ProductOut]:
    products = db.scalars(select(Product).order_by(Product.id))
    return [ProductOut.model_validate(p) for p in products]


def get_product(db: Session, product_id: int) -> ProductOut:
    return ProductOut.model_validate(_get_product(db, product_id))


def create_product(db: Session, data: ProductIn) -> ProductOut:
    product = Product(**data.model_dump())
    db.add(product)
    db.commit()
    return ProductOut.model_validate(product)


def update_product(db: Session, product_id: int, data: ProductIn) -> ProductOut:
    product = _get_product(db, product_id)
    for field, value in data.model_dump().items():
        setattr(product, field, value)
    db.commit()
    return ProductOut.model_validate(product)


def delete_product(db: Session, product_id: int) -> None:
    product = _get_product(db, product_id)
    db.delete(product)
    db.commit()
    log.info("Deleted product %s", product_id)


# Cart

def _check_cart_quantity(db: Session, product_id: int, quantity: int) -> Product:
    if quantity <= 0:
        raise BadRequest("Quantity must be greater than 0")
    product = _get_product(db, product_id)
    if quantity > product.stock:
        raise BadRequest("Quantity exceeds available stock", stock=product.stock)
    return product


def _find_cart_item(db: Session, user_id: int, product_id: int) -> Optional[CartItem]:
    return db.scalar(
        select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
    )


def get_cart(db: Session, user_id: int) -> List[CartLine]:
    rows = db.execute(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.desc(), CartItem.id.desc())
    )
    return [
        CartLine(
            id=product.id,
            name=product.name,
            price=product.price,
            quantity=item.quantity,
            stock=product.stock,
            image_url=product.image_url,
            category=product.category,
        )
        for item, product in rows
    ]


def upsert_cart_item(db: Session, user_id: int, product_id: int, quantity: int) -> CartItemOut:
    _check_cart_quantity(db, product_id, quantity)
    item = _find_cart_item(db, user_id, product_id)
    if item is None:
        item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
        db.add(item)
    else:
        item.quantity = quantity
    db.commit()
    return CartItemOut.model_validate(item)


def update_cart_quantity(db: Session, user_id: int, product_id: int, quantity: int) -> CartItemOut:
    _check_cart_quantity(db, product_id, quantity)
    item = _find_cart_item(db, user_id, product_id)
    if item is None:
        raise NotFound("Product not in cart")
    item.quantity = quantity
    db.commit()
    return CartItemOut.model_validate(item)


def remove_cart_item(db: Session, user_id: int, product_id: int) -> None:
    db.execute(delete(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id))
    db.commit()


def clear_cart(db: Session, user_id: int) -> None:
    db.execute(delete(CartItem).where(CartItem.user_id == user_id))
    db.commit()


# Favorites

def _find_favorite(db: Session, user_id: int, product_id: int) -> Optional[Favorite]:
    return db.scalar(
        select(Favorite).where(Favorite.user_id == user_id, Favorite.product_id == product_id)
    )


def list_favorites(db: Session, user_id: int) -> List[FavoriteProduct]:
    rows = db.execute(
        select(Favorite, Product)
        .join(Product, Favorite.product_id == Product.id)
        .where(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
    )
    return [
        FavoriteProduct(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.stock,
            category=product.category,
            image_url=product.image_url,
            favorited_at=favorite.created_at,
        )
        for favorite, product in rows
    ]


def list_favorite_ids(db: Session, user_id: int) -> List[int]:
    return list(db.scalars(select(Favorite.product_id).where(Favorite.user_id == user_id).order_by(Favorite.id)))


def add_favorite(db: Session, user_id: int, product_id: int) -> bool:
    """Returns False when the product was already a favorite."""
    _get_product(db, product_id)
    if _find_favorite(db, user_id, product_id) is not None:
        return False
    db.add(Favorite(user_id=user_id, product_id=product_id))
    db.commit()
    return True


def remove_favorite(db: Session, user_id: int, product_id: int) -> None:
    favorite = _find_favorite(db, user_id, product_id)
    if favorite is None:
        raise NotFound("Product not in favorites")
    db.delete(favorite)
    db.commit()


def toggle_favorite(db: Session, user_id: int, product_id: int) -> str:
    favorite = _find_favorite(db, user_id, product_id)
    if favorite is not None:
        db.delete(favorite)
        db.commit()
        return "removed"
    add_favorite(db, user_id, product_id)
    return "added"


# Coupons

def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def compute_discount(discount_type: DiscountType, value: Decimal, subtotal: Decimal) -> Tuple[Decimal, Decimal]:
    """Return (discount amount, discounted total), both rounded to cents.

    The total never drops below zero.
    """
    value = to_decimal(value)
    subtotal = to_decimal(subtotal)
    if discount_type is DiscountType.PERCENTAGE:
        discount = subtotal * value / Decimal(100)
    else:
        discount = value
    total = max(Decimal("0.00"), money(subtotal - discount))
    return money(discount), total


def enforce_coupon_limits(coupon: Coupon, subtotal: Decimal, now: Optional[datetime] = None) -> None:
    """Usage rules stored on the coupon: expiry, minimum purchase, max uses."""
    now = now or datetime.utcnow()
    if coupon.expiry_date is not None and coupon.expiry_date < now:
        raise BadRequest("Coupon expired")
    if coupon.min_purchase and to_decimal(subtotal) < to_decimal(coupon.min_purchase):
        raise BadRequest("Cart total below the coupon minimum", minPurchase=float(coupon.min_purchase))
    if coupon.max_uses is not None and (coupon.uses_count or 0) >= coupon.max_uses:
        raise BadRequest("Coupon usage limit reached")


def list_coupons(db: Session) -> List[CouponOut]:
    coupons = db.scalars(select(Coupon).where(Coupon.is_active.is_(True)).order_by(Coupon.code))
    return [CouponOut.model_validate(c) for c in coupons]


def validate_coupon(db: Session, code: str, cart_total, enforce_limits: bool = False) -> CouponQuote:
    cart_total = to_decimal(cart_total)
    coupon = db.scalar(
        select(Coupon).where(func.upper(Coupon.code) == normalize_code(code), Coupon.is_active.is_(True))
    )
    if coupon is None:
        raise NotFound("Invalid coupon")
    if enforce_limits:
        enforce_coupon_limits(coupon, cart_total)

    discount_type = DiscountType(coupon.discount_type)
    value = to_decimal(coupon.discount_value)
    amount, total = compute_discount(discount_type, value, cart_total)
    return CouponQuote(
        code=coupon.code,
        discount_type=discount_type,
        discount_value=value,
        discount_percent=value / Decimal(100),
        original_total=cart_total,
        discount_amount=amount,
        discounted_total=total,
    )


def create_coupon(db: Session, data: CouponIn) -> CouponOut:
    code = normalize_code(data.code)
    if not code:
        raise BadRequest("Coupon code is required")
    if data.discount_type not in {t.value for t in DiscountType}:
        raise BadRequest("Invalid discount type (percentage or fixed)")
    if data.discount_value is None or not data.discount_value.is_finite() or data.discount_value <= 0:
        raise BadRequest("Discount value must be greater than 0")
    if db.scalar(select(Coupon.id).where(func.upper(Coupon.code) == code)) is not None:
        raise Conflict("A coupon with that code already exists")

    coupon = Coupon(
        code=code,
        discount_type=data.discount_type,
        discount_value=data.discount_value,
        min_purchase=data.min_purchase or Decimal("0"),
        max_uses=data.max_uses or None,
        expiry_date=data.expiry_date,
    )
    db.add(coupon)
    db.commit()
    log.info("Coupon %s created (%s %s)", code, data.discount_type, data.discount_value)
    return CouponOut.model_validate(coupon)


def delete_coupon(db: Session, code: str) -> CouponOut:
    coupon = db.scalar(select(Coupon).where(func.upper(Coupon.code) == normalize_code(code)))
    if coupon is None:
        raise NotFound("Coupon not found")
    deleted = CouponOut.model_validate(coupon)
    db.delete(coupon)
    db.commit()
    log.info("Coupon %s deleted", deleted.code)
    return deleted


# Checkout & Orders

ORDER_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

_ORDER_SCOPES: Dict[Role, Callable[[Identity], Select]] = {
    Role.ADMIN: lambda identity: select(Order),
    Role.CUSTOMER: lambda identity: select(Order).where(Order.user_id == identity.id),
}


def orders_visible_to(identity: Identity) -> Select:
    return _ORDER_SCOPES[identity.role](identity).options(
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.user),
    )


def check_status_transition(current: OrderStatus, new: OrderStatus, strict: bool = False) -> None:
    if not strict or current is new:
        return
    if new not in ORDER_TRANSITIONS[current]:
        raise BadRequest(f"Cannot move an order from {current.value} to {new.value}")


def _decode_snapshot(order: Order, raw: Optional[str], label: str, warnings: List[str]) -> Optional[dict]:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError as e:
        log.warning("Order %s: %s snapshot is not valid JSON (%s)", order.id, label, e)
        warnings.append(f"{label} snapshot could not be decoded")
        return None
    if not isinstance(value, dict):
        log.warning("Order %s: %s snapshot is not a JSON object", order.id, label)
        warnings.append(f"{label} snapshot could not be decoded")
        return None
    return value


def _purchaser(order: Order) -> Optional[Purchaser]:
    if order.user is None:
        return None
    return Purchaser(name=order.user.username, email=order.user.email)


def order_out(order: Order, with_user: bool = False) -> OrderOut:
    warnings: List[str] = []
    shipping = _decode_snapshot(order, order.shipping_address_json, "shippingAddress", warnings)
    payment = _decode_snapshot(order, order.payment_method_json, "paymentMethod", warnings)
    items = [
        OrderItemOut(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            product_price=item.product_price,
            quantity=item.quantity,
            subtotal=item.subtotal,
            image_url=item.product.image_url if item.product is not None else None,
        )
        for item in order.items
    ]
    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        total=order.total,
        status=OrderStatus(order.status),
        address_id=order.address_id,
        payment_method_id=order.payment_method_id,
        shipping_address=shipping,
        payment_method=payment,
        items=items,
        user=_purchaser(order) if with_user else None,
        warnings=warnings,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _owned(db: Session, model, row_id: int, user_id: int, message: str):
    row = db.get(model, row_id)
    if row is None or row.user_id != user_id:
        raise NotFound(message)
    return row


def _lock_product(db: Session, product_id: int) -> Optional[Product]:
    stmt = (
        select(Product)
        .where(Product.id == product_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.scalar(stmt)


def place_order(db: Session, identity: Identity, data: OrderIn) -> OrderOut:
    if not data.items:
        raise BadRequest("Order has no items")

    try:
        with transaction(db):
            if data.address_id is not None:
                _owned(db, Address, data.address_id, identity.id, "Address not found")
            if data.payment_method_id is not None:
                _owned(db, PaymentMethod, data.payment_method_id, identity.id, "Payment method not found")

            total = Decimal("0")
            lines = []
            for requested in data.items:
                product = _lock_product(db, requested.product_id)
                if product is None:
                    raise NotFound(f"Product {requested.product_id} not found")
                if requested.quantity > product.stock:
                    raise InsufficientStock(
                        f"Insufficient stock for {product.name}", productId=product.id, stock=product.stock
                    )

                price = to_decimal(product.price)
                subtotal = money(price * requested.quantity)
                total += subtotal
                lines.append(OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    product_price=price,
                    quantity=requested.quantity,
                    subtotal=subtotal,
                ))

                # conditional decrement: a concurrent checkout that got here first wins
                result = db.execute(
                    update(Product)
                    .where(Product.id == product.id, Product.stock >= requested.quantity)
                    .values(stock=Product.stock - requested.quantity)
                )
                if result.rowcount != 1:
                    raise InsufficientStock(f"Insufficient stock for {product.name}", productId=product.id)

            order = Order(
                user_id=identity.id,
                total=money(total),
                status=OrderStatus.PENDING.value,
                address_id=data.address_id,
                payment_method_id=data.payment_method_id,
                shipping_address_json=json.dumps(data.shipping_address or {}),
                payment_method_json=json.dumps(data.payment_method or {}),
            )
            db.add(order)
            db.flush()
            for line in lines:
                line.order_id = order.id
                db.add(line)
            db.flush()
    except (NotFound, InsufficientStock) as e:
        log.info("Order rejected for user %s: %s", identity.id, e.message)
        raise

    log.info("Order %s placed by user %s, total %s", order.id, identity.id, order.total)
    db.refresh(order)
    return order_out(order)


def list_orders(db: Session, identity: Identity) -> List[OrderOut]:
    stmt = orders_visible_to(identity).order_by(Order.created_at.desc(), Order.id.desc())
    return [order_out(o, with_user=identity.is_admin) for o in db.scalars(stmt)]


def list_my_orders(db: Session, identity: Identity) -> List[OrderOut]:
    stmt = _ORDER_SCOPES[Role.CUSTOMER](identity).options(
        selectinload(Order.items).selectinload(OrderItem.product)
    ).order_by(Order.created_at.desc(), Order.id.desc())
    return [order_out(o) for o in db.scalars(stmt)]


def get_order(db: Session, identity: Identity, order_id: int) -> OrderOut:
    # someone else's order looks exactly like a missing one
    order = db.scalar(orders_visible_to(identity).where(Order.id == order_id))
    if order is None:
        raise NotFound("Order not found")
    return order_out(order, with_user=identity.is_admin)


def update_order_status(db: Session, order_id: int, status: str, strict: bool = False) -> OrderOut:
    try:
        new_status = OrderStatus(status)
    except ValueError:
        raise BadRequest("Invalid status")
    order = db.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    check_status_transition(OrderStatus(order.status), new_status, strict)
    previous = order.status
    order.status = new_status.value
    db.commit()
    log.info("Order %s status %s -> %s", order_id, previous, new_status.value)
    return order_out(order)


def order_stats(db: Session) -> OrderStats:
    count, revenue, average = db.execute(
        select(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total), 0),
            func.coalesce(func.avg(Order.total), 0),
        )
    ).one()
    units = db.scalar(select(func.coalesce(func.sum(OrderItem.quantity), 0)))
    recent = db.scalars(
        select(Order).options(selectinload(Order.user)).order_by(Order.created_at.desc(), Order.id.desc()).limit(5)
    )
    return OrderStats(
        total_orders=count,
        total_revenue=money(revenue),
        average_order_value=money(average),
        total_products_sold=int(units or 0),
        recent_orders=[
            OrderSummary(
                id=o.id,
                user_id=o.user_id,
                total=o.total,
                status=OrderStatus(o.status),
                user=_purchaser(o),
                created_at=o.created_at,
            )
            for o in recent
        ],
    )


# Profile, addresses, payment methods

def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def get_profile(db: Session, identity: Identity) -> ProfileOut:
    return ProfileOut.model_validate(_get_user(db, identity.id))


def update_profile(db: Session, identity: Identity, data: ProfileUpdate) -> ProfileOut:
    user = _get_user(db, identity.id)
    if data.email is not None:
        taken = db.scalar(select(User.id).where(User.email == data.email, User.id != user.id))
        if taken is not None:
            raise Conflict("Email already in use")
        user.email = data.email
    if data.username is not None:
        taken = db.scalar(select(User.id).where(User.username == data.username, User.id != user.id))
        if taken is not None:
            raise Conflict("Username already in use")
        user.username = data.username
    db.commit()
    return ProfileOut.model_validate(user)


def list_addresses(db: Session, user_id: int) -> List[AddressOut]:
    rows = db.scalars(
        select(Address).where(Address.user_id == user_id).order_by(Address.is_default.desc(), Address.id)
    )
    return [AddressOut.model_validate(a) for a in rows]


def create_address(db: Session, user_id: int, data: AddressIn) -> AddressOut:
    address = Address(user_id=user_id, **data.model_dump())
    db.add(address)
    db.commit()
    return AddressOut.model_validate(address)


def update_address(db: Session, user_id: int, address_id: int, data: AddressUpdate) -> AddressOut:
    address = _owned(db, Address, address_id, user_id, "Address not found")
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(address, field, value)
    db.commit()
    return AddressOut.model_validate(address)


def delete_address(db: Session, user_id: int, address_id: int) -> None:
    address = _owned(db, Address, address_id, user_id, "Address not found")
    db.delete(address)
    db.commit()


def _payment_out(pm: PaymentMethod, last4: str) -> PaymentMethodOut:
    return PaymentMethodOut(
        id=pm.id,
        cardholder_name=pm.cardholder_name,
        last4=last4,
        expiry=f"{pm.expiry_month:02d}/{pm.expiry_year}",
        expiry_month=pm.expiry_month,
        expiry_year=pm.expiry_year,
        card_type=pm.card_type,
        is_default=bool(pm.is_default),
        created_at=pm.created_at,
    )


def list_payment_methods(db: Session, user_id: int, cipher: CardCipher) -> List[PaymentMethodOut]:
    rows = db.scalars(
        select(PaymentMethod)
        .where(PaymentMethod.user_id == user_id)
        .order_by(PaymentMethod.is_default.desc(), PaymentMethod.id)
    )
    return [_payment_out(pm, cipher.last4(pm.card_number_encrypted)) for pm in rows]


def create_payment_method(db: Session, user_id: int, cipher: CardCipher, data: PaymentMethodIn) -> PaymentMethodOut:
    card_number = "".join(data.card_number.split())
    if not card_number:
        raise BadRequest("Missing card data")
    if not 1 <= data.expiry_month <= 12:
        raise BadRequest("Invalid expiry date")

    pm = PaymentMethod(
        user_id=user_id,
        card_number_encrypted=cipher.encrypt(card_number),
        cardholder_name=data.cardholder_name,
        expiry_month=data.expiry_month,
        expiry_year=data.expiry_year,
        cvv_encrypted=cipher.encrypt(data.cvv),
        card_type=data.card_type or "Visa",
    )
    db.add(pm)
    db.commit()
    return _payment_out(pm, card_number[-4:])


def delete_payment_method(db: Session, user_id: int, payment_method_id: int) -> None:
    pm = _owned(db, PaymentMethod, payment_method_id, user_id, "Payment method not found")
    db.delete(pm)
    db.commit()


# Demo data

DEMO_PRODUCTS = [
    ("Vestido Rojo Seda", "Elegante vestido de seda roja perfecto para ocasiones especiales.", "599.00", 15, "Mujer"),
    ("Blazer Negro Premium", "Blazer negro de corte moderno, ideal para el trabajo o eventos formales.", "899.00", 20, "Hombre"),
    ("Bufanda de Lana Vino", "Bufanda tejida a mano en tono vino. Suave y cálida.", "299.00", 30, "Accesorio"),
    ("Zapatillas Deportivas", "Zapatillas cómodas y modernas para uso diario.", "799.00", 25, "Calzado"),
    ("Reloj Inteligente", "Smartwatch con monitor de frecuencia cardíaca, GPS y resistencia al agua.", "1299.00", 10, "Aparatos Electrónicos"),
    ("Gorra Snapback Unisex", "Gorra ajustable de estilo urbano.", "249.00", 40, "Unisex"),
    ("Figura de Acción Coleccionable", "Figura articulada de edición limitada con accesorios incluidos.", "499.00", 12, "Juguete"),
    ("Camisa Blanca Formal", "Camisa de vestir en algodón egipcio. Corte slim fit.", "449.00", 35, "Hombre"),
    ("Vestido Floral Verano", "Vestido ligero con estampado floral.", "399.00", 18, "Mujer"),
    ("Auriculares Bluetooth", "Auriculares inalámbricos con cancelación de ruido activa.", "899.00", 22, "Aparatos Electrónicos"),
]

DEMO_COUPONS = [
    ("BIENVENIDO10", "percentage", "10", "500", 100, datetime(2025, 12, 31, 23, 59, 59)),
    ("VERANO50", "fixed", "50", "300", 50, datetime(2025, 6, 30, 23, 59, 59)),
    ("NAVIDAD2024", "percentage", "20", "1000", None, datetime(2025, 12, 25, 23, 59, 59)),
]


def seed_demo_data(db: Session) -> None:
    if db.scalar(select(func.count(Product.id))) == 0:
        for i, (name, description, price, stock, category) in enumerate(DEMO_PRODUCTS, start=1):
            db.add(Product(
                name=name,
                description=description,
                price=Decimal(price),
                stock=stock,
                category=category,
                image_url=f"https://picsum.photos/seed/prod{i}/400/500",
            ))
        log.info("Seeded %d demo products", len(DEMO_PRODUCTS))
    if db.scalar(select(func.count(Coupon.id))) == 0:
        for code, discount_type, value, min_purchase, max_uses, expiry in DEMO_COUPONS:
            db.add(Coupon(
                code=code,
                discount_type=discount_type,
                discount_value=Decimal(value),
                min_purchase=Decimal(min_purchase),
                max_uses=max_uses,
                expiry_date=expiry,
            ))
        log.info("Seeded %d demo coupons", len(DEMO_COUPONS))
    db.commit()
