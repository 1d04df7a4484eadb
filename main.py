import logging
import os
from contextlib import asynccontextmanager
from typing import Annotated, List

from fastapi import Depends, FastAPI, Path, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import services
from database import SessionLocal, get_db, init_db, list_tables, ping
from errors import ShopError
from schemas import (
    MAX_INT,
    AddressIn,
    AddressOut,
    AddressUpdate,
    AuthResponse,
    CartItemIn,
    CartLine,
    CartQuantityIn,
    CartWriteResult,
    CouponDeleted,
    CouponIn,
    CouponOut,
    CouponQuote,
    CouponValidateIn,
    FavoriteIn,
    FavoriteProduct,
    FavoriteToggle,
    LoginRequest,
    Message,
    OrderIn,
    OrderOut,
    OrderStats,
    OrderStatusIn,
    PaymentMethodIn,
    PaymentMethodOut,
    ProductIn,
    ProductOut,
    ProfileOut,
    ProfileUpdate,
    RegisterRequest,
)
from security import CardCipher, Identity, catalog_writer, get_cipher, get_current_identity, require_admin
from settings import Settings, get_settings

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

RowId = Annotated[int, Path(ge=-MAX_INT - 1, le=MAX_INT)]


# Startup
@asynccontextmanager
async def lifespan(app: FastAPI):
    current = get_settings()
    if current.auto_migrate:
        init_db()
    else:
        log.info("AUTO_MIGRATE is off; expecting the schema to exist")
    db = SessionLocal()
    try:
        if current.seed_demo_data:
            services.seed_demo_data(db)
        services.seed_admin(db, current)
    finally:
        db.close()
    app.state.cipher = CardCipher.from_secret(current.encryption_key)
    log.info("VoidShop API ready")
    yield


# App setup
app = FastAPI(title="VoidShop API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error handlers
@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        detail = f"{field}: {first.get('msg')}" if field else first.get("msg", detail)
    return JSONResponse(status_code=400, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Health and helpers
@app.get("/")
def root():
    return {"message": "VoidShop API running"}


@app.get("/health")
def health():
    response = {
        "status": "ok",
        "service": "VoidShop API",
        "database": "Not Available",
        "tables": [],
    }
    try:
        ping()
        response["database"] = "Connected"
        response["tables"] = list_tables()
    except Exception as e:
        log.warning("Health check could not reach the database: %s", e)
        response["status"] = "degraded"
        response["database"] = f"Error: {str(e)[:80]}"
    return response


# Auth
@app.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user, token = services.register_user(db, settings, payload.name, payload.email, payload.password)
    return AuthResponse(user=user, token=token)


@app.post("/auth/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user, token = services.login_user(db, settings, payload.email, payload.password)
    return AuthResponse(user=user, token=token)


# Products
@app.get("/products", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return services.list_products(db)


@app.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: RowId, db: Session = Depends(get_db)):
    return services.get_product(db, product_id)


@app.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db), _=Depends(catalog_writer)):
    return services.create_product(db, payload)


@app.put("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: RowId, payload: ProductIn, db: Session = Depends(get_db), _=Depends(catalog_writer)):
    return services.update_product(db, product_id, payload)


@app.delete("/products/{product_id}", response_model=Message)
def delete_product(product_id: RowId, db: Session = Depends(get_db), _=Depends(catalog_writer)):
    services.delete_product(db, product_id)
    return Message(message="Product deleted")


# Cart
@app.get("/cart", response_model=List[CartLine])
def get_cart(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.get_cart(db, user.id)


@app.post("/cart", response_model=CartWriteResult)
def cart_add(item: CartItemIn, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    cart_item = services.upsert_cart_item(db, user.id, item.product_id, item.quantity)
    return CartWriteResult(message="Product added to cart", cart_item=cart_item)


@app.put("/cart/{product_id}", response_model=CartWriteResult)
def cart_update(product_id: RowId, payload: CartQuantityIn, user: Identity = Depends(get_current_identity),
                db: Session = Depends(get_db)):
    cart_item = services.update_cart_quantity(db, user.id, product_id, payload.quantity)
    return CartWriteResult(message="Quantity updated", cart_item=cart_item)


@app.delete("/cart/{product_id}", response_model=Message)
def cart_remove(product_id: RowId, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    services.remove_cart_item(db, user.id, product_id)
    return Message(message="Product removed from cart")


@app.delete("/cart", response_model=Message)
def cart_clear(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    services.clear_cart(db, user.id)
    return Message(message="Cart cleared")


# Favorites
@app.get("/favorites", response_model=List[FavoriteProduct])
def list_favorites(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.list_favorites(db, user.id)


@app.get("/favorites/ids", response_model=List[int])
def list_favorite_ids(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.list_favorite_ids(db, user.id)


@app.post("/favorites", response_model=Message)
def add_favorite(payload: FavoriteIn, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    if services.add_favorite(db, user.id, payload.product_id):
        return JSONResponse(status_code=201, content={"message": "Product added to favorites"})
    return Message(message="Product already in favorites")


@app.post("/favorites/toggle", response_model=FavoriteToggle)
def toggle_favorite(payload: FavoriteIn, user: Identity = Depends(get_current_identity),
                    db: Session = Depends(get_db)):
    action = services.toggle_favorite(db, user.id, payload.product_id)
    message = "Product added to favorites" if action == "added" else "Product removed from favorites"
    return FavoriteToggle(message=message, action=action)


@app.delete("/favorites/{product_id}", response_model=Message)
def remove_favorite(product_id: RowId, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    services.remove_favorite(db, user.id, product_id)
    return Message(message="Product removed from favorites")


# Coupons
@app.get("/coupons", response_model=List[CouponOut])
def list_coupons(db: Session = Depends(get_db)):
    return services.list_coupons(db)


@app.post("/coupons/validate", response_model=CouponQuote)
def validate_coupon(payload: CouponValidateIn, db: Session = Depends(get_db),
                    settings: Settings = Depends(get_settings)):
    return services.validate_coupon(db, payload.code, payload.cart_total, settings.enforce_coupon_limits)


@app.post("/coupons", response_model=CouponOut, status_code=201)
def create_coupon(payload: CouponIn, db: Session = Depends(get_db), _: Identity = Depends(require_admin)):
    return services.create_coupon(db, payload)


@app.delete("/coupons/{code}", response_model=CouponDeleted)
def delete_coupon(code: str, db: Session = Depends(get_db), _: Identity = Depends(require_admin)):
    coupon = services.delete_coupon(db, code)
    return CouponDeleted(message="Coupon deleted", coupon=coupon)


# Checkout & Orders
@app.get("/orders/my", response_model=List[OrderOut])
def my_orders(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.list_my_orders(db, user)


@app.get("/orders/stats", response_model=OrderStats)
def order_stats(db: Session = Depends(get_db), _: Identity = Depends(require_admin)):
    return services.order_stats(db)


@app.get("/orders", response_model=List[OrderOut])
def list_orders(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.list_orders(db, user)


@app.post("/orders", response_model=OrderOut, status_code=201)
def place_order(payload: OrderIn, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.place_order(db, user, payload)


@app.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: RowId, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.get_order(db, user, order_id)


@app.put("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: RowId, payload: OrderStatusIn, db: Session = Depends(get_db),
                        _: Identity = Depends(require_admin), settings: Settings = Depends(get_settings)):
    return services.update_order_status(db, order_id, payload.status, settings.strict_order_transitions)


# Profile
@app.get("/user/profile", response_model=ProfileOut)
def get_profile(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.get_profile(db, user)


@app.put("/user/profile", response_model=ProfileOut)
def update_profile(payload: ProfileUpdate, user: Identity = Depends(get_current_identity),
                   db: Session = Depends(get_db)):
    return services.update_profile(db, user, payload)


@app.get("/user/addresses", response_model=List[AddressOut])
def list_addresses(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.list_addresses(db, user.id)


@app.post("/user/addresses", response_model=AddressOut, status_code=201)
def create_address(payload: AddressIn, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return services.create_address(db, user.id, payload)


@app.put("/user/addresses/{address_id}", response_model=AddressOut)
def update_address(address_id: RowId, payload: AddressUpdate, user: Identity = Depends(get_current_identity),
                   db: Session = Depends(get_db)):
    return services.update_address(db, user.id, address_id, payload)


@app.delete("/user/addresses/{address_id}", response_model=Message)
def delete_address(address_id: RowId, user: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    services.delete_address(db, user.id, address_id)
    return Message(message="Address deleted")


@app.get("/user/payment-methods", response_model=List[PaymentMethodOut])
def list_payment_methods(user: Identity = Depends(get_current_identity), db: Session = Depends(get_db),
                         cipher: CardCipher = Depends(get_cipher)):
    return services.list_payment_methods(db, user.id, cipher)


@app.post("/user/payment-methods", response_model=PaymentMethodOut, status_code=201)
def create_payment_method(payload: PaymentMethodIn, user: Identity = Depends(get_current_identity),
                          db: Session = Depends(get_db), cipher: CardCipher = Depends(get_cipher)):
    return services.create_payment_method(db, user.id, cipher, payload)


@app.delete("/user/payment-methods/{payment_method_id}", response_model=Message)
def delete_payment_method(payment_method_id: RowId, user: Identity = Depends(get_current_identity),
                          db: Session = Depends(get_db)):
    services.delete_payment_method(db, user.id, payment_method_id)
    return Message(message="Payment method deleted")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
