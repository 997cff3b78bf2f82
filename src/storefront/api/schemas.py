"""Pydantic request schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Clients send camelCase keys; snake_case is
accepted as well.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None

    model_config = _CAMEL


class ShippingDetailsSchema(BaseModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    pincode: str | None = None

    model_config = _CAMEL


class CreateOrderRequest(BaseModel):
    shipping_address: ShippingAddressSchema | None = None
    shipping_details: ShippingDetailsSchema | None = None
    phone: str | None = None
    payment_method: str | None = "COD"

    model_config = {
        **_CAMEL,
        "json_schema_extra": {
            "examples": [
                {
                    "shippingAddress": {
                        "fullName": "Asha Rao",
                        "address": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "pincode": "560001",
                    },
                    "phone": "9876543210",
                    "paymentMethod": "COD",
                }
            ]
        },
    }


class TrackingRequest(BaseModel):
    tracking_id: str | None = None

    model_config = _CAMEL


class OrderStatusRequest(BaseModel):
    order_status: str | None = None

    model_config = _CAMEL


class ReturnExchangeBody(BaseModel):
    request_type: str
    reason: str | None = None
    refund_mode: str | None = None
    upi_id: str | None = None
    account_holder_name: str | None = None
    account_number: str | None = None
    ifsc_code: str | None = None
    bank_name: str | None = None
    requested_product_name: str | None = None
    requested_product_color: str | None = None
    requested_product_price: float | None = None

    model_config = _CAMEL


class ReturnStatusRequest(BaseModel):
    status: str | None = None

    model_config = _CAMEL


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)

    model_config = _CAMEL


class UpdateCartRequest(BaseModel):
    product_id: str
    quantity: int

    model_config = _CAMEL


class RemoveFromCartRequest(BaseModel):
    product_id: str

    model_config = _CAMEL


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str = Field(max_length=100)
    description: str = Field(max_length=2000)
    price: float = Field(ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    category: str
    stock: int = Field(ge=0, default=0)
    images: list[str] | None = None
    image: str | None = None
    featured: bool = False

    model_config = _CAMEL


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    price: float | None = Field(default=None, ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    category: str | None = None
    stock: int | None = Field(default=None, ge=0)
    images: list[str] | None = None
    image: str | None = None
    featured: bool | None = None

    model_config = _CAMEL


class ReviewRequest(BaseModel):
    rating: int
    comment: str | None = None

    model_config = _CAMEL
