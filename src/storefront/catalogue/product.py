"""Product aggregate root with the ProductReview entity.

The product is the storefront's stock ledger: checkout reserves units with a
conditional decrement, cancellation and order deletion restore them. Stock
can never go below zero through these methods.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    List,
    String,
    Text,
)

from storefront.catalogue.events import (
    ProductCreated,
    ProductReviewed,
    ProductUpdated,
    StockReserved,
    StockRestored,
)
from storefront.domain import storefront


class ProductCategory(Enum):
    HANDBAGS = "handbags"
    TROLLEY_LUGGAGE = "trolley-luggage"
    TRAVEL_BAGS = "travel-bags"
    BACKPACKS = "backpacks"


CATEGORY_DISPLAY_NAMES = {
    ProductCategory.HANDBAGS.value: "Handbags",
    ProductCategory.TROLLEY_LUGGAGE.value: "Trolley Luggage",
    ProductCategory.TRAVEL_BAGS.value: "Travel Bags",
    ProductCategory.BACKPACKS.value: "Backpacks",
}


def effective_price(price, sale_price=None):
    """Return the price a customer pays right now.

    The sale price only applies when it is positive and strictly below the
    list price; anything else falls back to the list price.
    """
    if sale_price is not None and 0 < sale_price < price:
        return sale_price
    return price


def _normalize_images(image, images):
    """Keep `image` and `images` consistent: the primary image is images[0]."""
    image = image.strip() if isinstance(image, str) else ""
    images = [url for url in (images or []) if url]
    if image and not images:
        images = [image]
    if images and not image:
        image = images[0]
    return image, images


@storefront.entity(part_of="Product")
class ProductReview:
    user_id = Identifier(required=True)
    name = String(max_length=100)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text()
    created_at = DateTime()


@storefront.aggregate
class Product:
    name = String(required=True, max_length=100)
    description = String(required=True, max_length=2000)
    price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    category = String(required=True, choices=ProductCategory)
    stock = Integer(default=0, min_value=0)
    images = List(content_type=String, default=list)
    image = Text()
    rating = Float(default=0.0, min_value=0.0, max_value=5.0)
    num_reviews = Integer(default=0)
    reviews = HasMany(ProductReview)
    featured = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def product_must_have_an_image(self):
        if not self.images:
            raise ValidationError({"images": ["Product image is required"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        description,
        price,
        category,
        stock=0,
        images=None,
        image=None,
        sale_price=None,
        featured=False,
    ):
        image, images = _normalize_images(image, images)
        if not images:
            raise ValidationError({"images": ["Product image is required"]})

        now = datetime.now(UTC)
        product = cls(
            name=name.strip(),
            description=description,
            price=price,
            sale_price=sale_price,
            category=category,
            stock=stock,
            images=images,
            image=image,
            featured=featured,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=product.name,
                category=product.category,
                price=product.price,
                stock=product.stock,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def effective_price(self):
        return effective_price(self.price, self.sale_price)

    @property
    def primary_image(self):
        return self.image or (self.images[0] if self.images else "")

    # -------------------------------------------------------------------
    # Admin edits
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=None,
        description=None,
        price=None,
        sale_price=None,
        category=None,
        stock=None,
        images=None,
        image=None,
        featured=None,
    ):
        """Apply the supplied fields; omitted (None) fields keep their value."""
        with atomic_change(self):
            if name is not None:
                self.name = name.strip()
            if description is not None:
                self.description = description
            if price is not None:
                self.price = price
            if sale_price is not None:
                self.sale_price = sale_price
            if category is not None:
                self.category = category
            if stock is not None:
                self.stock = stock
            if featured is not None:
                self.featured = featured
            if images is not None or image is not None:
                new_image, new_images = _normalize_images(image, images)
                self.images = new_images
                self.image = new_image

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                sale_price=self.sale_price,
                stock=self.stock,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def reserve_stock(self, quantity):
        """Take `quantity` units out of stock, refusing to go below zero."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.stock < quantity:
            raise ValidationError({"stock": [f"Insufficient stock for {self.name}"]})

        previous = self.stock
        self.stock = previous - quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                reserved_at=now,
            )
        )

    def restore_stock(self, quantity):
        """Put `quantity` units back into stock."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        previous = self.stock
        self.stock = previous + quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                restored_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def add_review(self, user_id, rating, comment=None, name=None):
        """Record a review and recompute the average rating."""
        if not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})

        now = datetime.now(UTC)
        self.add_reviews(
            ProductReview(
                user_id=user_id,
                name=name,
                rating=rating,
                comment=comment,
                created_at=now,
            )
        )
        self.num_reviews = len(self.reviews)
        self.rating = sum(review.rating for review in self.reviews) / self.num_reviews
        self.updated_at = now

        self.raise_(
            ProductReviewed(
                product_id=str(self.id),
                user_id=str(user_id),
                rating=rating,
                average_rating=self.rating,
                num_reviews=self.num_reviews,
                reviewed_at=now,
            )
        )
