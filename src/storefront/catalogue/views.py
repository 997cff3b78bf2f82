"""Product payloads for API clients."""

from storefront.catalogue.product import CATEGORY_DISPLAY_NAMES


def product_payload(product):
    return {
        "_id": str(product.id),
        "id": str(product.id),
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "salePrice": product.sale_price,
        "effectivePrice": product.effective_price,
        "category": product.category,
        "stock": product.stock,
        "images": list(product.images or []),
        "image": product.primary_image,
        "rating": product.rating or 0.0,
        "numReviews": product.num_reviews or 0,
        "reviews": [
            {
                "user": str(review.user_id),
                "name": review.name or "",
                "rating": review.rating,
                "comment": review.comment or "",
                "createdAt": review.created_at,
            }
            for review in product.reviews
        ],
        "featured": bool(product.featured),
        "createdAt": product.created_at,
        "updatedAt": product.updated_at,
    }


def categories_payload():
    return [{"value": value, "label": label} for value, label in CATEGORY_DISPLAY_NAMES.items()]
