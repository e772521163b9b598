from .errors import DuplicateReviewError, ProductNotFoundError, ValidationError
from .logger import get_logger
from .store import PRODUCTS, DocumentStore
from .utils import clean_text, utcnow

logger = get_logger("reviews")


def aggregate_rating(reviews: list) -> dict:
    """Recompute ``rating``/``num_reviews`` from the full review list."""
    if not reviews:
        return {"rating": 0, "num_reviews": 0}
    return {
        "rating": sum(review["rating"] for review in reviews) / len(reviews),
        "num_reviews": len(reviews),
    }


def add_review(store: DocumentStore, product_id: str, user: dict, rating: int, comment: str) -> dict:
    comment = clean_text(comment)
    if not comment:
        raise ValidationError("Please provide a valid rating (1-5) and a comment.")

    product = store.find_by_id(PRODUCTS, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    reviews = product.get("reviews", [])
    if any(review["user"] == user["id"] for review in reviews):
        logger.warning("user %s tried to review product %s twice", user["id"], product_id)
        raise DuplicateReviewError()

    now = utcnow()
    reviews.append({
        # name is a snapshot; later renames do not touch old reviews
        "user": user["id"],
        "name": user["name"],
        "rating": rating,
        "comment": comment,
        "created_at": now,
        "updated_at": now,
    })
    product["reviews"] = reviews
    product.update(aggregate_rating(reviews))
    saved = store.save(PRODUCTS, product)
    logger.info("product %s reviewed by %s, rating now %.2f over %s", product_id, user["id"], saved["rating"], saved["num_reviews"])
    return saved
