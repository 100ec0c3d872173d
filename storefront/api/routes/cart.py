import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from storefront.api.deps import get_db
from storefront.api.errors import ApiError
from storefront.api.schemas.cart import CartDeleteResponse, CartSaveResponse, CheckoutSummary
from storefront.config import settings
from storefront.database import FileBackedCartDB
from storefront.models.cart import (
    CART_ID_PATTERN,
    Cart,
    CartValidationError,
    compute_totals,
    utc_now_iso,
    validate_document,
)
from storefront.services import checkout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _require_id(cart_id: Optional[str]) -> str:
    if not cart_id:
        raise ApiError(400, "Cart ID is required")
    if not CART_ID_PATTERN.match(cart_id):
        raise ApiError(400, "Invalid cart ID")
    return cart_id


def _load(db: FileBackedCartDB, cart_id: str) -> Dict[str, Any]:
    try:
        doc = db.get(cart_id)
    except (OSError, ValueError):
        logger.exception("Error retrieving cart %s", cart_id)
        raise ApiError(500, "Internal server error")
    if doc is None:
        raise ApiError(404, "Cart not found")
    return doc


@router.get("", response_model=Dict[str, Any])
def get_cart(cart_id: Optional[str] = Query(None, alias="id"), db: FileBackedCartDB = Depends(get_db)):
    """
    Return the stored cart document verbatim. 404 if no document exists for the id;
    a cart is never fabricated here.
    """
    return _load(db, _require_id(cart_id))


@router.post("", response_model=CartSaveResponse)
async def save_cart(request: Request, db: FileBackedCartDB = Depends(get_db)):
    """
    Save (fully overwrite) a cart document.

    Totals are recomputed from the submitted items, `updatedAt` is stamped now and
    `createdAt` is only set when the client did not send one.
    """
    try:
        doc = await request.json()
    except ValueError:
        raise ApiError(400, "Invalid cart structure")

    try:
        validate_document(doc)
    except CartValidationError as e:
        raise ApiError(400, str(e))

    now = utc_now_iso()
    doc["updatedAt"] = now
    if not doc.get("createdAt"):
        doc["createdAt"] = now
    doc["totalItems"], doc["totalPrice"] = compute_totals(doc["items"])

    try:
        created = not db.exists(doc["id"])
        db.save(doc)
        logger.info("%s cart %s (%d items)", "Created" if created else "Updated", doc["id"], doc["totalItems"])
    except OSError:
        logger.exception("Error saving cart %s", doc.get("id"))
        raise ApiError(500, "Internal server error")

    return {"success": True, "message": "Cart saved successfully", "cart": doc}


@router.delete("", response_model=CartDeleteResponse)
def delete_cart(cart_id: Optional[str] = Query(None, alias="id"), db: FileBackedCartDB = Depends(get_db)):
    """Remove the backing file. Not-found is reported as 404, not as success."""
    cart_id = _require_id(cart_id)
    try:
        removed = db.delete(cart_id)
    except OSError:
        logger.exception("Error removing cart %s", cart_id)
        raise ApiError(500, "Internal server error")
    if not removed:
        raise ApiError(404, "Cart not found")
    return {"success": True, "message": "Cart removed successfully"}


@router.get("/checkout-summary", response_model=CheckoutSummary)
def checkout_summary(cart_id: Optional[str] = Query(None, alias="id"), db: FileBackedCartDB = Depends(get_db)):
    """Subtotal / shipping / tax / total for a stored cart."""
    doc = _load(db, _require_id(cart_id))
    try:
        cart = Cart.from_dict(doc)
    except CartValidationError:
        logger.exception("Stored cart %s is malformed", cart_id)
        raise ApiError(500, "Internal server error")
    return checkout.summarize(cart, settings.CHECKOUT_SHIPPING_FLAT, settings.CHECKOUT_TAX_RATE)
