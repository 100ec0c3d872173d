from typing import Dict

from storefront.models.cart import Cart


def summarize(cart: Cart, shipping_flat: float = 9.99, tax_rate: float = 0.08) -> Dict[str, float]:
    """
    Order summary shown next to the checkout form. Shipping is a flat rate
    (nothing to ship for an empty cart); tax applies to the subtotal only.
    """
    subtotal = float(cart.total_price)
    shipping = float(shipping_flat) if cart.items else 0.0
    tax = subtotal * float(tax_rate)
    return {
        "totalItems": int(cart.total_items),
        "subtotal": round(subtotal, 2),
        "shipping": round(shipping, 2),
        "tax": round(tax, 2),
        "total": round(subtotal + shipping + tax, 2),
    }
