"""Order price computation.

Tax is a flat 10% of the items price. Shipping is free only when the items
price is strictly above 100.00; otherwise a flat 10.00 applies. Each component
is rounded to cents first and the total is the rounded sum of the rounded
components, so the stored total always equals the stored parts.
"""

TAX_RATE = 0.10
FREE_SHIPPING_THRESHOLD = 100.0
FLAT_SHIPPING_PRICE = 10.0


def shipping_for(items_price: float) -> float:
    return 0.0 if items_price > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_PRICE


def price_order(lines) -> dict:
    """Compute the four order amounts from ``(unit_price, quantity)`` pairs."""
    items_price = round(sum(price * quantity for price, quantity in lines), 2)
    tax_price = round(items_price * TAX_RATE, 2)
    shipping_price = round(shipping_for(items_price), 2)
    total_price = round(items_price + tax_price + shipping_price, 2)

    return {
        "items_price": items_price,
        "tax_price": tax_price,
        "shipping_price": shipping_price,
        "total_price": total_price,
    }
