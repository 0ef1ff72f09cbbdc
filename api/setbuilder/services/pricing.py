"""Set price computation for the post-import export.

All amounts are ``Decimal``; rounding happens once, on output.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from setbuilder.services.component_repository import ComponentRecord
from setbuilder.services.errors import MissingPriceError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("0.19")
DEFAULT_CHANNEL_MARKUP = Decimal("0.10")

# (upper bound in kg, inclusive flag, cost); first matching tier wins
ShippingTier = Tuple[Optional[Decimal], bool, Decimal]

SHIPPING_COST_TIERS: Sequence[ShippingTier] = (
    (Decimal("5"), False, Decimal("3.6")),
    (Decimal("15"), True, Decimal("4.2")),
    (Decimal("20"), True, Decimal("6.2")),
    (Decimal("29"), True, Decimal("22.0")),
    (Decimal("99"), True, Decimal("63.0")),
    (None, True, Decimal("63.0")),
)

# Export column -> ComponentPrices attribute
CHANNEL_PRICE_FIELDS: Dict[str, str] = {
    "SetUVP": "list_price",
    "SetShopPreisKH24": "shop_price",
    "SetEbayPreisKH24": "ebay_price",
    "SetAmazonPreisKH24": "amazon_price",
    "SetPreisManuelleEingabe": "manual_price",
    "SetRealPreisKH24": "real_price",
    "SetRealTiefstpreisKH24": "real_lowest_price",
    "SetB2B": "b2b_price",
}


class SetPrice(BaseModel):
    """Brutto set price; ``missing`` lists components without a usable price."""

    brutto: Decimal
    missing: List[int] = []

    @property
    def is_complete(self) -> bool:
        return not self.missing


def shipping_cost(weight_kg: Decimal, tiers: Sequence[ShippingTier] = SHIPPING_COST_TIERS) -> Decimal:
    """Step function of shipping cost over weight in kilograms."""
    for upper, inclusive, cost in tiers:
        if upper is None:
            return cost
        if weight_kg < upper or (inclusive and weight_kg == upper):
            return cost
    return tiers[-1][2]


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _weight_kg(component: ComponentRecord) -> Decimal:
    return Decimal(component.weight_g or 0) / Decimal(1000)


def compute_set_price(
    components: List[ComponentRecord],
    tax_rate: Decimal = DEFAULT_TAX_RATE,
    tiers: Sequence[ShippingTier] = SHIPPING_COST_TIERS,
) -> SetPrice:
    """
    Recompute the brutto set price from the components' minimum gross prices.

    Each component is reduced to net, minus its own shipping share (never
    below zero); one set-level shipping cost on the total weight is added back
    before tax. A single component without a positive price forces the whole
    set price to 0.
    """
    tax_factor = Decimal(1) + tax_rate
    net_after_shipping = Decimal(0)
    total_weight = Decimal(0)
    missing = []

    for component in components:
        weight = _weight_kg(component)
        total_weight += weight

        gross = component.prices.gross_min_price
        if gross is None or gross <= 0:
            missing.append(component.variant_id)
            continue

        net = Decimal(gross) / tax_factor
        net_after_shipping += max(Decimal(0), net - shipping_cost(weight, tiers))

    if missing:
        logger.warning(str(MissingPriceError(missing)))
        return SetPrice(brutto=Decimal(0), missing=missing)

    brutto = (net_after_shipping + shipping_cost(total_weight, tiers)) * tax_factor
    return SetPrice(brutto=quantize(brutto))


def compute_channel_prices(
    components: List[ComponentRecord],
    markup: Decimal = DEFAULT_CHANNEL_MARKUP,
) -> Dict[str, str]:
    """
    Sum each channel over components with a positive value, plus markup.

    A channel no component contributes to is an empty string, not ``0.00``.
    """
    result = {}
    for column, attribute in CHANNEL_PRICE_FIELDS.items():
        total = Decimal(0)
        for component in components:
            value = getattr(component.prices, attribute)
            if value is not None and value > 0:
                total += Decimal(value)
        result[column] = f"{quantize(total * (Decimal(1) + markup))}" if total > 0 else ""
    return result


def format_set_price(price: SetPrice) -> str:
    """Export form: ``"174.22"`` or ``"0"`` when forced to zero."""
    if not price.is_complete:
        return "0"
    return f"{price.brutto}"
