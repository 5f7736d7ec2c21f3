"""
Synthetic order payloads for the GraphQL orderCreate mutation.

Every order carries 1-3 physical items from the normal SKU pool and, with
probability ``special_item_rate``, 1-2 items from the special pool
(gift cards and other goods that do not ship). Customer identity and address
are drawn from fixed pools so test fixtures can swap in controlled data.
"""

import json
import random
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from faker import Faker

from errors import ConfigurationError
from scenarios import Scenario

ORDER_NAME_PREFIX = "LOADTEST_"
CURRENCY = "USD"

ORDER_CREATE_MUTATION = """
  mutation orderCreate($order: OrderCreateOrderInput!) {
    orderCreate(order: $order) {
      order {
        id
        name
        totalPriceSet {
          shopMoney {
            amount
            currencyCode
          }
        }
        lineItems(first: 10) {
          nodes {
            id
            title
            quantity
            requiresShipping
          }
        }
      }
      userErrors {
        field
        message
      }
    }
  }
"""


# =============================================================================
# DATA POOLS
# =============================================================================

@dataclass(frozen=True)
class DataPools:
    """Value pools the generator draws from, keyed by pool name."""
    normal_skus: Tuple[str, ...] = ("gid://shopify/ProductVariant/test-variant-1",)
    special_skus: Tuple[str, ...] = ("gid://shopify/ProductVariant/test-variant-2",)
    first_names: Tuple[str, ...] = (
        "John", "Jane", "Alex", "Sam", "Chris", "Taylor", "Jordan", "Morgan",
    )
    last_names: Tuple[str, ...] = (
        "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    )
    street_numbers: Tuple[str, ...] = ("10", "20", "30", "40", "50", "100", "200", "300")
    street_names: Tuple[str, ...] = (
        "Main St", "Oak Ave", "Park Blvd", "Elm St", "Maple Dr", "Cedar Ln", "Pine Rd", "First St",
    )
    cities: Tuple[str, ...] = (
        "Springfield", "Riverside", "Franklin", "Greenville", "Madison", "Georgetown", "Clinton", "Salem",
    )
    provinces: Tuple[str, ...] = ("State", "Province", "Region")
    zips: Tuple[str, ...] = ("10001", "20002", "30003", "40004", "50005")

    # SKU pools may be empty; an order with no line items is still submitted
    OPTIONAL_POOLS = ("normal_skus", "special_skus")

    def __post_init__(self):
        for f in fields(self):
            values = getattr(self, f.name)
            if isinstance(values, str):
                raise ConfigurationError(f"Pool {f.name} must be a list of strings, got a string")
            for v in values:
                if isinstance(v, bool) or not isinstance(v, (str, int, float)):
                    raise ConfigurationError(f"Pool {f.name} contains a non-string entry: {v!r}")
            object.__setattr__(self, f.name, tuple(str(v) for v in values))
            if f.name not in self.OPTIONAL_POOLS and not getattr(self, f.name):
                raise ConfigurationError(f"Pool {f.name} must not be empty")

    @classmethod
    def pool_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "DataPools":
        """Build pools from a mapping; pools left out keep their defaults."""
        unknown = sorted(set(data) - set(cls.pool_names()))
        if unknown:
            raise ConfigurationError(f"Unknown pool name(s): {', '.join(unknown)}")
        for name, values in data.items():
            if not isinstance(values, (list, tuple)):
                raise ConfigurationError(f"Pool {name} must be a list of strings")
        return cls(**{name: tuple(values) for name, values in data.items()})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "DataPools":
        """Load pools from a JSON file mapping pool name to a list of strings."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Cannot read pools file {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"Pools file {path} is not valid UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Pools file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Pools file {path} must contain a JSON object")
        return cls.from_mapping(data)

    @classmethod
    def from_faker(
        cls,
        size: int = 8,
        locale: str = "en_US",
        seed: Optional[int] = None,
        base: Optional["DataPools"] = None,
    ) -> "DataPools":
        """
        Synthesize identity and address pools with Faker.
        SKU pools are taken from ``base`` (defaults when omitted).
        """
        if size < 1:
            raise ConfigurationError(f"Faker pool size must be >= 1, got {size}")
        fake = Faker(locale)
        if seed is not None:
            fake.seed_instance(seed)

        base = base or DEFAULT_POOLS
        return replace(
            base,
            first_names=tuple(fake.first_name() for _ in range(size)),
            last_names=tuple(fake.last_name() for _ in range(size)),
            street_numbers=tuple(fake.building_number() for _ in range(size)),
            street_names=tuple(fake.street_name() for _ in range(size)),
            cities=tuple(fake.city() for _ in range(size)),
            provinces=tuple(fake.state_abbr() for _ in range(size)),
            zips=tuple(fake.zipcode() for _ in range(size)),
        )


DEFAULT_POOLS = DataPools()


# =============================================================================
# ORDER MODEL
# =============================================================================

@dataclass(frozen=True)
class LineItem:
    variant_id: str
    requires_shipping: bool
    quantity: int = 1

    def to_input(self) -> Dict[str, Any]:
        return {
            "variantId": self.variant_id,
            "quantity": self.quantity,
            "requiresShipping": self.requires_shipping,
        }


@dataclass(frozen=True)
class Customer:
    first_name: str
    last_name: str
    email: str
    phone: str


@dataclass(frozen=True)
class Address:
    address1: str
    city: str
    province: str
    zip: str
    address2: Optional[str] = None
    country: str = "US"
    country_code: str = "US"

    def to_input(self, customer: Customer) -> Dict[str, Any]:
        return {
            "firstName": customer.first_name,
            "lastName": customer.last_name,
            "address1": self.address1,
            "address2": self.address2,
            "city": self.city,
            "province": self.province,
            "country": self.country,
            "zip": self.zip,
            "phone": customer.phone,
            "countryCode": self.country_code,
        }


def _money(amount: float) -> Dict[str, Any]:
    return {"shopMoney": {"amount": amount, "currencyCode": CURRENCY}}


@dataclass(frozen=True)
class OrderRequest:
    """One synthetic order, ready to be sent as the ``order`` variable."""
    name: str
    customer: Customer
    address: Address
    line_items: Tuple[LineItem, ...] = field(default_factory=tuple)

    currency: str = CURRENCY
    financial_status: str = "PAID"
    shipping_amount: float = 10.00
    tax_rate: float = 0.08
    transaction_amount: float = 100.00

    @property
    def has_special_items(self) -> bool:
        """Special items are the ones that do not require shipping."""
        return any(not item.requires_shipping for item in self.line_items)

    @property
    def billing_address(self) -> Address:
        return self.address

    @property
    def shipping_address(self) -> Address:
        return self.address

    @property
    def tax_amount(self) -> float:
        return round(self.shipping_amount * self.tax_rate, 2)

    def to_input(self) -> Dict[str, Any]:
        """Render as an OrderCreateOrderInput."""
        return {
            "currency": self.currency,
            "presentmentCurrency": self.currency,
            "buyerAcceptsMarketing": False,
            "email": self.customer.email,
            "name": self.name,
            "note": "",
            "phone": self.customer.phone,
            "poNumber": None,
            "sourceIdentifier": None,
            "taxesIncluded": True,
            "test": False,
            "financialStatus": self.financial_status,
            "tags": [],
            "customAttributes": [{"key": "paymentMethods", "value": "manual"}],
            "customer": None,
            "billingAddress": self.billing_address.to_input(self.customer),
            "shippingAddress": self.shipping_address.to_input(self.customer),
            "lineItems": [item.to_input() for item in self.line_items],
            "shippingLines": [
                {
                    "title": "Standard Shipping",
                    "code": "standard",
                    "source": "shopify",
                    "priceSet": _money(self.shipping_amount),
                    "taxLines": [
                        {
                            "title": "Tax",
                            "rate": self.tax_rate,
                            "channelLiable": False,
                            "priceSet": _money(self.tax_amount),
                        }
                    ],
                }
            ],
            "discountCode": None,
            "transactions": [
                {
                    "kind": "SALE",
                    "status": "SUCCESS",
                    "gateway": "manual",
                    "test": False,
                    "amountSet": _money(self.transaction_amount),
                }
            ],
        }


def build_request_body(order: OrderRequest) -> Dict[str, Any]:
    """GraphQL request body for one order."""
    return {
        "query": ORDER_CREATE_MUTATION,
        "variables": {"order": order.to_input()},
    }


# =============================================================================
# GENERATOR
# =============================================================================

class OrderGenerator:
    """
    Builds randomized orders from a set of pools.

    Give each concurrent caller its own generator (or its own ``rng``);
    a generator does no I/O and never raises once constructed.
    """

    def __init__(
        self,
        pools: DataPools = DEFAULT_POOLS,
        special_item_rate: float = 0.01,
        rng: Optional[random.Random] = None,
    ):
        if not 0.0 <= special_item_rate <= 1.0:
            raise ConfigurationError(
                f"special_item_rate must be within [0, 1], got {special_item_rate}"
            )
        self.pools = pools
        self.special_item_rate = special_item_rate
        self.rng = rng or random.Random()

    def _sample(self, pool: Tuple[str, ...], count: int) -> List[str]:
        """Distinct picks; the whole pool when it is smaller than count."""
        return self.rng.sample(pool, min(count, len(pool)))

    def order_name(self) -> str:
        return f"{ORDER_NAME_PREFIX}{self.rng.randint(100000, 999999)}"

    def line_items(self) -> Tuple[LineItem, ...]:
        items = [
            LineItem(variant_id=sku, requires_shipping=True)
            for sku in self._sample(self.pools.normal_skus, self.rng.randint(1, 3))
        ]
        if self.rng.random() < self.special_item_rate:
            items.extend(
                LineItem(variant_id=sku, requires_shipping=False)
                for sku in self._sample(self.pools.special_skus, self.rng.randint(1, 2))
            )
        return tuple(items)

    def customer(self) -> Customer:
        area = self.rng.randint(100, 999)
        exchange = self.rng.randint(100, 999)
        number = self.rng.randint(1000, 9999)
        return Customer(
            first_name=self.rng.choice(self.pools.first_names),
            last_name=self.rng.choice(self.pools.last_names),
            email=f"loadtest-{self.rng.randrange(1000000)}@example.com",
            phone=f"{area}{exchange}{number}",
        )

    def address(self) -> Address:
        return Address(
            address1=f"{self.rng.choice(self.pools.street_numbers)} {self.rng.choice(self.pools.street_names)}",
            city=self.rng.choice(self.pools.cities),
            province=self.rng.choice(self.pools.provinces),
            zip=self.rng.choice(self.pools.zips),
        )

    def generate(self) -> OrderRequest:
        line_items = self.line_items()
        return OrderRequest(
            name=self.order_name(),
            customer=self.customer(),
            address=self.address(),
            line_items=line_items,
        )


def generate(
    scenario_name: Union[str, Scenario],
    special_item_rate: float = 0.01,
    pools: DataPools = DEFAULT_POOLS,
    rng: Optional[random.Random] = None,
) -> OrderRequest:
    """Generate one order for a scenario. Unknown scenarios raise ConfigurationError."""
    Scenario.parse(scenario_name)
    return OrderGenerator(pools, special_item_rate, rng).generate()
