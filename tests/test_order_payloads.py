"""
Order payload generator tests.
"""
import json
import random
import re

import pytest

from errors import ConfigurationError
from order_payloads import (
    DEFAULT_POOLS, ORDER_CREATE_MUTATION, DataPools, LineItem, OrderGenerator,
    build_request_body, generate,
)

NORMAL = tuple(f"gid://test/ProductVariant/normal-{i}" for i in range(6))
SPECIAL = tuple(f"gid://test/ProductVariant/special-{i}" for i in range(4))


@pytest.fixture
def pools():
    return DataPools(normal_skus=NORMAL, special_skus=SPECIAL)


def make_generator(pools, rate, seed=7):
    return OrderGenerator(pools, rate, random.Random(seed))


# ── special item rate ─────────────────────────────────────────────────────────

class TestSpecialItemRate:
    def test_rate_zero_never_adds_special_items(self, pools):
        gen = make_generator(pools, 0.0)
        for _ in range(10_000):
            order = gen.generate()
            assert not order.has_special_items
            assert not any(item.variant_id in SPECIAL for item in order.line_items)

    def test_rate_one_always_adds_special_items(self, pools):
        gen = make_generator(pools, 1.0)
        for _ in range(10_000):
            order = gen.generate()
            assert order.has_special_items
            assert any(item.variant_id in SPECIAL for item in order.line_items)

    def test_intermediate_rate_is_roughly_honoured(self, pools):
        gen = make_generator(pools, 0.25, seed=11)
        special = sum(gen.generate().has_special_items for _ in range(4000))
        assert 800 < special < 1200

    @pytest.mark.parametrize("rate", [-0.1, 1.5])
    def test_rate_outside_unit_interval_rejected(self, pools, rate):
        with pytest.raises(ConfigurationError, match="special_item_rate"):
            OrderGenerator(pools, rate)


# ── line items ────────────────────────────────────────────────────────────────

class TestLineItems:
    def test_counts_and_distinctness(self, pools):
        gen = make_generator(pools, 0.5, seed=3)
        for _ in range(2000):
            order = gen.generate()
            normal = [i.variant_id for i in order.line_items if i.requires_shipping]
            special = [i.variant_id for i in order.line_items if not i.requires_shipping]
            assert 1 <= len(normal) <= 3
            assert len(special) in (0, 1, 2)
            assert len(set(normal)) == len(normal)
            assert len(set(special)) == len(special)
            assert set(normal) <= set(NORMAL)
            assert set(special) <= set(SPECIAL)

    def test_has_special_items_iff_special_sku_present(self, pools):
        gen = make_generator(pools, 0.5, seed=5)
        for _ in range(2000):
            order = gen.generate()
            assert order.has_special_items == any(i.variant_id in SPECIAL for i in order.line_items)

    def test_every_count_is_reached(self, pools):
        gen = make_generator(pools, 1.0, seed=9)
        normal_counts, special_counts = set(), set()
        for _ in range(500):
            items = gen.generate().line_items
            normal_counts.add(sum(i.requires_shipping for i in items))
            special_counts.add(sum(not i.requires_shipping for i in items))
        assert normal_counts == {1, 2, 3}
        assert special_counts == {1, 2}

    def test_quantity_is_one(self, pools):
        order = make_generator(pools, 1.0).generate()
        assert all(item.quantity == 1 for item in order.line_items)

    def test_small_pool_takes_whole_pool(self):
        pools = DataPools(normal_skus=("only-normal",), special_skus=("only-special",))
        gen = make_generator(pools, 1.0)
        for _ in range(200):
            ids = [i.variant_id for i in gen.generate().line_items]
            assert ids == ["only-normal", "only-special"]

    def test_empty_sku_pools_produce_empty_order(self):
        pools = DataPools(normal_skus=(), special_skus=())
        order = make_generator(pools, 1.0).generate()
        assert order.line_items == ()
        assert not order.has_special_items
        assert order.to_input()["lineItems"] == []


# ── identity, address and fixed fields ────────────────────────────────────────

class TestOrderFields:
    def test_order_name_format(self, pools):
        gen = make_generator(pools, 0.0)
        for _ in range(500):
            assert re.fullmatch(r"LOADTEST_\d{6}", gen.generate().name)

    def test_customer_drawn_from_pools(self, pools):
        gen = make_generator(pools, 0.0)
        for _ in range(200):
            customer = gen.generate().customer
            assert customer.first_name in DEFAULT_POOLS.first_names
            assert customer.last_name in DEFAULT_POOLS.last_names
            assert re.fullmatch(r"loadtest-\d{1,6}@example\.com", customer.email)
            assert re.fullmatch(r"[1-9]\d{2}[1-9]\d{2}[1-9]\d{3}", customer.phone)

    def test_billing_and_shipping_are_identical(self, pools):
        order = make_generator(pools, 0.0).generate()
        payload = order.to_input()
        assert payload["billingAddress"] == payload["shippingAddress"]
        assert payload["billingAddress"]["firstName"] == order.customer.first_name
        assert payload["billingAddress"]["countryCode"] == "US"
        assert payload["billingAddress"]["address2"] is None

    def test_fixed_fields(self, pools):
        payload = make_generator(pools, 0.0).generate().to_input()
        assert payload["currency"] == "USD"
        assert payload["presentmentCurrency"] == "USD"
        assert payload["financialStatus"] == "PAID"
        shipping = payload["shippingLines"][0]
        assert shipping["priceSet"]["shopMoney"] == {"amount": 10.00, "currencyCode": "USD"}
        assert shipping["taxLines"][0]["rate"] == 0.08
        assert shipping["taxLines"][0]["priceSet"]["shopMoney"]["amount"] == 0.80
        assert len(payload["transactions"]) == 1
        transaction = payload["transactions"][0]
        assert transaction["kind"] == "SALE"
        assert transaction["status"] == "SUCCESS"
        assert transaction["amountSet"]["shopMoney"]["amount"] == 100.00

    def test_line_item_input_shape(self):
        item = LineItem(variant_id="gid://x/1", requires_shipping=False)
        assert item.to_input() == {"variantId": "gid://x/1", "quantity": 1, "requiresShipping": False}

    def test_same_seed_same_order(self, pools):
        a = make_generator(pools, 0.5, seed=42).generate()
        b = make_generator(pools, 0.5, seed=42).generate()
        assert a == b


class TestRequestBody:
    def test_body_is_json_serializable(self, pools):
        order = make_generator(pools, 1.0).generate()
        body = json.loads(json.dumps(build_request_body(order)))
        assert body["query"] == ORDER_CREATE_MUTATION
        assert body["variables"]["order"]["name"] == order.name

    def test_mutation_requests_fields_used_for_classification(self):
        assert "orderCreate(order: $order)" in ORDER_CREATE_MUTATION
        assert "userErrors" in ORDER_CREATE_MUTATION
        assert "lineItems(first: 10)" in ORDER_CREATE_MUTATION
        assert re.search(r"order \{\s+id", ORDER_CREATE_MUTATION)


class TestGenerateEntryPoint:
    def test_known_scenario(self):
        order = generate("quick", 0.0, rng=random.Random(1))
        assert order.name.startswith("LOADTEST_")

    def test_unknown_scenario_raises(self):
        with pytest.raises(ConfigurationError):
            generate("soak", 0.0)


# ── data pools ────────────────────────────────────────────────────────────────

class TestDataPools:
    def test_from_json_overrides_some_pools(self, tmp_path):
        path = tmp_path / "pools.json"
        path.write_text(json.dumps({"normal_skus": ["a", "b"], "cities": ["Lyon"]}))
        pools = DataPools.from_json(path)
        assert pools.normal_skus == ("a", "b")
        assert pools.cities == ("Lyon",)
        assert pools.special_skus == DEFAULT_POOLS.special_skus

    def test_from_json_stringifies_numbers(self, tmp_path):
        path = tmp_path / "pools.json"
        path.write_text(json.dumps({"street_numbers": [10, 20]}))
        assert DataPools.from_json(path).street_numbers == ("10", "20")

    def test_unknown_pool_rejected(self, tmp_path):
        path = tmp_path / "pools.json"
        path.write_text(json.dumps({"colours": ["red"]}))
        with pytest.raises(ConfigurationError, match="colours"):
            DataPools.from_json(path)

    def test_invalid_json_rejected(self, tmp_path):
        path = tmp_path / "pools.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            DataPools.from_json(path)

    def test_non_utf8_file_rejected(self, tmp_path):
        path = tmp_path / "pools.json"
        path.write_bytes(b'{"cities": ["M\xfcnchen"]}')
        with pytest.raises(ConfigurationError, match="UTF-8"):
            DataPools.from_json(path)

    @pytest.mark.parametrize("entry", [None, ["a"], {"x": 1}, True])
    def test_non_string_entry_rejected(self, tmp_path, entry):
        path = tmp_path / "pools.json"
        path.write_text(json.dumps({"cities": ["Lyon", entry]}))
        with pytest.raises(ConfigurationError, match="cities"):
            DataPools.from_json(path)

    def test_missing_file_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            DataPools.from_json(tmp_path / "missing.json")

    def test_empty_identity_pool_rejected(self):
        with pytest.raises(ConfigurationError, match="first_names"):
            DataPools(first_names=())

    def test_string_pool_rejected(self):
        with pytest.raises(ConfigurationError, match="cities"):
            DataPools(cities="Paris")

    def test_from_faker_is_seeded_and_keeps_skus(self, pools):
        a = DataPools.from_faker(size=5, seed=1, base=pools)
        b = DataPools.from_faker(size=5, seed=1, base=pools)
        assert a == b
        assert len(a.first_names) == 5
        assert len(a.zips) == 5
        assert a.normal_skus == NORMAL
        assert a.special_skus == SPECIAL

    def test_from_faker_pools_generate_orders(self):
        faked = DataPools.from_faker(size=3, seed=2)
        order = make_generator(faked, 0.0).generate()
        assert order.customer.first_name in faked.first_names
        assert order.address.city in faked.cities
