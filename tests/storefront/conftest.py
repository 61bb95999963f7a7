import pytest

from storefront.cart.cart import Cart
from storefront.cart.storage import MemoryCartStorage
from storefront.catalog.memory_adapter import InMemoryCatalog
from storefront.session import Storefront
from storefront.identity import Identity, StaticIdentityProvider
from storefront.order.fake_adapter import FakeOrderStore

SWORD = {
    "id": 1,
    "name": "Diamond Sword",
    "image_url": "https://cdn.example.com/sword.png",
    "category": "weapons",
    "price_in_cents": 1500,
    "is_active": True,
}

FARM_BOT = {
    "id": 2,
    "name": "Farm Bot",
    "image_url": "https://cdn.example.com/bot.png",
    "category": "bots",
    "price_in_cents": 4999,
    "is_active": True,
}

COINS = {
    "id": 3,
    "name": "Gold Coins",
    "category": "currency",
    "price_in_cents": 100,
    "is_active": True,
    "variants": [
        {"id": "coins-100", "title": "100 coins", "price_in_cents": 100},
        {"id": "coins-1000", "title": "1000 coins", "price_in_cents": 900},
    ],
}

RETIRED_CAPE = {
    "id": 4,
    "name": "Retired Cape",
    "category": "cosmetics",
    "price_in_cents": 700,
    "is_active": False,
}


@pytest.fixture()
def storage():
    return MemoryCartStorage()


@pytest.fixture()
def cart(storage):
    return Cart(storage)


@pytest.fixture()
def catalog():
    return InMemoryCatalog([SWORD, FARM_BOT, COINS, RETIRED_CAPE])


@pytest.fixture()
def store():
    return FakeOrderStore()


@pytest.fixture()
def shopper():
    return Identity(id="user-001", email="steve@example.com")


@pytest.fixture()
def identity(shopper):
    return StaticIdentityProvider(shopper)


@pytest.fixture()
def storefront(cart, catalog, store, identity):
    return Storefront(cart=cart, catalog=catalog, store=store, identity=identity)
