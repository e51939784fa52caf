import os
import tempfile

# Settings and the engine are built at import time, so point them at the
# test database before anything from the app is imported.
TEST_DIR = tempfile.mkdtemp(prefix="plutus-tests-")
TEST_DB_PATH = os.path.join(TEST_DIR, "catalog.db")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["LOG_DIR"] = os.path.join(TEST_DIR, "logs")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from main import app

CATALOG_DDL = {
    "sneakers": "id INTEGER PRIMARY KEY, brand TEXT, product_name TEXT, "
    "images TEXT, product_link TEXT",
    "apparel": "id INTEGER PRIMARY KEY, brand TEXT, product_name TEXT, "
    "images TEXT, product_link TEXT, gender TEXT, subcategory TEXT",
    "watches": "id INTEGER PRIMARY KEY, brand TEXT, name TEXT, images TEXT, "
    "link TEXT, gender TEXT",
    "perfumes": "id INTEGER PRIMARY KEY, brand TEXT, title TEXT, images TEXT, "
    "url TEXT, fragrance_family TEXT, subcategory TEXT",
    "accessories": "id INTEGER PRIMARY KEY, brand TEXT, product_name TEXT, "
    "images TEXT, product_link TEXT, gender TEXT, subcategory TEXT",
}

SNEAKER_BRANDS = ("Nike", "Adidas", "New Balance")


def _images(table, row_id):
    return f"{{https://img.test/{table}/{row_id}a.jpg, https://img.test/{table}/{row_id}b.jpg}}"


def catalog_rows():
    rows = {}
    rows["sneakers"] = [
        {
            "id": i,
            "brand": SNEAKER_BRANDS[i % 3],
            "product_name": f"Sneaker {i}",
            # one row without images to check the empty-list contract
            "images": None if i == 3 else _images("sneakers", i),
            "product_link": f"https://shop.test/sneakers/{i}",
        }
        for i in range(1, 26)
    ]
    rows["apparel"] = [
        {
            "id": i,
            "brand": ("Stone Island", "Palm Angels")[i % 2],
            "product_name": f"Hoodie {i}",
            "images": _images("apparel", i),
            "product_link": f"https://shop.test/apparel/{i}",
            "gender": ("men", "women")[i % 2],
            "subcategory": ("hoodies", "t-shirts", None)[i % 3],
        }
        for i in range(1, 9)
    ]
    rows["watches"] = [
        {
            "id": i,
            "brand": ("Rolex", "Omega")[i % 2],
            "name": f"Chronograph {i}",
            "images": _images("watches", i),
            "link": f"https://shop.test/watches/{i}",
            "gender": "unisex",
        }
        for i in range(1, 9)
    ]
    rows["perfumes"] = [
        {
            "id": i,
            "brand": ("Hermès", "Creed")[i % 2],
            "title": f"Eau de Parfum {i}",
            "images": "{}" if i == 2 else _images("perfumes", i),
            "url": f"https://shop.test/perfumes/{i}",
            "fragrance_family": ("Woody", "Citrus", None)[i % 3],
            "subcategory": "edp",
        }
        for i in range(1, 9)
    ]
    rows["accessories"] = [
        {
            "id": i,
            "brand": ("Gucci", "Prada")[i % 2],
            "product_name": f"Belt {i}",
            "images": _images("accessories", i),
            "product_link": f"https://shop.test/accessories/{i}",
            "gender": "women",
            "subcategory": "belts",
        }
        for i in range(1, 9)
    ]
    return rows


def seed_catalog(database_path):
    engine = create_engine(f"sqlite:///{database_path}")
    with engine.begin() as conn:
        for table, columns in CATALOG_DDL.items():
            conn.execute(text(f"DROP TABLE IF EXISTS {table}"))
            conn.execute(text(f"CREATE TABLE {table} ({columns})"))
        for table, rows in catalog_rows().items():
            names = list(rows[0])
            placeholders = ", ".join(f":{n}" for n in names)
            conn.execute(
                text(f"INSERT INTO {table} ({', '.join(names)}) VALUES ({placeholders})"),
                rows,
            )
    engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def catalog_db():
    """Create and fill the five catalog tables once per test run."""
    seed_catalog(TEST_DB_PATH)
    return TEST_DATABASE_URL


@pytest.fixture
def client(catalog_db):
    """TestClient with a fresh lifespan, so caches and limiter start empty."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
