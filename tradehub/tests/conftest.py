"""Configuration et fixtures pytest"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tradehub.core.database import Base, get_db
from tradehub.core.executor import ExecutorError, QueryExecutor, SqlAlchemyExecutor
from tradehub.core.security import create_access_token
from tradehub.main import app
from tradehub.models.product import Product
from tradehub.models.profile import Profile
from tradehub.services.product_service import ProductService

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FailingExecutor(QueryExecutor):
    """Exécuteur qui échoue systématiquement"""

    def __init__(self, message="connection reset by peer", code=None):
        self.message = message
        self.code = code

    def fetch(self, query):
        raise ExecutorError(self.message, code=self.code)

    def insert(self, mutation):
        raise ExecutorError(self.message, code=self.code)

    def update(self, mutation):
        raise ExecutorError(self.message, code=self.code)

    def call(self, call):
        raise ExecutorError(self.message, code=self.code)


class RecordingExecutor(QueryExecutor):
    """Enregistre les requêtes sans backend, renvoie une ligne factice"""

    def __init__(self):
        self.queries = []

    def fetch(self, query):
        self.queries.append(query)
        return [{"id": "p-1", "name": "Recorded", "category": "Misc"}]

    def insert(self, mutation):
        self.queries.append(mutation)
        return {"id": "p-1", **mutation.values}

    def update(self, mutation):
        self.queries.append(mutation)
        return []

    def call(self, call):
        self.queries.append(call)


@pytest.fixture(scope="function")
def db():
    """Fixture de base de données pour les tests"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Fixture du client de test FastAPI"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def service(db):
    return ProductService(SqlAlchemyExecutor(db))


@pytest.fixture
def profiles(db):
    """Deux grossistes (un non approuvé) et deux détaillants"""
    rows = [
        Profile(id="W1", business_name="Acme Wholesale", role="wholesale", is_approved=True),
        Profile(id="W2", business_name="Budget Supplies", role="wholesale", is_approved=False),
        Profile(id="R1", business_name="Corner Pharmacy", role="retail", is_approved=True),
        Profile(id="R2", business_name=None, role="retail", is_approved=True),
    ]
    db.add_all(rows)
    db.commit()
    return {profile.id: profile for profile in rows}


def _product(**overrides):
    values = {
        "category": "General",
        "stock": 10,
        "min_stock": 2,
        "buy_price": 1.0,
        "sell_price": 2.0,
        "status": "in-stock",
        "user_id": "seed",
        "is_wholesale_product": False,
        "is_retail_product": False,
        "is_public_product": False,
    }
    values.update(overrides)
    return Product(**values)


@pytest.fixture
def catalog(db, profiles):
    """Jeu de produits couvrant chaque combinaison de visibilité"""
    rows = [
        _product(
            id="p-w1-private", name="Amoxicillin", category="Antibiotics",
            user_id="W1", wholesaler_id="W1", stock=5,
        ),
        _product(
            id="p-w1-shared", name="Bandages", category="First Aid",
            user_id="W1", wholesaler_id="W1", is_wholesale_product=True,
        ),
        _product(
            id="p-w2-shared", name="Cough Syrup", category="Cold & Flu",
            user_id="W2", wholesaler_id="W2", is_wholesale_product=True, stock=3,
        ),
        _product(
            id="p-r1-own", name="Digital Thermometer", category="Devices",
            user_id="R1", retailer_id="R1", stock=4,
        ),
        _product(
            id="p-r2-retail", name="Echinacea Tea", category="Herbal",
            description="Immune support blend", user_id="R2", retailer_id="R2",
            is_retail_product=True, is_public_product=True, stock=7,
        ),
        _product(
            id="p-public", name="Face Masks", category="First Aid",
            is_public_product=True, stock=2,
        ),
        _product(
            id="p-public-empty", name="Gauze", category="Dressings",
            is_public_product=True, stock=0, status="out-of-stock",
        ),
        _product(
            id="p-uncategorized", name="Ice Pack", category="",
            is_public_product=True, stock=1,
        ),
        _product(
            id="p-deleted", name="Hand Sanitizer", category="Hygiene",
            is_public_product=True, stock=9, status="deleted",
        ),
    ]
    db.add_all(rows)
    db.commit()
    return {product.id: product for product in rows}


@pytest.fixture
def token_for():
    def _token(user_id, role):
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id, 'role': role})}"}

    return _token


@pytest.fixture
def recorder():
    return RecordingExecutor()


@pytest.fixture
def failing_executor():
    def _executor(message="connection reset by peer", code=None):
        return FailingExecutor(message=message, code=code)

    return _executor
