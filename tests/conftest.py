from decimal import Decimal

import pytest
from sqlalchemy import func, select

from timber_store.db.session import init_db, make_engine, make_session_factory
from timber_store.models import CartItem, Order, Product, User


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def make_user(session_factory):
    counter = {"n": 0}

    def _make(role="Client"):
        counter["n"] += 1
        with session_factory() as session:
            user = User(
                user_firstname="Test",
                user_lastname=f"User{counter['n']}",
                user_email=f"user{counter['n']}@example.com",
                user_password="not-a-real-hash",
                user_role=role,
            )
            session.add(user)
            session.flush()
            return user.user_id

    return _make


@pytest.fixture
def make_product(session_factory):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = dict(
            product_name=f"Board {counter['n']}",
            timber_type="Pine",
            product_category="Timber",
            product_grade="A",
            dimensions=f"{counter['n']}x4",
            thickness=Decimal("2"),
            width=Decimal("4"),
            length=Decimal("10"),
            price_per_unit=Decimal("10"),
            quantity_in_stock=Decimal("5"),
        )
        fields.update(overrides)
        with session_factory() as session:
            prod = Product(**fields)
            session.add(prod)
            session.flush()
            return prod.product_id

    return _make


@pytest.fixture
def db(session_factory):
    """Small read/write helpers for asserting on stored state."""

    class _Db:
        def stock(self, product_id):
            with session_factory() as session:
                return session.get(Product, product_id).quantity_in_stock

        def set_stock(self, product_id, value):
            with session_factory() as session:
                session.get(Product, product_id).quantity_in_stock = Decimal(str(value))

        def set_price(self, product_id, value):
            with session_factory() as session:
                session.get(Product, product_id).price_per_unit = Decimal(str(value))

        def deactivate(self, product_id):
            with session_factory() as session:
                session.get(Product, product_id).is_active = False

        def cart(self, user_id):
            with session_factory() as session:
                rows = session.execute(
                    select(CartItem.product_id, CartItem.quantity)
                    .where(CartItem.user_id == user_id)
                    .order_by(CartItem.product_id)
                ).all()
                return [tuple(r) for r in rows]

        def order_count(self):
            with session_factory() as session:
                return session.execute(select(func.count(Order.order_id))).scalar_one()

        def order(self, order_id):
            with session_factory() as session:
                return session.get(Order, order_id)

    return _Db()
