"""
Pytest fixtures for NowStock tests.
"""

import pytest
from django.contrib.auth import get_user_model

from nowstock.adapters.catalog import ModelTagResolver, reset_tag_resolver
from nowstock.models import Product
from nowstock.services.engine import MovementEngine


User = get_user_model()

TENANT = 1
OTHER_TENANT = 2


@pytest.fixture(autouse=True)
def _fresh_resolver():
    """Resolver cache must not leak settings between tests."""
    reset_tag_resolver()
    yield
    reset_tag_resolver()


@pytest.fixture
def tenant():
    return TENANT


@pytest.fixture
def other_tenant():
    return OTHER_TENANT


@pytest.fixture
def user(db):
    """Operator of the test tenant."""
    return User.objects.create_user(username='operador', password='testpass123')


@pytest.fixture
def scanner(db):
    """User recorded on hardware reads."""
    return User.objects.create_user(username='leitor', password='testpass123')


@pytest.fixture
def product(db):
    """Tagged product with minimum quantity 2."""
    return Product.objects.create(
        tenant_id=TENANT,
        name='Caixa de Parafusos',
        rfid_tag='E200001722110144',
        minimum_quantity=2,
    )


@pytest.fixture
def untagged_product(db):
    """Product without RFID tag (manual movements only)."""
    return Product.objects.create(
        tenant_id=TENANT,
        name='Fita Isolante',
        rfid_tag=None,
        minimum_quantity=0,
    )


@pytest.fixture
def foreign_product(db):
    """Same tag as `product`, registered by another tenant."""
    return Product.objects.create(
        tenant_id=OTHER_TENANT,
        name='Produto de Outra Empresa',
        rfid_tag='E200001722110144',
        minimum_quantity=0,
    )


@pytest.fixture
def engine(db):
    return MovementEngine(resolver=ModelTagResolver())


@pytest.fixture
def stocked(engine, user, product):
    """`product` with 10 units on hand."""
    outcome = engine.record_manual(TENANT, user.pk, 'entrada', 10, product_id=product.pk)
    assert outcome.ok
    return product
