import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from audit.context import Authentication, SecurityContext, security_context
from tests.testapp.models import Company, Customer


@pytest.fixture(autouse=True)
def _no_ambient_actor():
    """Each test starts with no security context bound"""
    with security_context(None):
        yield


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(
        username="owner@example.com",
        email="owner@example.com",
        password="Owner!234",
    )


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(
        username="manager@example.com",
        email="manager@example.com",
        password="Manager!234",
    )


@pytest.fixture
def as_actor():
    """Bind an actor for the duration of a ``with`` block"""
    def _bind(actor_id):
        return security_context(Authentication.for_actor(actor_id))

    return _bind


@pytest.fixture
def context_for():
    def _build(principal, name=None, is_authenticated=True):
        return SecurityContext(Authentication(principal=principal, name=name, is_authenticated=is_authenticated))

    return _build


@pytest.fixture
def company(db, as_actor):
    with as_actor(7):
        return Company.objects.create(name="Nettside AS")


@pytest.fixture
def customer(db, as_actor):
    with as_actor(7):
        return Customer.objects.create(name="Kari Nordmann", email="kari@example.com")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def jwt_client(user):
    client = APIClient()
    token = AccessToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client
