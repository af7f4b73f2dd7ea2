import pytest
from django.test import Client

from accounts.models import User


def make_user(username, role=User.ROLE_STAFF, **extra):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password='password',
        role=role,
        **extra,
    )


@pytest.fixture
def staff_user(db):
    return make_user('staff')


@pytest.fixture
def manager_user(db):
    return make_user('manager', role=User.ROLE_MANAGER)


@pytest.fixture
def admin_account(db):
    return make_user('boss', role=User.ROLE_ADMIN)


def _client_for(user):
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def staff_client(staff_user):
    return _client_for(staff_user)


@pytest.fixture
def manager_client(manager_user):
    return _client_for(manager_user)


@pytest.fixture
def admin_api_client(admin_account):
    return _client_for(admin_account)

