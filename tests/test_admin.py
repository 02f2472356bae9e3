import pytest
from django.contrib import admin
from django.test import RequestFactory

from tests.testapp.admin import CompanyAdmin, CustomerAdmin
from tests.testapp.models import Company, Customer

pytestmark = pytest.mark.django_db

CHANGELIST = "/admin/testapp/customer/"


@pytest.fixture
def deleted_customer(as_actor):
    with as_actor(7):
        gone = Customer.objects.create(name="Ola Nordmann")
        gone.delete()
    return gone


def test_changelist_shows_deleted_rows(admin_client, customer, deleted_customer):
    response = admin_client.get(CHANGELIST)

    assert response.status_code == 200
    assert set(response.context['cl'].queryset) == {customer, deleted_customer}


def test_changelist_filters_on_deletion(admin_client, customer, deleted_customer):
    response = admin_client.get(CHANGELIST, {'deleted': 'yes'})
    assert list(response.context['cl'].queryset) == [deleted_customer]

    response = admin_client.get(CHANGELIST, {'deleted': 'no'})
    assert list(response.context['cl'].queryset) == [customer]


def test_delete_view_soft_deletes_as_admin(admin_client, admin_user, customer):
    response = admin_client.post(f"{CHANGELIST}{customer.pk}/delete/", {'post': 'yes'})

    assert response.status_code == 302
    stored = Customer.all_objects.get(pk=customer.pk)
    assert stored.deleted_by == admin_user.pk
    assert stored.updated_by == admin_user.pk


def test_mark_selected_deleted_action(admin_client, admin_user, customer):
    response = admin_client.post(CHANGELIST, {
        'action': 'mark_selected_deleted',
        '_selected_action': [customer.pk],
    })

    assert response.status_code == 302
    assert Customer.objects.only_deleted().get().deleted_by == admin_user.pk


def test_restore_selected_action(admin_client, deleted_customer):
    admin_client.post(CHANGELIST, {
        'action': 'restore_selected',
        '_selected_action': [deleted_customer.pk],
    })

    assert Customer.objects.filter(pk=deleted_customer.pk).exists()


def test_hard_delete_action_is_not_offered(admin_user):
    request = RequestFactory().get(CHANGELIST)
    request.user = admin_user

    actions = CustomerAdmin(Customer, admin.site).get_actions(request)

    assert 'delete_selected' not in actions
    assert {'mark_selected_deleted', 'restore_selected'} <= set(actions)


def test_audit_fields_are_read_only(admin_user):
    request = RequestFactory().get("/")
    request.user = admin_user

    company_fields = CompanyAdmin(Company, admin.site).get_readonly_fields(request)
    customer_fields = CustomerAdmin(Customer, admin.site).get_readonly_fields(request)

    assert set(company_fields) == {'created_at', 'created_by', 'updated_at', 'updated_by'}
    assert {'deleted_at', 'deleted_by'} <= set(customer_fields)
