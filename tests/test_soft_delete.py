import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import InvalidArgumentError
from tests.testapp.models import Company, Customer

pytestmark = pytest.mark.django_db


def _pair_is_consistent(instance):
    return (instance.deleted_at is None) == (instance.deleted_by is None)


def test_new_customer_is_live(customer):
    assert not customer.is_deleted
    assert customer.deleted_at is None
    assert customer.deleted_by is None


def test_mark_deleted_requires_actor(customer):
    with pytest.raises(InvalidArgumentError):
        customer.mark_deleted(None)

    assert customer.deleted_at is None
    assert customer.deleted_by is None


def test_mark_deleted_without_actor_leaves_deleted_customer_untouched(customer):
    customer.mark_deleted(3)
    deleted_at = customer.deleted_at

    with pytest.raises(InvalidArgumentError):
        customer.mark_deleted(None)

    assert customer.deleted_at == deleted_at
    assert customer.deleted_by == 3


def test_mark_deleted_sets_pair(customer):
    customer.mark_deleted(42)

    assert customer.is_deleted
    assert customer.deleted_at is not None
    assert customer.deleted_by == 42


def test_mark_deleted_does_not_persist(customer):
    customer.mark_deleted(42)

    assert Customer.objects.filter(pk=customer.pk).exists()
    assert Customer.all_objects.get(pk=customer.pk).deleted_at is None


def test_restore_clears_pair(customer):
    customer.mark_deleted(42)
    customer.restore()

    assert not customer.is_deleted
    assert customer.deleted_at is None
    assert customer.deleted_by is None


def test_restore_on_live_customer_is_noop(customer):
    customer.restore()
    assert not customer.is_deleted


def test_double_delete_restamps(customer):
    customer.mark_deleted(1)
    first = customer.deleted_at

    customer.mark_deleted(2)

    assert customer.deleted_by == 2
    assert customer.deleted_at >= first


def test_default_manager_hides_deleted(customer, as_actor):
    live = Customer.objects.create(name="Ola Nordmann")
    customer.mark_deleted(42)
    with as_actor(42):
        customer.save()

    assert list(Customer.objects.all()) == [live]
    assert set(Customer.all_objects.all()) == {customer, live}
    assert set(Customer.objects.with_deleted()) == {customer, live}
    assert list(Customer.objects.only_deleted()) == [customer]


def test_saving_deleted_customer_stamps_modification(customer, as_actor):
    customer.mark_deleted(42)
    with as_actor(42):
        customer.save()

    stored = Customer.all_objects.get(pk=customer.pk)
    assert stored.is_deleted
    assert stored.deleted_by == 42
    assert stored.updated_by == 42
    assert stored.created_by == 7


def test_restore_and_save_brings_customer_back(customer, as_actor):
    customer.mark_deleted(42)
    customer.save()

    customer.restore()
    with as_actor(43):
        customer.save()

    stored = Customer.objects.get(pk=customer.pk)
    assert stored.deleted_at is None
    assert stored.deleted_by is None
    assert stored.updated_by == 43


def test_delete_is_soft(customer, as_actor):
    with as_actor(42):
        result = customer.delete()

    assert result == (1, {'testapp.Customer': 1})
    stored = Customer.all_objects.get(pk=customer.pk)
    assert stored.is_deleted
    assert stored.deleted_by == 42
    assert not Customer.objects.filter(pk=customer.pk).exists()


def test_delete_with_explicit_actor(customer):
    customer.delete(actor_id=5)
    assert Customer.all_objects.get(pk=customer.pk).deleted_by == 5


def test_delete_without_any_actor_fails(customer):
    with pytest.raises(InvalidArgumentError):
        customer.delete()

    assert not customer.is_deleted
    assert Customer.objects.filter(pk=customer.pk).exists()


def test_queryset_delete_is_soft(customer, as_actor):
    other = Customer.objects.create(name="Ola Nordmann")

    with as_actor(42):
        count, per_model = Customer.objects.filter(pk__in=[customer.pk, other.pk]).delete()

    assert count == 2
    assert per_model == {'testapp.Customer': 2}
    assert Customer.objects.count() == 0
    assert Customer.all_objects.count() == 2
    assert all(c.deleted_by == 42 and c.updated_by == 42 for c in Customer.all_objects.all())


def test_queryset_mark_deleted_requires_actor(customer):
    with pytest.raises(InvalidArgumentError):
        Customer.objects.mark_deleted(None)

    assert Customer.objects.filter(pk=customer.pk).exists()


def test_manager_restore(customer):
    Customer.objects.mark_deleted(9)
    assert Customer.objects.count() == 0

    restored = Customer.objects.restore()

    assert restored == 1
    stored = Customer.objects.get(pk=customer.pk)
    assert stored.deleted_by is None


def test_deletion_pair_is_enforced_by_database(customer):
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Customer.all_objects.filter(pk=customer.pk).update(deleted_at=timezone.now())


def test_pair_invariant_holds_through_lifecycle(customer, as_actor):
    states = []
    with as_actor(42):
        customer.save()
        states.append(Customer.all_objects.get(pk=customer.pk))
        customer.delete()
        states.append(Customer.all_objects.get(pk=customer.pk))
        Customer.objects.restore()
        states.append(Customer.all_objects.get(pk=customer.pk))

    assert all(_pair_is_consistent(state) for state in states)
    assert [state.is_deleted for state in states] == [False, True, False]


def test_related_managers_hide_deleted_customers(company, as_actor):
    with as_actor(7):
        kept = Customer.objects.create(name="Kept", company=company)
        gone = Customer.objects.create(name="Gone", company=company)
        gone.delete()

    assert list(company.customers.all()) == [kept]


def test_soft_delete_metadata_snapshot(customer):
    customer.mark_deleted(42)
    metadata = customer.soft_delete_metadata

    assert metadata.is_deleted
    assert metadata.deleted_by == 42
    assert metadata.audit.created_by == 7


def test_auditable_only_model_has_no_soft_delete(company):
    assert not hasattr(Company, 'all_objects')
    assert not hasattr(company, 'mark_deleted')
