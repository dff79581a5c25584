from io import StringIO

import pytest
from django.core.management import call_command

from apps.resources.models import Resource, ResourcePool


@pytest.mark.django_db
def test_seed_resources_is_idempotent():
    call_command("seed_resources", "--desks", "3", stdout=StringIO())
    call_command("seed_resources", "--desks", "3", stdout=StringIO())

    coworking = ResourcePool.objects.get(kind=ResourcePool.Kind.COWORKING)
    assert coworking.capacity == 3
    assert coworking.resources.count() == 3
    assert ResourcePool.objects.count() == 4
    # Room pools hold a single unit named after the pool
    assert Resource.objects.filter(pool__kind=ResourcePool.Kind.AUDITORIUM).count() == 1
