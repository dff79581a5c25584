"""Create the facility's default resource pools."""

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.resources.models import Resource, ResourcePool


DEFAULT_POOLS = [
    ("Sala de reuniones", ResourcePool.Kind.MEETING, -1),
    ("Laboratorio", ResourcePool.Kind.LAB, -1),
    ("Auditorio", ResourcePool.Kind.AUDITORIUM, -1),
    ("Coworking", ResourcePool.Kind.COWORKING, 40),
]


class Command(BaseCommand):
    help = 'Creates the default resource pools and their units (idempotent)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--desks',
            type=int,
            default=None,
            help='Override the number of coworking desks',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created_units = 0

        for name, kind, capacity in DEFAULT_POOLS:
            if kind == ResourcePool.Kind.COWORKING and options['desks'] is not None:
                capacity = options['desks']

            pool, created = ResourcePool.objects.get_or_create(
                name=name,
                defaults={'kind': kind, 'capacity': capacity},
            )
            if created:
                self.stdout.write(f"Created pool: {pool}")

            # Single-room pools get one unit named after the pool
            unit_names = [name] if capacity < 1 else [f"{name} {i:02d}" for i in range(1, capacity + 1)]
            for unit_name in unit_names:
                _, unit_created = Resource.objects.get_or_create(pool=pool, name=unit_name)
                created_units += int(unit_created)

        self.stdout.write(self.style.SUCCESS(f"Seeding finished, {created_units} new units"))
