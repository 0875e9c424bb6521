"""
Management command to report the pending-review backlog.
Groups vendors and restaurants awaiting a decision by urgency.

Usage:
    python manage.py verification_backlog
    python manage.py verification_backlog --kind restaurant --min-urgency high
"""
from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.verification.constants import (
    URGENCY_RANK,
    VERIFICATION_KINDS,
    DisplayState,
    Urgency,
)
from apps.verification.services.classifier import build_application
from apps.verification.services.mutations import get_entity_model


class Command(BaseCommand):
    help = 'List vendor and restaurant applications waiting for review, grouped by urgency'

    def add_arguments(self, parser):
        parser.add_argument(
            '--kind',
            choices=VERIFICATION_KINDS,
            help='Only report one kind of business',
        )
        parser.add_argument(
            '--min-urgency',
            choices=Urgency.values,
            default=Urgency.NORMAL,
            help='Hide applications below this urgency (default: normal)',
        )

    def handle(self, *args, **options):
        kinds = [options['kind']] if options['kind'] else list(VERIFICATION_KINDS)
        min_rank = URGENCY_RANK[options['min_urgency']]
        now = timezone.now()

        groups = {urgency: [] for urgency in Urgency.values}
        for kind in kinds:
            model = get_entity_model(kind)
            for entity in model.objects.select_related('owner').order_by('created_at'):
                application = build_application(entity.to_record(), kind=kind, now=now)
                if application.display_state != DisplayState.PENDING_REVIEW:
                    continue
                if URGENCY_RANK[application.classification.urgency] < min_rank:
                    continue
                groups[application.classification.urgency].append(application)

        total = 0
        for urgency in reversed(Urgency.values):
            applications = groups[urgency]
            if URGENCY_RANK[urgency] < min_rank:
                continue
            style = self.style.ERROR if urgency == Urgency.URGENT else (
                self.style.WARNING if urgency == Urgency.HIGH else self.style.SUCCESS
            )
            self.stdout.write(style(f'{urgency.upper()} ({len(applications)})'))
            for application in sorted(applications, key=lambda a: -a.classification.days_waiting):
                self.stdout.write(
                    f'  - {application.kind} {application.id}: {application.name} '
                    f'({application.classification.days_waiting} days)'
                )
            total += len(applications)

        self.stdout.write(self.style.SUCCESS(f'{total} applications waiting for review'))
