"""
Serializers for verification app.
"""
from django.conf import settings
from rest_framework import serializers
from apps.verification.constants import VERIFICATION_KINDS, EntityKind, VerificationStatus
from apps.verification.models import VerificationAuditLog
from apps.verification.services.queue import QueueFilters, QueueRequest, SORT_FIELDS, SORT_ORDERS


def default_page_size():
    return getattr(settings, 'APPROVAL_QUEUE_PAGE_SIZE', 12)


class QueueQuerySerializer(serializers.Serializer):
    """Query parameters of the approval queue"""

    type = serializers.ChoiceField(
        choices=[('', 'All')] + [(kind, kind) for kind in VERIFICATION_KINDS],
        required=False,
        default='',
        allow_blank=True
    )
    status = serializers.ChoiceField(
        choices=VerificationStatus.choices,
        required=False,
        default='',
        allow_blank=True
    )
    search = serializers.CharField(required=False, default='', allow_blank=True, max_length=200)
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    limit = serializers.IntegerField(required=False, default=default_page_size, min_value=1)
    sort_by = serializers.ChoiceField(choices=SORT_FIELDS, required=False, default='created_at')
    sort_order = serializers.ChoiceField(choices=SORT_ORDERS, required=False, default='desc')

    def to_queue_request(self) -> QueueRequest:
        data = self.validated_data
        return QueueRequest(
            filters=QueueFilters(
                status=data['status'],
                search=data['search'],
                page=data['page'],
                limit=data['limit'],
                sort_by=data['sort_by'],
                sort_order=data['sort_order'],
            ),
            type=data['type'],
        )


class ApproveSerializer(serializers.Serializer):
    """Serializer for approving an application"""

    notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=2000)


class ReasonSerializer(serializers.Serializer):
    """Serializer for rejecting or resetting an application"""

    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=2000)


class TargetSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=EntityKind.choices)
    id = serializers.CharField(max_length=64)


class BulkVerificationSerializer(serializers.Serializer):
    """Bulk approve/reject/reset over a mixed vendor/restaurant selection"""

    action = serializers.CharField()
    targets = TargetSerializer(many=True, allow_empty=True)
    entity_type = serializers.ChoiceField(
        choices=[(kind, kind) for kind in VERIFICATION_KINDS],
        required=False,
        allow_null=True,
        default=None
    )
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=2000)


class SelectionOperationSerializer(serializers.Serializer):
    """Change the session-backed selection of one queue"""

    op = serializers.ChoiceField(choices=['toggle', 'select_all', 'clear'])
    kind = serializers.CharField(required=False, allow_blank=True)
    id = serializers.CharField(required=False, allow_blank=True)
    # Visible items: replaced into the selection on select_all and used for the checkbox state
    items = TargetSerializer(many=True, required=False, default=list)

    def validate(self, attrs):
        if attrs['op'] == 'toggle' and not (attrs.get('kind') and attrs.get('id')):
            raise serializers.ValidationError({'id': 'kind and id are required to toggle an item'})
        return attrs


class VerificationAuditLogSerializer(serializers.ModelSerializer):
    """Serializer for audit logs"""

    performed_by_email = serializers.EmailField(source='performed_by.email', read_only=True, default=None)
    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = VerificationAuditLog
        fields = [
            'id',
            'kind',
            'entity_id',
            'entity_name',
            'action',
            'action_display',
            'from_status',
            'to_status',
            'reason',
            'bulk',
            'performed_by_email',
            'timestamp'
        ]
        read_only_fields = fields
