"""
Custom throttle classes for the admin console endpoints.
"""
from rest_framework.throttling import UserRateThrottle


class BulkActionThrottle(UserRateThrottle):
    """
    Throttle for bulk action endpoints.
    Each request can touch up to BULK_ACTION_MAX_TARGETS records.
    """
    scope = 'bulk_action'


class ReviewThrottle(UserRateThrottle):
    """
    Throttle for single approve/reject/reset decisions.
    """
    scope = 'review'
