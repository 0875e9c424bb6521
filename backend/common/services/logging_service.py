"""
Logging service for admin actions taken from the console.
"""
from common.models import AdminActionLog
import logging

logger = logging.getLogger('security')


class LoggingService:
    """
    Centralized logging service for admin audit events.
    """

    @staticmethod
    def get_client_ip(request):
        """Extract client IP from request"""
        if request is None:
            return None
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            ip = x_forwarded_for.split(',')[0].strip()
        else:
            ip = request.META.get('REMOTE_ADDR')
        return ip

    # ==================== Admin Action Logging ====================

    @staticmethod
    def log_admin_action(admin_user, action, request, target_type='', target_id='', details=None):
        """
        Log admin actions (approve, reject, reset, bulk actions)

        Args:
            admin_user: Admin user performing the action
            action: AdminActionLog.Action choice
            request: HTTP request object
            target_type: Kind of entity affected (optional)
            target_id: Entity affected by the action (optional)
            details: Additional details dict (optional)
        """
        try:
            log = AdminActionLog.objects.create(
                admin_user=admin_user,
                action=action,
                target_type=target_type or '',
                target_id=str(target_id or ''),
                details=details or {},
                ip_address=LoggingService.get_client_ip(request)
            )

            # Also log to file
            target_str = f"→ {target_type} {target_id}" if target_id else ""
            logger.warning(f"[ADMIN ACTION] {admin_user.email} {action} {target_str}")

            return log
        except Exception as e:
            logger.error(f"Failed to create admin action log: {str(e)}")
            return None
