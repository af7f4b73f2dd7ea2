import logging
from functools import wraps

from django.http import JsonResponse

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "Access denied. You don't have permission to view this page."


def is_admin(user) -> bool:
    """Explicit admin role or Django superuser flag."""
    if not getattr(user, 'is_authenticated', False):
        return False
    return bool(user.is_superuser or getattr(user, 'role', None) == 'admin')


def is_manager_or_admin(user) -> bool:
    return is_admin(user) or getattr(user, 'role', None) == 'manager'


def access_denied() -> JsonResponse:
    return JsonResponse({'success': False, 'message': ACCESS_DENIED_MESSAGE, 'code': 'ACCESS_DENIED'}, status=403)


def role_required(check):
    """Reject the request with 403 before the view runs when ``check(user)`` fails."""

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if not check(request.user):
                logger.info("Access denied for user id=%s on %s", getattr(request.user, 'id', None), request.path)
                return access_denied()
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator


admin_required = role_required(is_admin)
manager_required = role_required(is_manager_or_admin)
