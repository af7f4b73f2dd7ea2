import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt

from core.exceptions import DomainError
from core.permissions import admin_required
from core.utils import (
    bind_form, error_response, form_error_response, method_not_allowed,
    parse_json_body, server_error_response,
)

from .forms import AdminUserUpdateForm, UserProfileForm, UserSettingsForm
from .models import User
from .subscriptions import SUBSCRIPTION_TIERS, format_price

logger = logging.getLogger(__name__)


# ------------------------------
# Current User
# ------------------------------
@csrf_exempt
@login_required
def current_user(request):
    """Return (GET) or partially update (PUT) the signed-in user's profile."""
    user = request.user
    if request.method == 'GET':
        return JsonResponse(user.to_dict())
    if request.method != 'PUT':
        return method_not_allowed()

    try:
        form = bind_form(UserProfileForm, parse_json_body(request), instance=user)
        if not form.is_valid():
            return form_error_response(form)
        form.save()
        logger.info("Profile updated for user id=%s", user.id)
        return JsonResponse({'success': True, 'message': 'Profile updated successfully', 'user': user.to_dict()})
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error updating profile for user id=%s", user.id)
        return server_error_response()


@csrf_exempt
@login_required
def user_settings(request):
    if request.method != 'PUT':
        return method_not_allowed()

    user = request.user
    try:
        form = bind_form(UserSettingsForm, parse_json_body(request), instance=user)
        if not form.is_valid():
            return form_error_response(form)
        form.save()
        return JsonResponse({'success': True, 'message': 'Settings updated successfully', 'user': user.to_dict()})
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error updating settings for user id=%s", user.id)
        return server_error_response()


# ------------------------------
# Admin: Users
# ------------------------------
@login_required
@admin_required
def admin_user_list(request):
    if request.method != 'GET':
        return method_not_allowed()
    users = User.objects.order_by('-date_joined')
    return JsonResponse({'users': [u.to_dict() for u in users]})


@csrf_exempt
@login_required
@admin_required
def admin_user_detail(request, user_id):
    """Admins change a user's role or subscription status, or delete the account."""
    target = get_object_or_404(User, id=user_id)

    if request.method == 'DELETE':
        try:
            username = target.username
            target.delete()
            logger.info("User deleted by admin %s: %s", request.user.id, username)
            return JsonResponse({'success': True, 'message': 'User deleted successfully'})
        except Exception:
            logger.exception("Error deleting user id=%s", user_id)
            return server_error_response()

    if request.method != 'PUT':
        return method_not_allowed()

    try:
        form = bind_form(AdminUserUpdateForm, parse_json_body(request), instance=target)
        if not form.is_valid():
            return form_error_response(form)
        form.save()
        logger.info("User id=%s updated by admin %s: role=%s subscription=%s",
                    target.id, request.user.id, target.role, target.subscription_status)
        return JsonResponse({'success': True, 'message': 'User updated successfully', 'user': target.to_dict()})
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error updating user id=%s", user_id)
        return server_error_response()


@login_required
@admin_required
def admin_stats(request):
    users = list(User.objects.only('subscription_status'))
    paid = sum(1 for u in users if u.subscription_status == User.SUBSCRIPTION_PAID)
    return JsonResponse({
        'total_users': len(users),
        'total_subscriptions': paid,
        'subscription_breakdown': [
            {'tier': 'Trial', 'count': len(users) - paid},
            {'tier': 'Paid', 'count': paid},
        ],
    })


# ------------------------------
# Subscription Tiers
# ------------------------------
def subscription_tiers(request):
    tiers = {}
    for key, tier in SUBSCRIPTION_TIERS.items():
        tiers[key] = {
            **tier,
            'price': float(tier['price']),
            'display_price': format_price(tier['price'], tier['currency']),
        }
    return JsonResponse(tiers)
