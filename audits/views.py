import logging

from django.contrib.auth.decorators import login_required
from django.db.models import Prefetch
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt

from core.exceptions import DomainError
from core.permissions import is_admin
from core.utils import error_response, method_not_allowed, parse_json_body, server_error_response

from . import services
from .compliance import average_compliance_rate, compliance_band
from .models import AuditCompletion, AuditItem, AuditSection, AuditTemplate

logger = logging.getLogger(__name__)


def templates_for(user):
    qs = AuditTemplate.objects.all()
    if not is_admin(user):
        qs = qs.filter(created_by=user)
    return qs


def completions_for(user):
    qs = AuditCompletion.objects.prefetch_related('responses')
    if not is_admin(user):
        qs = qs.filter(completed_by=user)
    return qs


def _with_structure(queryset):
    return queryset.prefetch_related(
        Prefetch('sections', queryset=AuditSection.objects.order_by('order_index').prefetch_related(
            Prefetch('items', queryset=AuditItem.objects.order_by('order_index'))
        ))
    )


# ------------------------------
# Templates
# ------------------------------
@csrf_exempt
@login_required
def template_list(request):
    """List templates with completion statistics (GET) or create one (POST)."""
    if request.method == 'GET':
        templates = services.templates_with_stats(_with_structure(templates_for(request.user)))
        data = []
        for template in templates:
            entry = template.to_dict()
            entry.update(services.template_stats(template))
            data.append(entry)
        return JsonResponse({'templates': data})
    if request.method != 'POST':
        return method_not_allowed()

    try:
        template = services.create_template(request.user, parse_json_body(request))
        template = _with_structure(AuditTemplate.objects.all()).get(pk=template.pk)
        return JsonResponse({'success': True, 'template': template.to_dict()}, status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error creating audit template for user id=%s", request.user.id)
        return server_error_response()


@csrf_exempt
@login_required
def seed_default(request):
    if request.method != 'POST':
        return method_not_allowed()
    try:
        template, created = services.seed_default_template(request.user)
        template = _with_structure(AuditTemplate.objects.all()).get(pk=template.pk)
        return JsonResponse({'success': True, 'created': created, 'template': template.to_dict()},
                            status=201 if created else 200)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error seeding default audit template for user id=%s", request.user.id)
        return server_error_response()


@csrf_exempt
@login_required
def template_detail(request, template_id):
    template = get_object_or_404(_with_structure(templates_for(request.user)), id=template_id)

    if request.method == 'GET':
        data = template.to_dict()
        data.update(services.template_stats(template))
        return JsonResponse(data)
    if request.method in ('PUT', 'PATCH'):
        try:
            template = services.update_template(template, parse_json_body(request))
            template = _with_structure(AuditTemplate.objects.all()).get(id=template.id)
            return JsonResponse({'success': True, 'template': template.to_dict()})
        except DomainError as exc:
            return error_response(exc)
        except Exception:
            logger.exception("Error updating audit template id=%s", template_id)
            return server_error_response()
    if request.method != 'DELETE':
        return method_not_allowed()

    try:
        name = template.name
        template.delete()
        logger.info("Audit template deleted by user %s: %s", request.user.id, name)
        return JsonResponse({'success': True, 'message': 'Template deleted successfully'})
    except Exception:
        logger.exception("Error deleting audit template id=%s", template_id)
        return server_error_response()


# ------------------------------
# Completions
# ------------------------------
@csrf_exempt
@login_required
def completion_list(request):
    """List completions (filtered by query parameters) or submit a new one."""
    if request.method == 'GET':
        try:
            completions = services.filter_completions(completions_for(request.user), request.GET)
            return JsonResponse({'completions': [c.to_dict() for c in completions]})
        except DomainError as exc:
            return error_response(exc)

    if request.method != 'POST':
        return method_not_allowed()

    try:
        completion = services.submit_completion(
            request.user, parse_json_body(request), templates=templates_for(request.user),
        )
        return JsonResponse({'success': True, 'completion': completion.to_dict()}, status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error submitting audit completion for user id=%s", request.user.id)
        return server_error_response()


@login_required
def completion_detail(request, completion_id):
    if request.method != 'GET':
        return method_not_allowed()
    completion = get_object_or_404(completions_for(request.user).select_related('template'), id=completion_id)
    return JsonResponse(completion.to_dict(detailed=True))


@login_required
def compliance_overview(request):
    """Average compliance across the user's completed audits."""
    rates = list(completions_for(request.user).values_list('compliance_rate', flat=True))
    average = average_compliance_rate(rates)
    return JsonResponse({
        'total_completions': len(rates),
        'average_compliance_rate': average,
        'band': compliance_band(average) if rates else None,
    })
