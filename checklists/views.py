import logging
import uuid

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt

from core.exceptions import DomainError
from core.permissions import access_denied, is_manager_or_admin
from core.utils import error_response, method_not_allowed, parse_json_body, server_error_response

from . import services
from .exceptions import ChecklistValidationError
from .models import Checklist
from .scheduling import Cadence, preview

logger = logging.getLogger(__name__)


def _checklist_queryset():
    return Checklist.objects.select_related('schedule').prefetch_related('items')


def _index(value, name):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ChecklistValidationError(f"{name} must be an integer")
    return value


# ------------------------------
# Checklists
# ------------------------------
@csrf_exempt
@login_required
def checklist_list(request):
    """List checklists (GET) or create one (POST, managers and admins only)."""
    if request.method == 'GET':
        checklists = _checklist_queryset()
        if request.GET.get('all') != '1':
            checklists = checklists.filter(is_active=True)
        return JsonResponse({'checklists': [c.to_dict() for c in checklists]})
    if request.method != 'POST':
        return method_not_allowed()
    if not is_manager_or_admin(request.user):
        return access_denied()

    try:
        checklist = services.create_checklist(request.user, parse_json_body(request))
        return JsonResponse({'success': True, 'checklist': checklist.to_dict()}, status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error creating checklist for user id=%s", request.user.id)
        return server_error_response()


@csrf_exempt
@login_required
def checklist_detail(request, checklist_id):
    checklist = get_object_or_404(_checklist_queryset(), id=checklist_id)

    if request.method == 'GET':
        return JsonResponse(checklist.to_dict())
    if request.method not in ('PUT', 'DELETE'):
        return method_not_allowed()
    if not is_manager_or_admin(request.user):
        return access_denied()

    if request.method == 'DELETE':
        try:
            name = checklist.name
            checklist.delete()
            logger.info("Checklist deleted by user %s: %s", request.user.id, name)
            return JsonResponse({'success': True, 'message': 'Checklist deleted successfully'})
        except Exception:
            logger.exception("Error deleting checklist id=%s", checklist_id)
            return server_error_response()

    try:
        checklist = services.update_checklist(checklist, parse_json_body(request))
        checklist = _checklist_queryset().get(pk=checklist.pk)
        return JsonResponse({'success': True, 'checklist': checklist.to_dict()})
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error updating checklist id=%s", checklist_id)
        return server_error_response()


@csrf_exempt
@login_required
def checklist_reorder(request, checklist_id):
    if request.method != 'POST':
        return method_not_allowed()
    if not is_manager_or_admin(request.user):
        return access_denied()
    checklist = get_object_or_404(Checklist, id=checklist_id)

    try:
        payload = parse_json_body(request)
        source_index = _index(payload.get('source_index'), 'source_index')
        if source_index is None:
            raise ChecklistValidationError("source_index is required")
        destination_index = _index(payload.get('destination_index'), 'destination_index')
        services.reorder_checklist(checklist, source_index, destination_index)
        checklist = _checklist_queryset().get(pk=checklist.pk)
        return JsonResponse({'success': True, 'checklist': checklist.to_dict()})
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error reordering checklist id=%s", checklist_id)
        return server_error_response()


# ------------------------------
# Schedules
# ------------------------------
@csrf_exempt
@login_required
def checklist_schedule(request, checklist_id):
    """Show the schedule with an upcoming preview (GET) or create/replace it (POST)."""
    checklist = get_object_or_404(_checklist_queryset(), id=checklist_id)

    if request.method == 'GET':
        schedule = getattr(checklist, 'schedule', None)
        if schedule is None:
            return JsonResponse({'schedule': None, 'preview': []})
        return JsonResponse({
            'schedule': schedule.to_dict(),
            'preview': preview(schedule, timezone.now().date()),
        })
    if request.method != 'POST':
        return method_not_allowed()
    if not is_manager_or_admin(request.user):
        return access_denied()

    try:
        schedule = services.save_schedule(checklist, parse_json_body(request))
        return JsonResponse({'success': True, 'schedule': schedule.to_dict()})
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error saving schedule for checklist id=%s", checklist_id)
        return server_error_response()


@login_required
def checklist_calendar(request):
    if request.method != 'GET':
        return method_not_allowed()
    try:
        data = services.calendar_instances(request.GET.get('from'), request.GET.get('to'))
        return JsonResponse(data)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error building checklist calendar")
        return server_error_response()


@login_required
def checklist_due(request):
    """Checklist instances still required today."""
    if request.method != 'GET':
        return method_not_allowed()
    try:
        return JsonResponse(services.due_instances())
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error listing due checklists")
        return server_error_response()


@login_required
def checklist_summaries(request):
    if request.method != 'GET':
        return method_not_allowed()
    try:
        checklist_id = request.GET.get('checklist_id') or None
        if checklist_id:
            try:
                checklist_id = uuid.UUID(checklist_id)
            except ValueError:
                raise ChecklistValidationError("checklist_id must be a valid id")
        cadence = request.GET.get('cadence') or None
        if cadence and cadence not in Cadence.values:
            raise ChecklistValidationError("Cadence must be DAILY, DOW, or WEEKLY")
        data = services.summaries(request.GET.get('from'), request.GET.get('to'),
                                  checklist_id=checklist_id, cadence=cadence)
        return JsonResponse(data)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error building checklist summaries")
        return server_error_response()


# ------------------------------
# Completion
# ------------------------------
@csrf_exempt
@login_required
def checklist_complete(request, checklist_id):
    """Complete one scheduled instance; every required item must be checked."""
    if request.method != 'POST':
        return method_not_allowed()
    checklist = get_object_or_404(_checklist_queryset(), id=checklist_id)

    try:
        payload = parse_json_body(request)
        completion = services.complete_instance(
            request.user,
            checklist,
            payload.get('target_date'),
            payload.get('items') or [],
            confirmation_note=payload.get('confirmation_note'),
        )
        return JsonResponse({'success': True, 'status': 'COMPLETED', 'completion': completion.to_dict()},
                            status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error completing checklist id=%s", checklist_id)
        return server_error_response()
