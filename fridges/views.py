import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt

from core.exceptions import DomainError
from core.permissions import is_admin
from core.utils import (
    bind_form, error_response, form_error_response, method_not_allowed,
    parse_json_body, server_error_response,
)

from .forms import FridgeForm, LabelForm, TemperatureLogForm, TimeWindowForm
from .models import Fridge, Label, TemperatureLog
from .reports import fridge_overview, write_compliance_report, write_temperature_logs

logger = logging.getLogger(__name__)


def fridges_for(user):
    qs = Fridge.objects.all()
    if not is_admin(user):
        qs = qs.filter(user=user)
    return qs


# ------------------------------
# Fridges
# ------------------------------
@csrf_exempt
@login_required
def fridge_list(request):
    """List the user's fridges or register a new one."""
    if request.method == 'GET':
        fridges = Fridge.objects.filter(user=request.user)
        return JsonResponse({'fridges': [f.to_dict() for f in fridges]})
    if request.method != 'POST':
        return method_not_allowed()

    try:
        form = bind_form(FridgeForm, parse_json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        fridge = form.save(commit=False)
        fridge.user = request.user
        fridge.save()
        logger.info("Fridge created by user id=%s: %s", request.user.id, fridge.name)
        return JsonResponse({'success': True, 'message': 'Fridge created successfully', 'fridge': fridge.to_dict()},
                            status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error creating fridge for user id=%s", request.user.id)
        return server_error_response()


@csrf_exempt
@login_required
def fridge_detail(request, fridge_id):
    fridge = get_object_or_404(fridges_for(request.user), id=fridge_id)

    if request.method == 'GET':
        return JsonResponse(fridge.to_dict())

    if request.method == 'DELETE':
        try:
            name = fridge.name
            fridge.delete()
            logger.info("Fridge deleted by user %s: %s", request.user.id, name)
            return JsonResponse({'success': True, 'message': 'Fridge deleted successfully'})
        except Exception:
            logger.exception("Error deleting fridge id=%s", fridge_id)
            return server_error_response()

    if request.method != 'PATCH':
        return method_not_allowed()

    try:
        form = bind_form(FridgeForm, parse_json_body(request), instance=fridge)
        if not form.is_valid():
            return form_error_response(form)
        form.save()
        return JsonResponse({'success': True, 'message': 'Fridge updated successfully', 'fridge': fridge.to_dict()})
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error updating fridge id=%s", fridge_id)
        return server_error_response()


# ------------------------------
# Temperature Logs
# ------------------------------
@csrf_exempt
@login_required
def fridge_logs(request, fridge_id):
    """List readings (GET) or record a new one (POST); the alert flag is derived from the fridge range."""
    fridge = get_object_or_404(fridges_for(request.user), id=fridge_id)

    if request.method == 'GET':
        return JsonResponse({'logs': [log.to_dict() for log in fridge.logs.all()]})
    if request.method != 'POST':
        return method_not_allowed()

    try:
        form = bind_form(TemperatureLogForm, parse_json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        log = form.save(commit=False)
        log.fridge = fridge
        log.save()
        return JsonResponse({'success': True, 'message': 'Temperature logged', 'log': log.to_dict()}, status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error logging temperature for fridge id=%s", fridge_id)
        return server_error_response()


# ------------------------------
# Time Windows
# ------------------------------
@csrf_exempt
@login_required
def fridge_time_windows(request, fridge_id):
    fridge = get_object_or_404(fridges_for(request.user), id=fridge_id)

    if request.method == 'GET':
        return JsonResponse({'time_windows': [w.to_dict() for w in fridge.time_windows.all()]})
    if request.method != 'POST':
        return method_not_allowed()

    try:
        form = bind_form(TimeWindowForm, parse_json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        window = form.save(commit=False)
        window.fridge = fridge
        window.save()
        logger.info("Time window %r added to fridge id=%s", window.label, fridge.id)
        return JsonResponse({'success': True, 'time_window': window.to_dict()}, status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error creating time window for fridge id=%s", fridge_id)
        return server_error_response()


# ------------------------------
# Labels
# ------------------------------
@csrf_exempt
@login_required
def label_list(request):
    if request.method == 'GET':
        labels = Label.objects.filter(user=request.user)
        return JsonResponse({'labels': [label.to_dict() for label in labels]})
    if request.method != 'POST':
        return method_not_allowed()

    try:
        form = bind_form(LabelForm, parse_json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        if Label.objects.filter(user=request.user, name=form.cleaned_data['name']).exists():
            raise DomainError("A label with this name already exists", code='DUPLICATE_LABEL')
        label = form.save(commit=False)
        label.user = request.user
        label.save()
        return JsonResponse({'success': True, 'label': label.to_dict()}, status=201)
    except DomainError as exc:
        return error_response(exc)
    except Exception:
        logger.exception("Error creating label for user id=%s", request.user.id)
        return server_error_response()


# ------------------------------
# Exports
# ------------------------------
def _csv_response(filename):
    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _user_logs(user):
    return (
        TemperatureLog.objects.filter(fridge__user=user)
        .select_related('fridge')
        .order_by('-created_at')
    )


@login_required
def export_temperature_logs(request):
    if request.method != 'GET':
        return method_not_allowed()
    try:
        response = _csv_response('temperature-logs.csv')
        count = write_temperature_logs(response, _user_logs(request.user))
        logger.info("Exported %d temperature log(s) for user id=%s", count, request.user.id)
        return response
    except Exception:
        logger.exception("Error exporting temperature logs for user id=%s", request.user.id)
        return server_error_response()


@login_required
def export_compliance_report(request):
    """Summary and statistics rows followed by every reading, as CSV."""
    if request.method != 'GET':
        return method_not_allowed()
    try:
        fridges = Fridge.objects.filter(user=request.user).prefetch_related('logs')
        response = _csv_response('compliance-report.csv')
        write_compliance_report(response, fridge_overview(fridges), _user_logs(request.user))
        return response
    except Exception:
        logger.exception("Error exporting compliance report for user id=%s", request.user.id)
        return server_error_response()
