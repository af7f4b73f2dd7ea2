import json
import logging
from decimal import ROUND_HALF_UP, Decimal

from django.forms.models import model_to_dict
from django.http import JsonResponse

from .exceptions import DomainError

logger = logging.getLogger(__name__)


def round_half_up(value) -> int:
    """Round to the nearest integer, .5 always away from zero."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def clean_text(value):
    """Trim a free-text value; blank or missing becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_json_body(request) -> dict:
    """Decode a JSON object body or raise DomainError."""
    try:
        payload = json.loads(request.body or b'{}')
    except (ValueError, UnicodeDecodeError):
        raise DomainError("Request body must be valid JSON", code='INVALID_JSON')
    if not isinstance(payload, dict):
        raise DomainError("Request body must be a JSON object", code='INVALID_JSON')
    return payload


def error_response(exc: DomainError) -> JsonResponse:
    return JsonResponse(exc.as_dict(), status=exc.status_code)


def server_error_response() -> JsonResponse:
    return JsonResponse({'success': False, 'message': 'Internal server error'}, status=500)


def method_not_allowed() -> JsonResponse:
    return JsonResponse({'success': False, 'message': 'Invalid request'}, status=405)


def bind_form(form_class, payload: dict, instance=None):
    """
    Bind a ModelForm from a JSON payload.

    Fields absent from the payload keep their stored value, or the model
    default when creating.
    """
    fields = list(form_class._meta.fields)
    source = instance if instance is not None else form_class._meta.model()
    data = model_to_dict(source, fields=fields)
    data.update({key: value for key, value in payload.items() if key in fields})
    return form_class(data=data, instance=instance)


def form_error_response(form) -> JsonResponse:
    errors = {field: [str(message) for message in messages] for field, messages in form.errors.items()}
    return JsonResponse(
        {'success': False, 'message': 'Invalid input data', 'code': 'VALIDATION_ERROR', 'errors': errors},
        status=400,
    )
