from django.http import JsonResponse
from django.utils import timezone

from .env import validate_environment


def health(request):
    return JsonResponse({'status': 'ok', 'timestamp': timezone.now().isoformat()})


def env_status(request):
    return JsonResponse(validate_environment())
