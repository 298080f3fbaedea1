"""Root URL configuration for the Lead Router."""
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    return JsonResponse({"status": "healthy"})


urlpatterns = [
    path('api/', include('allocation.urls')),
    path('health', health_check),
]
