from django.urls import path, include
from rest_framework.routers import SimpleRouter

from apps.exchange.api.v1.views import ExchangeRateViewSet

router = SimpleRouter()
router.register(r'', ExchangeRateViewSet, basename='exchange')

urlpatterns = [
    path('', include(router.urls)),
]
