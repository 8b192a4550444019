from django.urls import path, include
from rest_framework.routers import SimpleRouter

from apps.transfers.api.v1.views import TransferViewSet

router = SimpleRouter()
router.register(r'', TransferViewSet, basename='transfers')

urlpatterns = [
    path('', include(router.urls)),
]
