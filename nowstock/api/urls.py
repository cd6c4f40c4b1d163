from django.urls import include, path
from rest_framework.routers import DefaultRouter

from nowstock.api import views as v

app_name = "nowstock_api"

router = DefaultRouter()
router.register(r"movements", v.MovementViewSet, basename="movement")
router.register(r"stock", v.StockLevelViewSet, basename="stock")

urlpatterns = [
    path("", include(router.urls)),
]
