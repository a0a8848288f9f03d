# orders/urls.py

from rest_framework.routers import SimpleRouter

from orders.views import OrderViewSet

router = SimpleRouter()
router.register(r"", OrderViewSet, basename="order")

urlpatterns = router.urls
