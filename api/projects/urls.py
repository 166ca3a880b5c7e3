from rest_framework.routers import DefaultRouter
from .views import PlatformViewSet, ProjectViewSet

router = DefaultRouter()
router.include_root_view = False  # Disable API root view to avoid "api" tag
router.register(r'platforms', PlatformViewSet, basename='platform')
router.register(r'projects', ProjectViewSet, basename='project')

urlpatterns = router.urls
