from django.contrib import admin
from django.urls import path, include
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)
from drf_spectacular.utils import extend_schema


# Wrap JWT views with schema decorators
class DecoratedTokenObtainPairView(TokenObtainPairView):
    @extend_schema(
        tags=['Users'],
        summary='Obtain JWT Token',
        description='Obtain a JWT access token and refresh token using email and password.'
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class DecoratedTokenRefreshView(TokenRefreshView):
    @extend_schema(
        tags=['Users'],
        summary='Refresh JWT Token',
        description='Obtain a new access token using a refresh token.'
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


urlpatterns = [
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # JWT Auth
    path('api/v1/auth/token/', DecoratedTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/v1/auth/token/refresh/', DecoratedTokenRefreshView.as_view(), name='token_refresh'),

    # Feature Modules
    path('api/v1/', include('health.urls')),
    path('api/v1/', include('users.urls')),
    path('api/v1/', include('core.organizations.urls')),
    path('api/v1/', include('projects.urls')),
]
