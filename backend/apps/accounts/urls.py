from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .jwt import ConsoleTokenObtainPairView

app_name = "accounts"

urlpatterns = [
    path("token/", ConsoleTokenObtainPairView.as_view(), name="token"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
]
