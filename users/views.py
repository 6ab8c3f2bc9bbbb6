from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import CustomTokenObtainPairSerializer


class CustomLoginView(TokenObtainPairView):
    """Staff login. Returns the JWT pair plus the user's profile."""
    serializer_class = CustomTokenObtainPairSerializer
