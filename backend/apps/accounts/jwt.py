from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.views import TokenObtainPairView
from drf_spectacular.utils import extend_schema, OpenApiExample
import logging

logger = logging.getLogger('security')


class ConsoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT serializer for the admin console.
    Refuses banned and inactive accounts and adds the role to the token.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        return token

    def validate(self, attrs):
        try:
            data = super().validate(attrs)
        except AuthenticationFailed:
            logger.warning(f"Failed console login: {attrs.get('email', '')}")
            raise

        if self.user.is_banned:
            logger.warning(f"Banned user attempted login: {self.user.email}")
            raise AuthenticationFailed(
                "Your account has been banned. Please contact support."
            )

        if not self.user.is_active:
            logger.warning(f"Inactive user attempted login: {self.user.email}")
            raise AuthenticationFailed(
                "Your account is inactive. Please contact support."
            )

        logger.info(f"Successful login: {self.user.email}")
        data['role'] = self.user.role
        return data


@extend_schema(
    tags=['Authentication'],
    summary='Login with email and password',
    description='Obtain JWT access and refresh tokens for the admin console. '
                'Send the access token as `Authorization: Bearer <token>`.',
    examples=[
        OpenApiExample(
            'Login Request',
            value={
                'email': 'admin@example.com',
                'password': 'SecurePass123!'
            },
            request_only=True,
        ),
        OpenApiExample(
            'Banned User',
            value={
                'detail': 'Your account has been banned. Please contact support.'
            },
            response_only=True,
            status_codes=['401'],
        ),
    ],
)
class ConsoleTokenObtainPairView(TokenObtainPairView):
    serializer_class = ConsoleTokenObtainPairSerializer
