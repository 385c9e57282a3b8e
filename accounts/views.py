# accounts/views.py - Users, staff directory and password API

import logging
import secrets
import string

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdminRole, is_admin_user
from core.views import DocumentViewSet
from .models import User, StaffProfile
from .serializers import UserSerializer, UserCreateSerializer, StaffProfileSerializer, ChangePasswordSerializer

logger = logging.getLogger(__name__)


def generate_random_password(length=10):
    """Generate a secure random password with mixed character types"""
    # Ensure at least one of each type
    password = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
    ]
    characters = string.ascii_letters + string.digits
    password += [secrets.choice(characters) for _ in range(length - 3)]
    secrets.SystemRandom().shuffle(password)
    return ''.join(password)


# ==================== API VIEWSETS ====================

class UserViewSet(viewsets.ViewSet):
    """REST API for login accounts"""
    permission_classes = [IsAuthenticated]

    def list(self, request):
        if not is_admin_user(request.user):
            return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)

        users = User.objects.all().order_by('role', 'first_name', 'last_name')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        return Response(UserSerializer(users, many=True).data)

    def retrieve(self, request, pk=None):
        try:
            user = User.objects.get(pk=pk)
        except (User.DoesNotExist, ValueError):
            return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

        # Users can only see their own data unless they're admin
        if not is_admin_user(request.user) and request.user.id != user.id:
            return Response({'error': 'Access denied'}, status=status.HTTP_403_FORBIDDEN)
        return Response(UserSerializer(user).data)

    def create(self, request):
        if not is_admin_user(request.user):
            return Response({'error': 'Admin access required'}, status=status.HTTP_403_FORBIDDEN)
        serializer = UserCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        user = serializer.save()
        logger.info("Created %s account %s", user.role, user.email)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='reset-password', permission_classes=[IsAdminRole])
    def reset_password(self, request, pk=None):
        """Give a user a freshly generated password"""
        try:
            user = User.objects.get(pk=pk)
        except (User.DoesNotExist, ValueError):
            return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)
        new_password = generate_random_password()
        user.set_password(new_password)
        user.save()
        logger.info("Password reset for %s by %s", user.email, request.user.email)
        return Response({'email': user.email, 'password': new_password})


class StaffProfileViewSet(DocumentViewSet):
    """Staff directory used by the portal audience picker"""
    document = StaffProfile
    serializer_class = StaffProfileSerializer
    entity_name = 'Staff member'
    campus_scoped = True
    soft_delete = True
    ordering = ('last_name', 'first_name')


class CurrentUserView(APIView):
    """API view for current user information"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data)


class ChangePasswordView(APIView):
    """API view for password changes"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = request.user
        if not user.check_password(serializer.validated_data['old_password']):
            return Response({'error': 'Invalid old password'}, status=status.HTTP_400_BAD_REQUEST)

        user.set_password(serializer.validated_data['new_password'])
        user.save()
        return Response({'message': 'Password changed successfully'})
