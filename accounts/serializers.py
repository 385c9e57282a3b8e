from rest_framework import serializers

from core.serializers import DocumentSerializer
from .models import User, StaffProfile


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'role', 'campus_id',
                  'is_active', 'date_joined']
        read_only_fields = ['id', 'date_joined']


class UserCreateSerializer(UserSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['password']

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class StaffProfileSerializer(DocumentSerializer):
    """Serializer for the MongoEngine staff directory"""
    document = StaffProfile

    user_id = serializers.CharField(max_length=64)
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=50)
    last_name = serializers.CharField(max_length=50)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    role = serializers.ChoiceField(choices=StaffProfile.ROLE_CHOICES, default='staff')
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    full_name = serializers.CharField(read_only=True)
    tag = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def validate_email(self, value):
        existing = StaffProfile.objects.filter(email=value).first()
        if existing and not (self.instance and existing.id == self.instance.id):
            raise serializers.ValidationError("A staff member with this email already exists.")
        return value


class ChangePasswordSerializer(serializers.Serializer):
    old_password = serializers.CharField(required=True)
    new_password = serializers.CharField(required=True, min_length=8)
    confirm_password = serializers.CharField(required=True)

    def validate(self, attrs):
        if attrs['new_password'] != attrs['confirm_password']:
            raise serializers.ValidationError("New passwords don't match")
        return attrs
