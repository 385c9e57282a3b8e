# portal/serializers.py

from django.conf import settings
from rest_framework import serializers

from core.serializers import DocumentSerializer
from .models import PortalItem
from .visibility import VISIBILITY_MODES


class PortalItemSerializer(DocumentSerializer):
    document = PortalItem

    title = serializers.CharField(max_length=200)
    body = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    visibility_mode = serializers.ChoiceField(choices=VISIBILITY_MODES, default='roles')
    visible_to_roles = serializers.ListField(
        child=serializers.ChoiceField(choices=settings.USER_ROLES), required=False
    )
    user_ids = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    grade_levels = serializers.ListField(child=serializers.CharField(max_length=20), required=False)
    visible_from = serializers.DateTimeField(required=False, allow_null=True)
    visible_until = serializers.DateTimeField(required=False, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    sort_order = serializers.IntegerField(default=0)
    created_by = serializers.CharField(read_only=True)
    visibility_label = serializers.CharField(read_only=True)

    def validate(self, attrs):
        start = attrs.get('visible_from', getattr(self.instance, 'visible_from', None))
        end = attrs.get('visible_until', getattr(self.instance, 'visible_until', None))
        if start and end and end < start:
            raise serializers.ValidationError({'visible_until': "End date must be after the start date."})
        if attrs.get('visibility_mode') == 'roles':
            # Hand-picked people only apply to the students and staff modes
            attrs['user_ids'] = []
        return attrs

    def create(self, validated_data):
        request = self.context.get('request')
        if request is not None and request.user.is_authenticated:
            validated_data['created_by'] = str(request.user.pk)
        return super().create(validated_data)


class StudentCandidateSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(source='full_name', read_only=True)
    tag = serializers.SerializerMethodField()
    admission_number = serializers.CharField(read_only=True)

    def get_tag(self, obj):
        parts = [p for p in (obj.grade_level, obj.section) if p]
        return ' - '.join(parts)


class StaffCandidateSerializer(serializers.Serializer):
    id = serializers.CharField(source='user_id', read_only=True)
    name = serializers.CharField(source='full_name', read_only=True)
    tag = serializers.CharField(read_only=True)


class ToggleAllSerializer(serializers.Serializer):
    selected_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    candidate_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
