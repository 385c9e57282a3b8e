# dashboards/serializers.py

from django.conf import settings
from rest_framework import serializers

from core.serializers import DocumentSerializer
from .models import Dashboard, DashboardElement


class DashboardElementSerializer(DocumentSerializer):
    document = DashboardElement

    dashboard_id = serializers.SerializerMethodField()
    type = serializers.ChoiceField(choices=DashboardElement.ELEMENT_TYPES, default='iframe')
    url = serializers.URLField()
    title = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    width_percent = serializers.IntegerField(
        min_value=1, max_value=100, default=settings.DASHBOARD_ELEMENT_DEFAULT_WIDTH
    )
    height_px = serializers.IntegerField(min_value=50, default=settings.DASHBOARD_ELEMENT_DEFAULT_HEIGHT)
    sort_order = serializers.IntegerField(required=False, allow_null=True)
    refresh_minutes = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    custom_css = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def get_dashboard_id(self, obj):
        return str(obj.dashboard.id)


class DashboardSerializer(DocumentSerializer):
    document = Dashboard

    title = serializers.CharField(max_length=150)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    sort_order = serializers.IntegerField(required=False, allow_null=True)
    created_by = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)

    def create(self, validated_data):
        request = self.context.get('request')
        if request is not None and request.user.is_authenticated:
            validated_data['created_by'] = str(request.user.pk)
        return super().create(validated_data)


class DashboardDetailSerializer(DashboardSerializer):
    elements = serializers.SerializerMethodField()

    def get_elements(self, obj):
        return DashboardElementSerializer(obj.ordered_elements(), many=True).data


class ElementOrderSerializer(serializers.Serializer):
    id = serializers.CharField()
    sort_order = serializers.IntegerField()
