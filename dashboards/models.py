# dashboards/models.py - Embeddable report dashboards

from mongoengine import (
    Document, StringField, IntField, BooleanField, DateTimeField, ReferenceField, CASCADE,
)
from datetime import datetime


class Dashboard(Document):
    title = StringField(max_length=150, required=True)
    description = StringField()
    campus_id = StringField(max_length=64)
    is_active = BooleanField(default=True)
    sort_order = IntField()
    created_by = StringField(max_length=64)  # Django User pk
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'dashboards',
        'indexes': ['campus_id', 'is_active'],
    }

    def __str__(self):
        return self.title

    def ordered_elements(self):
        """Elements by sort order; unordered elements go last"""
        elements = list(DashboardElement.objects.filter(dashboard=self))
        return sorted(
            elements,
            key=lambda e: (e.sort_order if e.sort_order is not None else 9999, e.created_at),
        )


class DashboardElement(Document):
    ELEMENT_TYPES = [
        ('iframe', 'Embedded Page'),
    ]

    dashboard = ReferenceField(Dashboard, required=True, reverse_delete_rule=CASCADE)
    type = StringField(max_length=20, choices=ELEMENT_TYPES, default='iframe')
    url = StringField(required=True)
    title = StringField(max_length=150)
    width_percent = IntField(min_value=1, max_value=100, default=100)
    height_px = IntField(min_value=50, default=400)
    sort_order = IntField()
    refresh_minutes = IntField(min_value=0)
    custom_css = StringField()
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'dashboard_elements',
        'indexes': ['dashboard', 'sort_order'],
    }

    def __str__(self):
        return self.title or self.url
