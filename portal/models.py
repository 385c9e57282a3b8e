# portal/models.py - Notes published on the student/parent/staff portal

from mongoengine import Document, StringField, ListField, DateTimeField, BooleanField, IntField
from datetime import datetime

from .visibility import VISIBILITY_MODES, ROLES, visibility_summary


class PortalItem(Document):
    title = StringField(max_length=200, required=True)
    body = StringField()
    campus_id = StringField(max_length=64)

    visibility_mode = StringField(max_length=10, choices=VISIBILITY_MODES, default=ROLES)
    visible_to_roles = ListField(StringField(max_length=10))
    user_ids = ListField(StringField(max_length=64))       # students or staff, depending on the mode
    grade_levels = ListField(StringField(max_length=20))   # picker grade filter, kept for editing
    visible_from = DateTimeField()
    visible_until = DateTimeField()

    is_active = BooleanField(default=True)
    sort_order = IntField(default=0)
    created_by = StringField(max_length=64)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'portal_items',
        'indexes': ['campus_id', 'is_active', 'visibility_mode'],
        'ordering': ['sort_order', '-created_at'],
    }

    def __str__(self):
        return self.title

    @property
    def visibility_label(self):
        return visibility_summary(self.visibility_mode, self.visible_to_roles, self.user_ids)
