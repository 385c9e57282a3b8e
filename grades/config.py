# grades/config.py - Typed gradebook configuration over key/value entries

import json
from datetime import datetime
import logging

from mongoengine import Q

from .models import GradebookConfigEntry

logger = logging.getLogger(__name__)

ASSIGNMENT_SORTING_CHOICES = ['due_date', 'assigned_date', 'title', 'points']

DEFAULT_CONFIG = {
    'assignment_sorting': 'due_date',
    'auto_save_final_grades': True,
    'weight_assignment_types': True,
    'weight_assignments': True,
    'default_assigned_date': True,
    'default_due_date': True,
    'anomalous_max': 100,
    'latency': None,
    'breakoff_grades': {},
    'comment_codes': {},
}

BOOLEAN_KEYS = {
    'auto_save_final_grades',
    'weight_assignment_types',
    'weight_assignments',
    'default_assigned_date',
    'default_due_date',
}
INTEGER_KEYS = {'anomalous_max', 'latency'}
MAPPING_KEYS = {'breakoff_grades', 'comment_codes'}


def parse_value(key, raw):
    """Turn a stored string back into the typed setting"""
    if key in BOOLEAN_KEYS:
        return str(raw).strip().lower() in ('true', '1', 'yes', 'y')
    if key in INTEGER_KEYS:
        if raw in (None, ''):
            return None if key == 'latency' else DEFAULT_CONFIG[key]
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric gradebook setting %s=%r", key, raw)
            return DEFAULT_CONFIG[key]
    if key in MAPPING_KEYS:
        try:
            value = json.loads(raw) if raw else {}
        except ValueError:
            logger.warning("Ignoring malformed gradebook setting %s=%r", key, raw)
            return {}
        return value if isinstance(value, dict) else {}
    return raw


def serialize_value(key, value):
    """Store a typed setting as text"""
    if key in BOOLEAN_KEYS:
        return 'true' if value else 'false'
    if key in MAPPING_KEYS:
        return json.dumps(value or {}, sort_keys=True)
    if value is None:
        return ''
    return str(value)


def _level(entry):
    # School-wide first, then campus, then course period
    if entry.course_period_id:
        return 2
    if entry.campus_id:
        return 1
    return 0


def get_config(campus_id=None, course_period_id=None):
    """Effective gradebook settings for a campus (and optionally a course period)"""
    scope = Q(campus_id=None)
    if campus_id:
        scope = scope | Q(campus_id=campus_id)
    entries = GradebookConfigEntry.objects.filter(scope)

    applicable = []
    for entry in entries:
        if entry.course_period_id and entry.course_period_id != course_period_id:
            continue
        applicable.append(entry)

    config = dict(DEFAULT_CONFIG)
    config['breakoff_grades'] = {}
    config['comment_codes'] = {}
    for entry in sorted(applicable, key=_level):
        if entry.config_key in DEFAULT_CONFIG:
            config[entry.config_key] = parse_value(entry.config_key, entry.config_value)
        else:
            config[entry.config_key] = entry.config_value
    return config


def set_config_value(key, value, campus_id=None, course_period_id=None):
    entry = GradebookConfigEntry.objects.filter(
        campus_id=campus_id or None,
        course_period_id=course_period_id or None,
        config_key=key,
    ).first()
    if entry is None:
        entry = GradebookConfigEntry(
            campus_id=campus_id or None,
            course_period_id=course_period_id or None,
            config_key=key,
        )
    entry.config_value = serialize_value(key, value)
    entry.updated_at = datetime.now()
    entry.save()
    return entry


def save_config(values, campus_id=None, course_period_id=None):
    """Store every provided setting, then return the effective configuration"""
    for key, value in values.items():
        set_config_value(key, value, campus_id, course_period_id)
    logger.info("Saved %d gradebook setting(s) for campus %s", len(values), campus_id or 'all')
    return get_config(campus_id, course_period_id)
