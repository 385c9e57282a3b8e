# billing/services.py - Subscriptions and charge totals

import logging
from datetime import date, datetime

from core.breakdown import aggregate
from core.campus import scope_to_campus
from core.exceptions import NotFound
from core.views import get_document_or_none
from .models import SchoolService, StudentService, GradeCharge

logger = logging.getLogger(__name__)


def set_grade_charges(service, charges):
    """Replace every grade level charge of a service"""
    service.grade_charges = [
        GradeCharge(
            grade_level=str(charge['grade_level']),
            charge_amount=float(charge['charge_amount']),
            is_active=charge.get('is_active', True),
        )
        for charge in charges
    ]
    service.save()
    logger.info("Set %d grade charge(s) on service %s", len(charges), service.code)
    return service


def subscribe_student(student, service_ids, custom_charges=None):
    """Create or reactivate subscriptions; unknown services raise NotFound"""
    custom_charges = custom_charges or {}
    services = []
    for service_id in service_ids:
        service = get_document_or_none(SchoolService, service_id)
        if service is None:
            raise NotFound("Service not found")
        services.append(service)

    subscriptions = []
    for service in services:
        subscription = StudentService.objects.filter(student=student, service=service).first()
        if subscription is None:
            subscription = StudentService(student=student, service=service, campus_id=student.campus_id)
        subscription.is_active = True
        subscription.end_date = None
        if str(service.id) in custom_charges:
            subscription.custom_charge = custom_charges[str(service.id)]
        subscription.updated_at = datetime.now()
        subscription.save()
        subscriptions.append(subscription)
    return subscriptions


def unsubscribe_student(student, service):
    subscription = StudentService.objects.filter(student=student, service=service, is_active=True).first()
    if subscription is None:
        raise NotFound("Subscription not found")
    subscription.is_active = False
    subscription.end_date = date.today()
    subscription.updated_at = datetime.now()
    subscription.save()
    return subscription


def student_total(student):
    subscriptions = StudentService.objects.filter(student=student, is_active=True)
    return round(sum(s.charge for s in subscriptions), 2)


def service_breakdown(campus_id=None):
    """Active subscriptions per service name, for the services chart"""
    subscriptions = scope_to_campus(StudentService.objects.filter(is_active=True), campus_id)
    return aggregate([s.service.name for s in subscriptions])
