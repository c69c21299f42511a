"""Utility functions for audit logging and request parsing"""
import logging
from datetime import datetime

from rest_framework import status
from rest_framework.response import Response

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def get_impersonator_id(request):
    """Admin user id carried by an impersonation token, if any"""
    token = getattr(request, 'auth', None)
    if token is None:
        return None
    try:
        return token.get('impersonated_by')
    except AttributeError:
        return None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user, IP and impersonation) - optional if user is provided
        action: Action type (create, update, delete, restock, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None
        impersonator_id = get_impersonator_id(request) if request else None

        if not action or not model_name or object_id is None:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            impersonator_id=impersonator_id,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Audit logging must never fail the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def parse_date_param(value, default=None):
    """Parse a YYYY-MM-DD query parameter; returns default when missing"""
    if not value:
        return default
    return datetime.strptime(value, '%Y-%m-%d').date()


def get_date_range(request, default_from=None, default_to=None):
    """
    Read date_from/date_to from query params.

    Raises ValueError on malformed dates so views can answer 400.
    """
    date_from = parse_date_param(request.query_params.get('date_from'), default_from)
    date_to = parse_date_param(request.query_params.get('date_to'), default_to)
    if date_from and date_to and date_from > date_to:
        raise ValueError('date_from must be on or before date_to')
    return date_from, date_to


def date_range_or_error(request):
    """((date_from, date_to), None), or ((None, None), a 400 response) for bad dates"""
    try:
        return get_date_range(request), None
    except ValueError as e:
        return (None, None), Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


def period_payload(date_from, date_to):
    return {
        'from': date_from.isoformat() if date_from else None,
        'to': date_to.isoformat() if date_to else None,
    }


def diff_fields(instance, data, fields):
    """Collect {field: {'old': x, 'new': y}} for fields about to change"""
    changes = {}
    for field in fields:
        if field in data:
            old = getattr(instance, field, None)
            new = data[field]
            if str(old) != str(new):
                changes[field] = {'old': str(old) if old is not None else None, 'new': str(new)}
    return changes
