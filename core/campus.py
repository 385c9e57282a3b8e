# core/campus.py - Campus selection scoping for list endpoints

from mongoengine import Q


def get_campus_id(request):
    """Selected campus from the query string, falling back to the user's own campus"""
    campus_id = request.query_params.get('campus_id')
    if campus_id:
        return campus_id
    if request.method not in ('GET', 'HEAD', 'OPTIONS') and hasattr(request, 'data'):
        data = request.data
        if hasattr(data, 'get') and data.get('campus_id'):
            return data.get('campus_id')
    return getattr(request.user, 'campus_id', '') or None


def scope_to_campus(queryset, campus_id, include_shared=False):
    """Restrict a queryset to one campus.

    With include_shared, records without a campus stay visible everywhere.
    """
    if not campus_id:
        return queryset
    if include_shared:
        return queryset.filter(Q(campus_id=campus_id) | Q(campus_id=None))
    return queryset.filter(campus_id=campus_id)
