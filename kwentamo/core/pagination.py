"""Page-number pagination in the API's common response shape"""
from django.conf import settings
from django.core.paginator import Paginator
from rest_framework.response import Response


def _int_param(value, default):
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def paginate(request, queryset, serializer_class, context=None):
    """
    Serialize one page of `queryset`.

    Reads `page` and `page_size` (or `limit`) from the query string; the size
    is capped at KWENTAMO['MAX_PAGE_SIZE'].
    """
    options = getattr(settings, 'KWENTAMO', {})
    default_size = options.get('DEFAULT_PAGE_SIZE', 10)
    max_size = options.get('MAX_PAGE_SIZE', 100)

    page = _int_param(request.query_params.get('page'), 1)
    limit = _int_param(
        request.query_params.get('page_size') or request.query_params.get('limit'), default_size
    )
    limit = min(limit, max_size)

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True, context=context or {'request': request})
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })
