from rest_framework.pagination import PageNumberPagination


class StandardPagination(PageNumberPagination):
    """
    Default pagination for every list endpoint.

    Usage:
        GET /api/v1/flight-logs/               → 20 results (default)
        GET /api/v1/flight-logs/?page_size=100 → 100 results
        GET /api/v1/flight-logs/?page_size=5000 → capped at 1000
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 1000
