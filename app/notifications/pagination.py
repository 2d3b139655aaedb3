"""
Pagination classes for notification log lists.

Design Decisions:
    - Page numbers rather than cursors: clients poll specific pages of a batch
    - 15 logs per page by default, overridable with ?page_size=
"""

from rest_framework.pagination import PageNumberPagination


class NotificationLogPagination(PageNumberPagination):
    """
    Page-number pagination for notification logs.

    Default: 15 logs per page
    Maximum: 100 logs per page

    Query parameters:
        page: 1-based page number
        page_size: Number of logs (optional override)
    """

    page_size = 15
    max_page_size = 100
    page_size_query_param = "page_size"
