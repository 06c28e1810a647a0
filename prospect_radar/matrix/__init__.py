from .models import RelevanceRow
from .builder import RelevanceMatrixBuilder, flatten_judgment, mark_analyzed, merge_matrices
from .views import NewsGroup, OfferView, filter_matrix, group_by_news

__all__ = [
    "RelevanceRow",
    "RelevanceMatrixBuilder",
    "flatten_judgment",
    "mark_analyzed",
    "merge_matrices",
    "NewsGroup",
    "OfferView",
    "filter_matrix",
    "group_by_news",
]
