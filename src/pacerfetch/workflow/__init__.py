from .bulk import BulkDownloader, DownloadStats
from .cases import ensure_header, import_case
from .pagination import FIRST_PAGE, PageWalker
from .report import ReportBuilder, ReportStats
from .resolver import DocumentResolver
from .sources import ClaimsSource, DocketSource, EntrySource, PartGroup, page_fetcher

__all__ = [
    "BulkDownloader",
    "ClaimsSource",
    "DocketSource",
    "DocumentResolver",
    "DownloadStats",
    "EntrySource",
    "FIRST_PAGE",
    "PageWalker",
    "PartGroup",
    "ReportBuilder",
    "ReportStats",
    "ensure_header",
    "import_case",
    "page_fetcher",
]
