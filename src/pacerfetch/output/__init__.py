from .downloads import DownloadSink
from .render import (
    ENTRIES_OPEN,
    render,
    render_case_header,
    render_collection_header,
    render_footer,
)

__all__ = [
    "DownloadSink",
    "ENTRIES_OPEN",
    "render",
    "render_case_header",
    "render_collection_header",
    "render_footer",
]
