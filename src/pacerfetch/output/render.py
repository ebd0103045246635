from __future__ import annotations

from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from pacerfetch.types import CaseInfo

_env = Environment(
    loader=PackageLoader("pacerfetch.output", "templates"),
    autoescape=select_autoescape(enabled_extensions=("html", "j2")),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)

ENTRIES_OPEN = "<ul class='list-group'>\n"


def render(template: str, context: dict[str, Any]) -> str:
    return _env.get_template(template).render(**context)


def render_case_header(case: CaseInfo) -> str:
    return render(
        "header.html.j2",
        {
            "court": case.court,
            "case_number": case.case_number,
            "title": case.title,
            "date_filed": case.metadata.get("date_filed"),
        },
    )


def render_collection_header(html: str) -> str:
    """Wrap server-generated header HTML, which is trusted and written unescaped."""
    return render("collection_header.html.j2", {"html": html})


def render_footer() -> str:
    return render("footer.html.j2", {})
