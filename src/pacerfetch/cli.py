from __future__ import annotations

import asyncio
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from pacerfetch.clients import CourtApiGateway, HttpCourtApiClient, MockCourtApiClient
from pacerfetch.config import Settings
from pacerfetch.errors import CourtApiError
from pacerfetch.output import DownloadSink
from pacerfetch.types import ClaimBinder, DocketBinder
from pacerfetch.workflow import (
    BulkDownloader,
    ClaimsSource,
    DocketSource,
    EntrySource,
    PageWalker,
    ReportBuilder,
    ReportStats,
    import_case,
    page_fetcher,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(help="CourtAPI (PACER) case, docket and claims tools")
court_app = typer.Typer(help="Courts and PACER case lookup")
case_app = typer.Typer(help="Cases")
docket_app = typer.Typer(help="Docket entries and their documents")
claims_app = typer.Typer(help="Claims register entries and their documents")
pacer_app = typer.Typer(help="PACER account credentials and filings search")
app.add_typer(court_app, name="court")
app.add_typer(case_app, name="case")
app.add_typer(docket_app, name="docket")
app.add_typer(claims_app, name="claims")
app.add_typer(pacer_app, name="pacer")


@dataclass
class CliState:
    settings: Settings
    fixture: Path | None = None


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    fixture: Optional[Path] = typer.Option(
        None,
        envvar="COURTAPI_FIXTURE",
        exists=True,
        dir_okay=False,
        help="Serve requests from a JSON fixture instead of CourtAPI (dry run)",
    ),
) -> None:
    settings = Settings()
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    ctx.obj = CliState(settings=settings, fixture=fixture)


# ------------------------------------------------------------------
# Courts and cases
# ------------------------------------------------------------------


@court_app.command("search")
def court_search(
    ctx: typer.Context,
    court_type: Optional[str] = typer.Option("bankruptcy", "--type", help="Court type filter"),
    test: bool = typer.Option(False, "--test/--no-test", help="Only list PACER training courts"),
) -> None:
    courts = _run(ctx, lambda client: client.list_courts(type=court_type, test=test or None))
    for court in courts:
        _echo_json(court)


@court_app.command("show")
def court_show(ctx: typer.Context, court: str = typer.Argument(..., help="Court code")) -> None:
    _echo_json(_run(ctx, lambda client: client.get_court(court)))


@case_app.command("show")
def case_show(ctx: typer.Context, court: str, case_number: str) -> None:
    case = _run(ctx, lambda client: client.get_case(court, case_number))
    _echo_json({"case": case.metadata})


@case_app.command("search")
def case_search(
    ctx: typer.Context,
    court: str,
    case_number: str,
    open_only: bool = typer.Option(False, "--open-only", help="Only match open cases"),
) -> None:
    """Look a case up in PACER, importing it into CourtAPI."""
    _echo_json(
        _run(
            ctx,
            lambda client: client.search_pacer_cases(
                court, case_number, open_cases=True if open_only else None
            ),
        )
    )


@case_app.command("import")
def case_import(ctx: typer.Context, court: str, case_number: str) -> None:
    """Fetch a case, importing it from PACER when CourtAPI does not have it yet."""
    case = _run(ctx, lambda client: import_case(client, court, case_number))
    _echo_json({"case": case.metadata})


# ------------------------------------------------------------------
# Docket
# ------------------------------------------------------------------


@docket_app.command("list")
def docket_list(
    ctx: typer.Context,
    court: str,
    case_number: str,
    keyword: Optional[str] = typer.Option(None, "--keyword", "-k", help="Only entries containing this text"),
    page_size: int = typer.Option(50, help="Entries per page"),
) -> None:
    _list_collection(ctx, DocketSource, court, case_number, keyword, page_size)


@docket_app.command("show-entry")
def docket_show_entry(ctx: typer.Context, court: str, case_number: str, docket_seq: str) -> None:
    _echo_json(_run(ctx, lambda client: client.get_docket_entry(court, case_number, docket_seq)))


@docket_app.command("list-documents")
def docket_list_documents(ctx: typer.Context, court: str, case_number: str, docket_seq: str) -> None:
    binder = DocketBinder(court, case_number, docket_seq)
    parts = _run(ctx, lambda client: client.list_parts(binder))
    _echo_json({"documents": [part.metadata for part in parts]})


@docket_app.command("show-document")
def docket_show_document(
    ctx: typer.Context, court: str, case_number: str, docket_seq: str, part_number: str
) -> None:
    binder = DocketBinder(court, case_number, docket_seq)
    _echo_json({"document": _run(ctx, lambda client: client.get_part(binder, part_number)).metadata})


@docket_app.command("buy-document")
def docket_buy_document(
    ctx: typer.Context, court: str, case_number: str, docket_seq: str, part_number: str
) -> None:
    """Purchase a docket document part from PACER. This charges the PACER account."""
    binder = DocketBinder(court, case_number, docket_seq)
    _echo_json({"document": _run(ctx, lambda client: client.buy_part(binder, part_number)).metadata})


@docket_app.command("update")
def docket_update(
    ctx: typer.Context,
    court: str,
    case_number: str,
    date_from: Optional[str] = typer.Option(None, help="MM/DD/YYYY"),
    date_to: Optional[str] = typer.Option(None, help="MM/DD/YYYY"),
    doc_from: Optional[int] = typer.Option(None, help="First docket number"),
    doc_to: Optional[int] = typer.Option(None, help="Last docket number"),
    minimize_header: bool = typer.Option(False, "--minimize-header", help="Do not buy the docket header"),
) -> None:
    """Update the case docket from PACER."""
    result = _run(
        ctx,
        lambda client: client.update_dockets(
            court,
            case_number,
            dateFrom=date_from,
            dateTo=date_to,
            docFrom=doc_from,
            docTo=doc_to,
            minimizeHeader=True if minimize_header else None,
        ),
    )
    typer.echo("Case docket updated.")
    _echo_json(result)


@docket_app.command("update-documents")
def docket_update_documents(ctx: typer.Context, court: str, case_number: str, docket_seq: str) -> None:
    binder = DocketBinder(court, case_number, docket_seq)
    _echo_json(_run(ctx, lambda client: client.update_parts(binder)))


# ------------------------------------------------------------------
# Claims register
# ------------------------------------------------------------------


@claims_app.command("list")
def claims_list(
    ctx: typer.Context,
    court: str,
    case_number: str,
    keyword: Optional[str] = typer.Option(None, "--keyword", "-k", help="Only claims matching this text"),
    page_size: int = typer.Option(50, help="Entries per page"),
) -> None:
    _list_collection(ctx, ClaimsSource, court, case_number, keyword, page_size)


@claims_app.command("show")
def claims_show(ctx: typer.Context, court: str, case_number: str, claim_number: str) -> None:
    _echo_json(_run(ctx, lambda client: client.get_claim(court, case_number, claim_number)))


@claims_app.command("list-parts")
def claims_list_parts(
    ctx: typer.Context, court: str, case_number: str, claim_number: str, claim_seq: str
) -> None:
    binder = ClaimBinder(court, case_number, claim_number, claim_seq)
    parts = _run(ctx, lambda client: client.list_parts(binder))
    _echo_json({"documents": [part.metadata for part in parts]})


@claims_app.command("show-part")
def claims_show_part(
    ctx: typer.Context, court: str, case_number: str, claim_number: str, claim_seq: str, part_number: str
) -> None:
    binder = ClaimBinder(court, case_number, claim_number, claim_seq)
    _echo_json({"document": _run(ctx, lambda client: client.get_part(binder, part_number)).metadata})


@claims_app.command("buy-part")
def claims_buy_part(
    ctx: typer.Context, court: str, case_number: str, claim_number: str, claim_seq: str, part_number: str
) -> None:
    """Purchase a claim document part from PACER. This charges the PACER account."""
    binder = ClaimBinder(court, case_number, claim_number, claim_seq)
    _echo_json({"document": _run(ctx, lambda client: client.buy_part(binder, part_number)).metadata})


@claims_app.command("update")
def claims_update(ctx: typer.Context, court: str, case_number: str) -> None:
    """Update the claims register from PACER."""
    _echo_json(_run(ctx, lambda client: client.update_claims(court, case_number)))


@claims_app.command("update-parts")
def claims_update_parts(
    ctx: typer.Context, court: str, case_number: str, claim_number: str, claim_seq: str
) -> None:
    binder = ClaimBinder(court, case_number, claim_number, claim_seq)
    _echo_json(_run(ctx, lambda client: client.update_parts(binder)))


# ------------------------------------------------------------------
# PACER account
# ------------------------------------------------------------------


@pacer_app.command("save-credentials")
def pacer_save_credentials(ctx: typer.Context, username: str, password: str) -> None:
    _run(ctx, lambda client: client.save_credentials(username, password))
    typer.echo("PACER credentials stored successfully")


@pacer_app.command("show-credentials")
def pacer_show_credentials(ctx: typer.Context) -> None:
    credentials = _run(ctx, lambda client: client.get_credentials())
    typer.echo(f"App ID: {credentials.get('app_id')}")
    typer.echo(f"PACER User: {credentials.get('pacer_user')}")


@pacer_app.command("delete-credentials")
def pacer_delete_credentials(ctx: typer.Context) -> None:
    _echo_json(_run(ctx, lambda client: client.delete_credentials()))


@pacer_app.command("search-filings")
def pacer_search_filings(ctx: typer.Context, case_uuid: str) -> None:
    _echo_json(_run(ctx, lambda client: client.search_filings(case_uuid)))


# ------------------------------------------------------------------
# Reports and bulk downloads
# ------------------------------------------------------------------


@app.command("docket-sheet")
def docket_sheet(
    ctx: typer.Context,
    court: str,
    case_number: str,
    output: Path = typer.Argument(Path("docket-sheet.html"), help="Output HTML file"),
    keyword: Optional[str] = typer.Option(None, "--keyword", "-k"),
) -> None:
    """Write the docket sheet of a case as HTML, buying it from PACER if needed."""
    _write_report(ctx, DocketSource, court, case_number, output, keyword)
    typer.echo(f"Saved docket sheet as {output}")


@app.command("claims-register")
def claims_register(
    ctx: typer.Context,
    court: str,
    case_number: str,
    output: Path = typer.Argument(Path("claims-register.html"), help="Output HTML file"),
    keyword: Optional[str] = typer.Option(None, "--keyword", "-k"),
) -> None:
    """Write the claims register of a case as HTML, buying it from PACER if needed."""
    _write_report(ctx, ClaimsSource, court, case_number, output, keyword)
    typer.echo(f"Saved claims register as {output}")


@app.command("download-docket-pdfs")
def download_docket_pdfs(
    ctx: typer.Context,
    court: str,
    case_number: str,
    keyword: str,
    dest: Optional[Path] = typer.Option(None, help="Download directory (defaults to COURTAPI_DOWNLOAD_DIR)"),
    continue_on_error: Optional[bool] = typer.Option(
        None,
        "--continue-on-error/--strict",
        help="Continue with other entries when one entry fails",
    ),
) -> None:
    """Purchase and download every document of the docket entries matching KEYWORD."""
    _bulk_download(ctx, DocketSource, court, case_number, keyword, dest, continue_on_error)


@app.command("download-claims-pdfs")
def download_claims_pdfs(
    ctx: typer.Context,
    court: str,
    case_number: str,
    keyword: str,
    dest: Optional[Path] = typer.Option(None, help="Download directory (defaults to COURTAPI_DOWNLOAD_DIR)"),
    continue_on_error: Optional[bool] = typer.Option(
        None,
        "--continue-on-error/--strict",
        help="Continue with other entries when one entry fails",
    ),
) -> None:
    """Purchase and download every document of the claims matching KEYWORD."""
    _bulk_download(ctx, ClaimsSource, court, case_number, keyword, dest, continue_on_error)


def _list_collection(
    ctx: typer.Context,
    source_factory: Callable[[CourtApiGateway], EntrySource],
    court: str,
    case_number: str,
    keyword: str | None,
    page_size: int,
) -> None:
    sort_order = ctx.obj.settings.sort_order

    async def action(client: CourtApiGateway) -> None:
        source = source_factory(client)
        fetch_page = page_fetcher(source, court, case_number, sort_order=sort_order, keyword=keyword)
        walker = PageWalker(fetch_page, page_size=page_size)
        async for page in walker.pages():
            typer.echo(f"-- PAGE {walker.pages_fetched}/{walker.total_pages} --")
            for entry in page.content:
                _echo_json(entry)
        if walker.empty:
            typer.echo(f"No {source.kind} entries - no matches, or a PACER update is needed")

    _run(ctx, action)


def _write_report(
    ctx: typer.Context,
    source_factory: Callable[[CourtApiGateway], EntrySource],
    court: str,
    case_number: str,
    output: Path,
    keyword: str | None,
) -> None:
    settings: Settings = ctx.obj.settings
    # The page is buffered so a failed run leaves no partial file behind.
    buffer = io.StringIO()

    async def action(client: CourtApiGateway) -> ReportStats:
        builder = ReportBuilder(
            client,
            source_factory(client),
            page_size=settings.page_size,
            sort_order=settings.sort_order,
            continue_on_error=settings.continue_on_error,
        )
        return await builder.write(buffer, court, case_number, keyword=keyword)

    stats = _run(ctx, action)
    output.write_text(buffer.getvalue(), encoding="utf-8")
    if stats.errors:
        typer.echo(f"WARNING: {stats.errors} entries could not be rendered", err=True)


def _bulk_download(
    ctx: typer.Context,
    source_factory: Callable[[CourtApiGateway], EntrySource],
    court: str,
    case_number: str,
    keyword: str,
    dest: Path | None,
    continue_on_error: bool | None,
) -> None:
    settings: Settings = ctx.obj.settings
    effective_continue_on_error = (
        continue_on_error if continue_on_error is not None else settings.continue_on_error
    )
    sink = DownloadSink(dest or settings.download_dir)

    async def action(client: CourtApiGateway):
        downloader = BulkDownloader(
            client,
            source_factory(client),
            sink,
            page_size=settings.page_size,
            sort_order=settings.sort_order,
            update_empty_parts=settings.update_empty_parts,
            continue_on_error=effective_continue_on_error,
        )
        return await downloader.run(court, case_number, keyword)

    stats = _run(ctx, action)
    if stats.empty:
        typer.echo(f"No entries matched {keyword!r}")
    typer.echo(
        "Download complete: "
        f"entries={stats.entries} documents={stats.documents} purchases={stats.purchases} "
        f"skipped={stats.skipped} errors={stats.errors}"
    )
    typer.echo("done.")


def _open_client(state: CliState) -> HttpCourtApiClient | MockCourtApiClient:
    if state.fixture is not None:
        return MockCourtApiClient(state.fixture)
    settings = state.settings
    if not settings.api_key or not settings.api_secret:
        raise typer.BadParameter(
            "CourtAPI credentials are required via COURTAPI_API_KEY and COURTAPI_API_SECRET"
        )
    return HttpCourtApiClient(
        settings.api_base_url,
        settings.api_key,
        settings.api_secret,
        timeout=settings.api_timeout,
        user_agent=settings.user_agent,
    )


def _run(ctx: typer.Context, action: Callable[[CourtApiGateway], Awaitable[T]]) -> T:
    """Run one command against a freshly opened client, mapping failures to exit codes."""

    client = _open_client(ctx.obj)

    async def runner() -> T:
        async with client:
            return await action(client)

    try:
        return asyncio.run(runner())
    except CourtApiError as exc:
        typer.echo(f"ERROR: {exc.status_code}", err=True)
        typer.echo(exc.body_json(), err=True)
        raise typer.Exit(code=1) from exc
    except Exception as exc:
        logger.exception("An error occurred")
        typer.echo(f"An error occurred: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":
    app()
