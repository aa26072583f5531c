"""HTTP front end for portfoliocheck (single checks, uploads, upload form).

This module provides a small FastAPI application and a helper to serve it with
uvicorn. Result endpoints return ``text/plain`` bodies made of rendered result
lines:

    <name>,<errorCode>,<securityLevel>,<message>
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..checker.lookup import Checker
from ..config.config_parser import apply_defaults, resolver_config_from
from ..ingest import DomainLimitExceeded, UploadTooLarge, decode_upload, split_domain_list
from ..resolver.base import ResolverError
from ..resolver.dnspython_client import DnsPythonResolver

logger = logging.getLogger("portfoliocheck.webserver")

_FORM_HTML = """<!DOCTYPE html>
<html>
  <head>
    <title>DNSSEC portfolio checker - upload</title>
  </head>
  <body>
    <h1>DNSSEC portfolio checker</h1>
    <p>Upload a text or CSV file with domain names (one per line or comma separated, at most {max_domains}):</p>
    <form action="upload" method="POST" enctype="multipart/form-data">
      <input type="file" name="domainlist">
      <input type="submit" value="Check">
    </form>
  </body>
</html>
"""

_INDEX_HTML = """<!DOCTYPE html>
<html>
  <head>
    <title>DNSSEC portfolio checker</title>
  </head>
  <body>
    <h1>DNSSEC portfolio checker</h1>
    <p>Checks whether DNSSEC validation of domain names succeeds.
    Use the <a href="form">upload form</a> for a list of names, or
    <code>GET /check/&lt;name&gt;[/&lt;type&gt;]</code> for a single name.</p>
    <h2>Output</h2>
    <p>One line per name: <code>name,DNS error,security status,bogus reason</code></p>
    <ul>
      <li><b>secure</b>: the name validates with DNSSEC</li>
      <li><b>bogus</b>: DNSSEC validation of the name fails</li>
      <li><b>insecure</b>: the name is not protected with DNSSEC</li>
    </ul>
    <p>The DNS error is <b>nodata</b> when the requested records (NS by default)
    could not be found. Empty fields are written as <code>""</code>.
    Uploaded lists are returned with all bogus names first.</p>
  </body>
</html>
"""


class _Suppress2xxAccessFilter(logging.Filter):
    """Logging filter that drops uvicorn access records for HTTP 2xx responses.

    Inputs:
      - record: logging.LogRecord instance from uvicorn.access or other loggers.

    Outputs:
      - bool: False for records that clearly correspond to HTTP 2xx status codes,
        True otherwise (including when no status code can be determined).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        status_code = getattr(record, "status_code", None)

        # uvicorn's access logger passes the status code as the last positional arg
        if status_code is None:
            args = getattr(record, "args", None)
            if isinstance(args, dict):
                status_code = args.get("status_code") or args.get("status")
            elif isinstance(args, (tuple, list)) and args:
                status_code = args[-1]

        try:
            code = int(status_code)
        except (TypeError, ValueError):
            return True

        return not (200 <= code <= 299)


def install_uvicorn_2xx_suppression() -> None:
    """Attach _Suppress2xxAccessFilter to the uvicorn.access logger once."""

    access_logger = logging.getLogger("uvicorn.access")
    for f in access_logger.filters:
        if isinstance(f, _Suppress2xxAccessFilter):
            return
    access_logger.addFilter(_Suppress2xxAccessFilter())


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _default_checker(config: Dict[str, Any]) -> Checker:
    resolver_cfg = resolver_config_from(config)
    return Checker(lambda: DnsPythonResolver(resolver_cfg))


def create_app(
    config: Optional[Dict[str, Any]] = None,
    checker: Optional[Checker] = None,
) -> FastAPI:
    """Create and configure the FastAPI app exposing the checker endpoints.

    Inputs:
      - config: Validated configuration dictionary (see config_parser); missing
        sections take their defaults.
      - checker: Optional Checker; by default one backed by DnsPythonResolver
        built from the `resolver` section.

    Outputs:
      - Configured FastAPI application instance.

    Example:
      >>> app = create_app({"upload": {"max_domains": 100}})
    """

    cfg = apply_defaults(config or {})
    upload_cfg = cfg["upload"]
    max_domains = int(upload_cfg["max_domains"])
    max_bytes = int(upload_cfg["max_bytes"])

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        install_uvicorn_2xx_suppression()
        yield

    app = FastAPI(
        title="DNSSEC portfolio checker",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.checker = checker or _default_checker(cfg)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        # Not-found responses carry no body.
        body = "" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
        return PlainTextResponse(body, status_code=exc.status_code)

    @app.exception_handler(ResolverError)
    async def resolver_error(request: Request, exc: ResolverError) -> PlainTextResponse:
        logger.error("Resolver failure for %s", request.url.path, exc_info=exc)
        return PlainTextResponse(
            "resolver failure\n", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        """Return simple liveness information."""

        return {"status": "ok", "server_time": _utc_now_iso()}

    @app.get("/check")
    async def check_without_name() -> None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

    # Plain `def` handlers run on the threadpool; resolver calls block.
    @app.get("/check/{qname}", response_class=PlainTextResponse)
    def check_name(qname: str) -> PlainTextResponse:
        """Check one name for NS records."""

        return PlainTextResponse(app.state.checker.check_one(qname))

    @app.get("/check/{qname}/{qtype}", response_class=PlainTextResponse)
    def check_name_and_type(qname: str, qtype: str) -> PlainTextResponse:
        """Check one name for the given record type (unknown types fall back to NS)."""

        return PlainTextResponse(app.state.checker.check_one(qname, qtype))

    @app.post("/upload", response_class=PlainTextResponse)
    async def upload(domainlist: Optional[UploadFile] = File(None)) -> PlainTextResponse:
        """Brief: Check every name in an uploaded domain list.

        Inputs:
          - domainlist: multipart file field with names separated by newlines
            and/or commas.

        Outputs:
          - text/plain body with one result line per name, bogus names first;
            the limit-exceeded message when the list is too long.
        """

        if domainlist is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="missing domainlist upload",
            )
        data = await domainlist.read(max_bytes + 1)
        try:
            names = split_domain_list(decode_upload(data, max_bytes), max_domains)
        except UploadTooLarge as exc:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)
            )
        except DomainLimitExceeded as exc:
            return PlainTextResponse(f"{exc}\n")

        logger.info("Upload %s: %d names", domainlist.filename, len(names))
        lines = await run_in_threadpool(app.state.checker.check_many, names)
        return PlainTextResponse("".join(f"{line}\n" for line in lines))

    @app.get("/form", response_class=HTMLResponse)
    async def form() -> HTMLResponse:
        return HTMLResponse(_FORM_HTML.format(max_domains=max_domains))

    @app.get("/", response_class=HTMLResponse)
    @app.get("/index.html", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        return HTMLResponse(_INDEX_HTML)

    return app


def run_webserver(config: Dict[str, Any], checker: Optional[Checker] = None) -> None:
    """Serve the app with uvicorn on server.host:server.port until stopped.

    Inputs:
      - config: Validated configuration dictionary.
      - checker: Optional Checker passed through to create_app().

    Outputs:
      - None; blocks in uvicorn's server loop.
    """

    import uvicorn

    cfg = apply_defaults(config)
    host = str(cfg["server"]["host"])
    port = int(cfg["server"]["port"])
    if host in ("0.0.0.0", "::"):
        logger.warning("portfoliocheck webserver is bound to all interfaces (%s)", host)

    app = create_app(cfg, checker)
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="info"))
    logger.info("Starting portfoliocheck webserver on %s:%d", host, port)
    server.run()
