"""Customer portal: server-rendered pages backed by the customer API.

The portal never touches the database. Every read goes through
:class:`CustomerQueries` (and its per-application query cache) and every
write is a mutation against the HTTP API followed by cache invalidation.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from customer_accounts.client import ApiError, CustomerApiClient, CustomerQueries, QueryCache
from customer_accounts.client.api_client import NETWORK_ERROR
from customer_accounts.core.config import settings
from customer_accounts.core.logging import get_logger, setup_logging
from customer_accounts.domain.customer_rules import FIELD_NAMES, Operation, evaluate

from . import components

logger = get_logger(__name__)

templates = Jinja2Templates(directory=str(components.TEMPLATE_DIR))
components.install(templates.env)

NOTICES = {
    "created": "Customer created successfully",
    "updated": "Customer updated successfully",
    "deleted": "Customer deleted successfully",
}


def get_queries(request: Request) -> CustomerQueries:
    return request.app.state.queries


def _is_htmx(request: Request) -> bool:
    return bool(request.headers.get("HX-Request"))


def _is_not_found(exc: ApiError) -> bool:
    return exc.status_code == 404 or exc.code == "NOT_FOUND"


async def _read_form(request: Request) -> dict[str, str]:
    form = await request.form()
    return {name: str(form.get(name, "")) for name in FIELD_NAMES}


def _render_form(
    request: Request,
    *,
    title: str,
    action: str,
    submit_label: str,
    cancel_url: str,
    values: dict[str, str],
    errors: dict[str, str] | None = None,
    form_error: str | None = None,
    load_error: ApiError | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "customers/form.html",
        {
            "title": title,
            "action": action,
            "submit_label": submit_label,
            "cancel_url": cancel_url,
            "values": values,
            "errors": errors or {},
            "form_error": form_error,
            "load_error": load_error,
        },
        status_code=status_code,
    )


def _mutation_errors(exc: ApiError) -> tuple[dict[str, str], str]:
    """Split an API failure into per-field errors and an inline form message."""
    if exc.code == "CONFLICT":
        return {"email": exc.message}, exc.message
    return {}, exc.message


def _error_status(exc: ApiError) -> int:
    if exc.code == NETWORK_ERROR or exc.status_code is None:
        return 502
    return exc.status_code


def create_app(api: CustomerApiClient | None = None, cache: QueryCache | None = None) -> FastAPI:
    """Build the portal.

    Args:
        api: Client for the customer API; built from settings when omitted.
        cache: Query cache shared by every request of this application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = api or CustomerApiClient()
        app.state.queries = CustomerQueries(client, cache or QueryCache())
        logger.info("Customer portal started against %s", client.base_url)
        yield
        await client.aclose()

    app = FastAPI(
        title="Customer Portal",
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    @app.get("/", response_class=HTMLResponse)
    async def customer_list(request: Request, notice: str | None = None):
        queries = get_queries(request)
        context: dict[str, Any] = {"customers": [], "error": None, "notice": NOTICES.get(notice or "")}
        status_code = 200
        try:
            context["customers"] = await queries.list_customers()
        except ApiError as exc:
            context["error"] = exc
            status_code = _error_status(exc)

        template = "customers/_table.html" if _is_htmx(request) else "customers/list.html"
        return templates.TemplateResponse(request, template, context, status_code=status_code)

    @app.get("/customers/new", response_class=HTMLResponse)
    async def new_customer(request: Request):
        return _render_form(
            request,
            title="Add Customer",
            action="/customers/new",
            submit_label="Create Customer",
            cancel_url="/",
            values=components.form_values(),
        )

    @app.post("/customers/new", response_class=HTMLResponse)
    async def create_customer(request: Request):
        submitted = await _read_form(request)
        form = dict(
            request=request,
            title="Add Customer",
            action="/customers/new",
            submit_label="Create Customer",
            cancel_url="/",
            values=components.form_values(submitted=submitted),
        )
        result = evaluate(submitted, Operation.CREATE)
        if not result.ok:
            return _render_form(**form, errors=result.errors_by_field(), status_code=400)

        try:
            await get_queries(request).create_customer(result.data)
        except ApiError as exc:
            errors, message = _mutation_errors(exc)
            return _render_form(**form, errors=errors, form_error=message, status_code=_error_status(exc))
        return RedirectResponse("/?notice=created", status_code=303)

    @app.get("/customers/{account_id}", response_class=HTMLResponse)
    async def customer_detail(request: Request, account_id: str):
        context: dict[str, Any] = {
            "customer": None,
            "error": None,
            "error_title": None,
            "error_text": None,
            "retry_url": None,
        }
        status_code = 200
        try:
            context["customer"] = await get_queries(request).get_customer(account_id)
        except ApiError as exc:
            context["error"] = exc
            context["error_text"] = exc.message
            status_code = _error_status(exc)
            if _is_not_found(exc):
                context["error_title"] = "Customer not found"
                context["error_text"] = "The customer you are looking for does not exist."
            else:
                context["error_title"] = "Failed to load customer"
                context["retry_url"] = f"/customers/{account_id}"
        return templates.TemplateResponse(request, "customers/detail.html", context, status_code=status_code)

    @app.get("/customers/{account_id}/edit", response_class=HTMLResponse)
    async def edit_customer(request: Request, account_id: str):
        form = dict(
            request=request,
            title="Edit Customer",
            action=f"/customers/{account_id}/edit",
            submit_label="Save Changes",
            cancel_url=f"/customers/{account_id}",
        )
        try:
            customer = await get_queries(request).get_customer(account_id)
        except ApiError as exc:
            return _render_form(
                **form, values=components.form_values(), load_error=exc, status_code=_error_status(exc)
            )
        return _render_form(**form, values=components.form_values(customer))

    @app.post("/customers/{account_id}/edit", response_class=HTMLResponse)
    async def update_customer(request: Request, account_id: str):
        submitted = await _read_form(request)
        form = dict(
            request=request,
            title="Edit Customer",
            action=f"/customers/{account_id}/edit",
            submit_label="Save Changes",
            cancel_url=f"/customers/{account_id}",
            values=components.form_values(submitted=submitted),
        )
        result = evaluate(submitted, Operation.UPDATE)
        if not result.ok:
            return _render_form(**form, errors=result.errors_by_field(), status_code=400)

        try:
            customer = await get_queries(request).update_customer(account_id, result.data)
        except ApiError as exc:
            errors, message = _mutation_errors(exc)
            return _render_form(**form, errors=errors, form_error=message, status_code=_error_status(exc))
        return RedirectResponse(f"/customers/{customer.account_id}", status_code=303)

    @app.post("/customers/{account_id}/delete", response_class=HTMLResponse)
    async def delete_customer(request: Request, account_id: str):
        queries = get_queries(request)
        try:
            await queries.delete_customer(account_id)
        except ApiError as exc:
            logger.warning("Delete of customer %s failed: %s", account_id, exc.message)
            context: dict[str, Any] = {"customers": [], "error": None, "notice": None, "delete_error": exc}
            try:
                context["customers"] = await queries.list_customers()
            except ApiError as list_exc:
                context["error"] = list_exc
            return templates.TemplateResponse(
                request, "customers/list.html", context, status_code=_error_status(exc)
            )
        return RedirectResponse("/?notice=deleted", status_code=303)

    return app


setup_logging()
app = create_app()
