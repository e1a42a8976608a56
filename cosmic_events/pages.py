"""
Template-rendered site pages.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

router = APIRouter()

PAGES = {
    "/": "index.html",
    "/contact": "contact.html",
    "/about": "About.html",
    "/portfolio": "portfolio.html",
    "/dashboard": "dashboard.html",
    "/celebration": "celebration.html",
    "/ceremonie": "ceremonie.html",
    "/reception": "reception.html",
    "/mitzvhans": "mitzvhans.html",
    "/corporate1": "corporate1.html",
    "/services": "services.html",
}


def _render(template_name: str):
    def render_page(request: Request):
        return request.app.state.templates.TemplateResponse(request, template_name)

    render_page.__name__ = f"render_{template_name.split('.')[0].lower()}"
    return render_page


for _path, _template in PAGES.items():
    router.add_api_route(
        _path,
        _render(_template),
        methods=["GET"],
        response_class=HTMLResponse,
        include_in_schema=False,
    )
