"""Builders for upstream payloads shared by the test modules."""

import json
from typing import Any

import httpx


def job_dict(**overrides: Any) -> dict[str, Any]:
    """A complete detail-page job object as the site embeds it."""
    job: dict[str, Any] = {
        "id": "64f1c2a9",
        "key": "backend-engineer",
        "title": "Backend Engineer",
        "description": "<p>Build the platform.</p>",
        "descriptionLength": 24,
        "salary": "DKK 50,000 / month",
        "salaryRange": {"min": 45000, "max": 55000},
        "equity": "0.1%",
        "status": "ACTIVE",
        "jobRole": "backenddeveloper",
        "jobPositionTypes": ["5b8e46b3853f039706b6ea70", "custom-type"],
        "countryCode": "DK",
        "location": {"country": "Denmark", "locality": "Copenhagen", "address": "Copenhagen, Denmark"},
        "isRemote": False,
        "isFeatured": False,
        "scraped": False,
        "link": "",
        "expirationDate": "2024-03-10T00:00:00.000Z",
        "createdAt": "2024-01-10T09:00:00.000Z",
        "approvedAt": "2024-01-10T10:00:00.000Z",
        "publishedAt": "2024-01-11T09:00:00.000Z",
        "views": {"week": 12, "total": 340},
        "company": {
            "id": "5f00c0ffee",
            "key": "acme",
            "name": "Acme",
            "website": "https://acme.io",
            "numberOfEmployees": "11-50",
            "founded": "2019",
            "whatWeDo": "Widgets for everyone",
            "logoImage": {"path": "/files/acme.png", "filetype": "image/png", "size": 1234},
            "perks": [],
            "galleryImages": [{"path": "/files/office.jpg"}],
        },
    }
    job.update(overrides)
    return job


def nuxt_html(job: dict[str, Any] | None) -> str:
    """A detail page embedding ``job`` at ``state.jobs.job`` inside a Nuxt IIFE."""
    job_literal = "null" if job is None else json.dumps(job)
    payload = (
        "(function(a,b,c){return {layout:\"default\",data:[{}],fetch:{},error:b,"
        f"state:{{jobs:{{job:{job_literal},list:c}},auth:{{loggedIn:!1}}}},serverRendered:a}}"
        "}(true,null,[]))"
    )
    return (
        "<!doctype html><html><head><title>Job</title>"
        "<script src=\"/_nuxt/app.js\"></script></head><body>"
        "<div id=\"__nuxt\"></div>"
        f"<script>window.__NUXT__={payload};</script>"
        "</body></html>"
    )


def summary_dict(job_id: str, *, title: str | None = None, featured: bool = False) -> dict[str, Any]:
    """One listing summary as returned by the listing API."""
    return {
        "id": job_id,
        "key": f"job-{job_id}",
        "title": title or f"Job {job_id}",
        "location": {"country": "Denmark", "locality": "Copenhagen", "address": "Copenhagen, Denmark"},
        "isRemote": False,
        "jobPositionTypes": ["5b8e46b3853f039706b6ea70"],
        "isFeatured": featured,
        "views": {"week": 1, "total": 10},
        "company": {"id": f"c-{job_id}", "key": "acme", "name": "Acme"},
        "saved": False,
    }


def listing_payload(
    ids: list[str],
    *,
    page: int = 1,
    pages: int = 1,
    featured_ids: list[str] | None = None,
) -> dict[str, Any]:
    """One ``jobsandfeatured`` response body."""
    featured = [summary_dict(i, featured=True) for i in featured_ids or []]
    return {
        "jobs": {
            "total": pages * 15,
            "limit": 15,
            "page": page,
            "pages": pages,
            "docs": [summary_dict(i) for i in ids],
        },
        "featuredJobs": {"total": len(featured), "docs": featured},
    }


def region_pages(prefix: str, count: int, *, per_page: int = 15) -> dict[int, list[str]]:
    """Job ids per page for a region with ``count`` regular listings."""
    ids = [f"{prefix}{n}" for n in range(count)]
    pages = max(1, -(-count // per_page))
    return {p: ids[(p - 1) * per_page:p * per_page] for p in range(1, pages + 1)}


class FakeListingApi:
    """Serves listing pages per region key and records every request.

    ``regions`` maps a region key (country code, or ``"REMOTE"`` for
    ``isRemote=true``) to its pages. Regions in ``failing`` answer with 503.
    """

    def __init__(
        self,
        regions: dict[str, dict[int, list[str]]],
        *,
        featured: dict[str, list[str]] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.regions = regions
        self.featured = featured or {}
        self.failing = failing or set()
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        key = "REMOTE" if params.get("isRemote") == "true" else params.get("countryCode", "")
        if key in self.failing:
            return httpx.Response(503, json={"message": "unavailable"})
        pages = self.regions.get(key, {1: []})
        page = int(params.get("page", "1"))
        featured = self.featured.get(key, []) if page == 1 else []
        return httpx.Response(
            200,
            json=listing_payload(pages.get(page, []), page=page, pages=len(pages), featured_ids=featured),
        )

    def pages_requested(self, key: str) -> list[int]:
        result = []
        for r in self.requests:
            params = r.url.params
            rk = "REMOTE" if params.get("isRemote") == "true" else params.get("countryCode", "")
            if rk == key:
                result.append(int(params["page"]))
        return sorted(result)
