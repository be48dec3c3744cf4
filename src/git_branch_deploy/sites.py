"""Site detail pages read back from the published static API."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from jsonschema import Draft202012Validator
from pydantic import ValidationError

from .logging import get_logger
from .models.site import RichText, SiteRecord, SiteView

log = get_logger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")


def _load_schema() -> Dict[str, Any]:
    here = Path(__file__).resolve().parent / "schemas" / "site.json"
    return json.loads(here.read_text(encoding="utf-8"))


_VALIDATOR = Draft202012Validator(_load_schema())


def site_api_path(site_id: str) -> str:
    return f"api/site/{site_id}.json"


def site_edit_url(repo_url: str, site_id: str) -> str:
    return f"{repo_url.rstrip('/')}/edit/master/site/{site_id}.json"


def _fail(site_id: str, detail: str) -> SiteView:
    log.warning("Site fetch failed", site_id=site_id, error=detail)
    return SiteView(site_id=site_id, state="fail", result=detail)


def validate_site(data: Any) -> SiteRecord:
    """Check ``data`` against the site JSON Schema, then parse it.

    Raises:
        ValueError: With a compact summary of every violation
    """
    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        msgs = []
        for err in errors[:25]:
            loc = "/".join([str(p) for p in err.path]) or "<root>"
            msgs.append(f"{loc}: {err.message}")
        raise ValueError("Schema validation failed: " + "; ".join(msgs))

    try:
        return SiteRecord.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Site validation failed: {e}") from e


def fetch_site(
    site_id: str,
    base_url: str,
    client: Optional[httpx.Client] = None,
    timeout: float = 30.0,
) -> SiteView:
    """Load one site record; failures come back as a ``fail`` view, never raised.

    An empty ``site_id`` stays in the ``load`` state without a request.
    """
    if not site_id:
        return SiteView(site_id="", state="load")

    url = f"{base_url.rstrip('/')}/{site_api_path(site_id)}"
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=httpx.Timeout(timeout), follow_redirects=True)

    try:
        log.info("Fetching site", site_id=site_id, url=url)
        resp = client.get(url, headers={"accept": "application/json"})
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as e:
        return _fail(site_id, str(e).splitlines()[0])
    except ValueError as e:
        return _fail(site_id, f"Endpoint did not return valid JSON: {e}")
    finally:
        if owns_client:
            client.close()

    try:
        record = validate_site(data)
    except ValueError as e:
        return _fail(site_id, str(e))

    return SiteView(site_id=site_id, state="success", result=record)


def _rich_text(content: RichText) -> List[str]:
    items = content if isinstance(content, list) else str(content).splitlines()
    lines = []
    for item in items:
        text = _TAG_RE.sub("", str(item)).strip()
        if text:
            lines.append(f"  {text}")
    return lines


def _render_record(record: SiteRecord) -> List[str]:
    lines = []
    if record.logo:
        lines.append(f"Logo: media/site/{record.logo}")
    lines.extend([
        f"Site name: {record.name}",
        f"Owner: {record.owner}",
        f"Site URL: {record.url}",
        f"Language: {', '.join(record.language)}",
        f"Blocked by GFW: {'yes' if record.gfw else 'no'}",
        f"Materials: {', '.join(f'{c} materials' for c in record.category)}",
        f"Material URL: {record.url2}",
        "Terms of use:",
        f"  Original: {record.url3}",
    ])
    lines.extend(_rich_text(record.rule_parse))
    lines.append(f"  (translated by {record.author}, confirmed {record.update_time})")
    if record.comment:
        lines.append("Notes:")
        lines.extend(_rich_text(record.comment))
    return lines


def render_site(view: SiteView, repo_url: Optional[str] = None) -> Optional[str]:
    """Plain-text rendering of a site view; ``None`` when there is no site id."""
    if not view.site_id:
        return None

    if view.state == "fail":
        lines = ["get site fail", f"  {view.result}"]
    elif view.state == "load" or not isinstance(view.result, SiteRecord):
        lines = ["Loading..."]
    else:
        lines = _render_record(view.result)

    if repo_url:
        lines.append(f"Edit on GitHub: {site_edit_url(repo_url, view.site_id)}")
    return "\n".join(lines)
