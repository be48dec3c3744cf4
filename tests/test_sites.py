from __future__ import annotations

import json
import unittest

import httpx

from git_branch_deploy.models.site import SiteRecord, SiteView
from git_branch_deploy.sites import fetch_site, render_site, site_edit_url, validate_site

SITE = {
    "logo": "logo.png",
    "name": "Free Sounds",
    "owner": "Alice",
    "url": "https://sounds.example.com",
    "language": ["Japanese", "English"],
    "gfw": True,
    "category": ["music", "sfx"],
    "url2": "https://sounds.example.com/list",
    "url3": "https://sounds.example.com/terms",
    "ruleParse": "<p>Free for any use.</p>\n<p>Credit required.</p>",
    "author": "Bob",
    "updateTime": "2020-05-01",
    "comment": [],
}


def client_for(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class FetchSiteTests(unittest.TestCase):
    def test_success(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=SITE)

        with client_for(handler) as client:
            view = fetch_site("7", "https://owner.github.io/repo/", client=client)

        self.assertEqual(seen, ["https://owner.github.io/repo/api/site/7.json"])
        self.assertEqual(view.state, "success")
        self.assertIsInstance(view.result, SiteRecord)
        self.assertEqual(view.result.update_time, "2020-05-01")

    def test_http_error(self) -> None:
        with client_for(lambda request: httpx.Response(404)) as client:
            view = fetch_site("7", "https://owner.github.io/repo", client=client)
        self.assertEqual(view.state, "fail")
        self.assertIn("404", view.result)

    def test_invalid_json(self) -> None:
        with client_for(lambda request: httpx.Response(200, text="<html>")) as client:
            view = fetch_site("7", "https://owner.github.io/repo", client=client)
        self.assertEqual(view.state, "fail")
        self.assertIn("valid JSON", view.result)

    def test_schema_violation(self) -> None:
        broken = dict(SITE, gfw="yes")
        del broken["name"]
        with client_for(lambda request: httpx.Response(200, json=broken)) as client:
            view = fetch_site("7", "https://owner.github.io/repo", client=client)
        self.assertEqual(view.state, "fail")
        self.assertIn("gfw", view.result)
        self.assertIn("name", view.result)

    def test_empty_id_makes_no_request(self) -> None:
        def handler(request):
            raise AssertionError("unexpected request")

        with client_for(handler) as client:
            view = fetch_site("", "https://owner.github.io/repo", client=client)
        self.assertEqual(view.state, "load")
        self.assertIsNone(render_site(view))


class RenderSiteTests(unittest.TestCase):
    def test_success(self) -> None:
        view = SiteView(site_id="7", state="success", result=validate_site(SITE))

        text = render_site(view, repo_url="https://github.com/owner/data/")

        self.assertIn("Logo: media/site/logo.png", text)
        self.assertIn("Language: Japanese, English", text)
        self.assertIn("Blocked by GFW: yes", text)
        self.assertIn("Materials: music materials, sfx materials", text)
        self.assertIn("  Free for any use.", text)
        self.assertIn("  (translated by Bob, confirmed 2020-05-01)", text)
        self.assertNotIn("Notes:", text)
        self.assertNotIn("<p>", text)
        self.assertTrue(text.endswith("Edit on GitHub: https://github.com/owner/data/edit/master/site/7.json"))

    def test_comments_and_no_logo(self) -> None:
        data = dict(SITE, logo="", gfw=False, comment=["Mirror is slow", "<b>Ask first</b>"])
        text = render_site(SiteView(site_id="7", state="success", result=validate_site(data)))

        self.assertNotIn("Logo:", text)
        self.assertIn("Blocked by GFW: no", text)
        self.assertIn("Notes:\n  Mirror is slow\n  Ask first", text)
        self.assertNotIn("Edit on GitHub", text)

    def test_fail_and_load(self) -> None:
        self.assertEqual(
            render_site(SiteView(site_id="7", state="fail", result="boom")),
            "get site fail\n  boom",
        )
        self.assertEqual(render_site(SiteView(site_id="7")), "Loading...")

    def test_record_round_trips_aliases(self) -> None:
        record = validate_site(SITE)
        self.assertEqual(json.loads(record.model_dump_json(by_alias=True))["ruleParse"], SITE["ruleParse"])
        self.assertEqual(site_edit_url("https://github.com/o/r", "3"), "https://github.com/o/r/edit/master/site/3.json")


if __name__ == "__main__":
    unittest.main()
