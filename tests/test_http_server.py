"""FastAPI 文件服务与实时查询接口。"""

from __future__ import annotations

from fastapi.testclient import TestClient

from github_trend_rss.fetcher import FetchFailure
from github_trend_rss.http_server import _resolve_inside, create_app

from conftest import make_record


class StubClient:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.closed = False
        self.calls = []

    def fetch(self, time_range, language, base_url):
        self.calls.append((time_range, language, base_url))
        if self.fail:
            raise FetchFailure(502, "Bad Gateway", base_url)
        return [make_record("octo/alpha", primary_language="Python")]

    def close(self) -> None:
        self.closed = True


def build(tmp_path, stub=None) -> TestClient:
    stub = stub or StubClient()
    return TestClient(create_app(tmp_path, client_factory=lambda: stub))


def test_health(tmp_path) -> None:
    assert build(tmp_path).get("/health").json() == {"status": "ok"}


def test_serves_generated_feeds(tmp_path) -> None:
    (tmp_path / "rss").mkdir()
    (tmp_path / "rss" / "python.xml").write_text("<rss/>", encoding="utf-8")
    (tmp_path / ".cache").mkdir()
    (tmp_path / ".cache" / "hidden.xml").write_text("<x/>", encoding="utf-8")
    client = build(tmp_path)

    assert client.get("/feeds").json() == {"feeds": ["rss/python.xml"]}
    response = client.get("/rss/python.xml")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.text == "<rss/>"


def test_index_for_root(tmp_path) -> None:
    (tmp_path / "index.html").write_text("<h1>feeds</h1>", encoding="utf-8")
    response = build(tmp_path).get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")


def test_missing_file_is_404(tmp_path) -> None:
    assert build(tmp_path).get("/nope.xml").status_code == 404


def test_resolve_inside_blocks_traversal(tmp_path) -> None:
    root = (tmp_path / "root").resolve()
    root.mkdir()
    (tmp_path / "secret.txt").write_text("x", encoding="utf-8")
    (root / "ok.txt").write_text("y", encoding="utf-8")
    assert _resolve_inside(root, "../secret.txt") is None
    assert _resolve_inside(root, "ok.txt") == root / "ok.txt"


def test_trending_returns_records(tmp_path) -> None:
    stub = StubClient()
    response = build(tmp_path, stub).get("/trending", params={"language": "python", "time_range": "weekly"})
    body = response.json()
    assert response.status_code == 200
    assert body["retrieved"] == 1
    assert body["repos"][0]["identifier"] == "octo/alpha"
    assert stub.calls[0][:2] == ("weekly", "python")
    assert stub.closed


def test_trending_rejects_bad_range(tmp_path) -> None:
    assert build(tmp_path).get("/trending", params={"time_range": "yearly"}).status_code == 400


def test_trending_maps_fetch_failure_to_502(tmp_path) -> None:
    stub = StubClient(fail=True)
    response = build(tmp_path, stub).get("/trending")
    assert response.status_code == 502
    assert stub.closed


def test_trending_always_fetches_github(tmp_path) -> None:
    stub = StubClient()
    response = build(tmp_path, stub).get(
        "/trending",
        params={"language": "go", "base_url": "http://169.254.169.254/latest/meta-data"},
    )
    assert response.status_code == 200
    assert stub.calls == [("daily", "go", "https://github.com/trending")]
