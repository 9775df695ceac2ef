"""Tests for file routing and result aggregation."""

import pytest

from scanners import (
    CoverageStatus,
    EndpointDispatcher,
    EndpointWithCoverage,
    HttpMethod,
    JavaScanner,
    ScalaScanner,
    ScanOutcome,
    SpecEndpoint,
    Specification,
)

JAVA_SOURCE = """\
@RestController
@RequestMapping("/api")
public class Api {
    @GetMapping("/items")
    public List<Item> items() {}
    @PostMapping("/items")
    public Item create() {}
}
"""

ROUTES_SOURCE = "GET /health controllers.Health.check()\n"


@pytest.fixture
def dispatcher():
    return EndpointDispatcher()


@pytest.mark.parametrize("file_path, scanner_type", [
    ("src/Api.java", JavaScanner),
    ("src/Api.scala", ScalaScanner),
    ("conf/routes", ScalaScanner),
    ("conf/admin.routes", ScalaScanner),
    ("C:\\app\\conf\\routes", ScalaScanner),
])
def test_scanner_for_known_files(dispatcher, file_path, scanner_type):
    assert isinstance(dispatcher.scanner_for(file_path), scanner_type)
    assert dispatcher.is_supported(file_path)


@pytest.mark.parametrize("file_path", ["app.py", "Api.kt", "routes.txt", "conf/routes/index.html", "README"])
def test_unsupported_files(dispatcher, file_path):
    assert dispatcher.scanner_for(file_path) is None
    assert dispatcher.extract(file_path, JAVA_SOURCE) == []


def test_scan_aggregates_in_input_order(dispatcher):
    outcome = dispatcher.scan([
        ("conf/routes", ROUTES_SOURCE),
        ("src/Api.java", JAVA_SOURCE),
    ])

    assert outcome.files_total == 2
    assert outcome.files_scanned == 2
    assert outcome.errors == ()
    assert [(ep.method.value, ep.path) for ep in outcome.endpoints] == [
        ("GET", "/health"),
        ("GET", "/api/items"),
        ("POST", "/api/items"),
    ]
    assert outcome.method_counts() == {"GET": 2, "POST": 1}
    assert not outcome.has_coverage


def test_scan_keeps_caller_errors_first(dispatcher):
    outcome = dispatcher.scan(
        [("src/Api.java", JAVA_SOURCE)],
        files_total=2,
        errors=["Failed to read src/Other.java: permission denied"],
    )

    assert outcome.files_total == 2
    assert outcome.files_scanned == 1
    assert outcome.errors == ("Failed to read src/Other.java: permission denied",)


def test_one_failing_file_does_not_abort_the_scan(dispatcher, monkeypatch):
    original = dispatcher.java.extract

    def flaky(file_path, content):
        if file_path.endswith("Broken.java"):
            raise RuntimeError("boom")
        return original(file_path, content)

    monkeypatch.setattr(dispatcher.java, "extract", flaky)

    outcome = dispatcher.scan([
        ("src/Broken.java", JAVA_SOURCE),
        ("src/Api.java", JAVA_SOURCE),
    ])

    assert outcome.files_total == 2
    assert outcome.files_scanned == 1
    assert len(outcome.endpoints) == 2
    assert outcome.errors == ("Failed to process src/Broken.java: boom",)


def test_with_coverage_returns_new_outcome(dispatcher):
    outcome = dispatcher.scan([("src/Api.java", JAVA_SOURCE)])
    spec = Specification(
        source_path="docs/openapi.yaml",
        kind="openapi",
        version="3.0.3",
        endpoints=(SpecEndpoint("GET", "/api/items", "listItems"),),
    )

    covered = outcome.with_coverage([spec])

    assert not outcome.has_coverage
    assert covered.has_coverage
    assert covered.specifications == (spec,)
    assert all(isinstance(ep, EndpointWithCoverage) for ep in covered.endpoints)
    assert covered.coverage_counts() == {
        CoverageStatus.COVERED: 1,
        CoverageStatus.NOT_COVERED: 1,
        CoverageStatus.NO_SPEC_FOUND: 0,
    }

    # Re-analysing unwraps the previous verdicts instead of nesting them.
    without_specs = covered.with_coverage([])
    assert without_specs.coverage_counts()[CoverageStatus.NO_SPEC_FOUND] == 2
    assert without_specs.endpoints[0].endpoint.method == HttpMethod.GET


def test_to_dict_shape(dispatcher):
    outcome = dispatcher.scan([("conf/routes", ROUTES_SOURCE)])
    data = outcome.to_dict()

    assert data["files_total"] == 1
    assert data["endpoints"][0]["method"] == "GET"
    assert data["endpoints"][0]["method_name"] == "controllers.Health.check()"
    assert data["errors"] == []
    assert data["specifications"] == []


def test_empty_outcome_counts():
    outcome = ScanOutcome(files_total=0, files_scanned=0)

    assert outcome.method_counts() == {}
    assert outcome.coverage_counts() == {status: 0 for status in CoverageStatus.ALL}
