"""Tests for the CLI layer: config, scanning orchestration, spec discovery and export."""

import csv
import json
import logging
import sys
from datetime import datetime

import pytest

import main
from main import (
    CsvExporter,
    EndpointScanner,
    ScannerConfig,
    SpecFinder,
    export_json,
    looks_like_spec_file,
)
from scanners import CoverageStatus, Endpoint, HttpMethod, ScanOutcome


# =============================================================================
# CONFIGURATION
# =============================================================================

def test_config_defaults():
    config = ScannerConfig()

    assert config.ignore_dirs == main.DEFAULT_IGNORE_DIRS
    assert config.ignore_dirs is not main.DEFAULT_IGNORE_DIRS
    assert config.max_file_size_mb == 10
    assert config.parallel_workers == 4
    assert config.csv_export
    assert not config.api_spec


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("ENDPOINT_SCANNER_MAX_FILE_SIZE", "2")
    monkeypatch.setenv("ENDPOINT_SCANNER_WORKERS", "8")
    monkeypatch.setenv("ENDPOINT_SCANNER_API_SPEC", "TRUE")
    monkeypatch.setenv("ENDPOINT_SCANNER_CSV", "false")
    monkeypatch.setenv("ENDPOINT_SCANNER_LOG_LEVEL", "DEBUG")

    config = ScannerConfig.from_env()

    assert config.max_file_size_mb == 2
    assert config.parallel_workers == 8
    assert config.api_spec
    assert not config.csv_export
    assert config.log_level == "DEBUG"


def test_config_from_yaml_file(tmp_path):
    path = tmp_path / "scanner.yaml"
    path.write_text("ignore_dirs: [vendor, generated]\nparallel_workers: 2\napi_spec: true\n")

    config = ScannerConfig.from_file(str(path))

    assert config.ignore_dirs == {"vendor", "generated"}
    assert config.parallel_workers == 2
    assert config.api_spec


def test_config_from_json_file(tmp_path):
    path = tmp_path / "scanner.json"
    path.write_text(json.dumps({"max_file_size_mb": 1, "output_dir": "reports"}))

    config = ScannerConfig.from_file(str(path))

    assert config.max_file_size_mb == 1
    assert config.output_dir == "reports"
    assert config.ignore_dirs == main.DEFAULT_IGNORE_DIRS


def test_config_rejects_unknown_keys(tmp_path):
    path = tmp_path / "scanner.json"
    path.write_text(json.dumps({"workers": 3}))

    with pytest.raises(ValueError, match="workers"):
        ScannerConfig.from_file(str(path))


# =============================================================================
# SCANNING
# =============================================================================

def _scanner(samples_dir, **overrides):
    return EndpointScanner(str(samples_dir), ScannerConfig(**overrides))


def test_scan_samples(samples_dir):
    outcome = _scanner(samples_dir).scan()

    assert outcome.files_total == 7
    assert outcome.files_scanned == 7
    assert len(outcome.endpoints) == 23
    assert outcome.errors == ()
    assert outcome.method_counts() == {"GET": 11, "POST": 6, "PUT": 2, "PATCH": 1, "DELETE": 3}
    # test directories are pruned entirely
    assert not any("FakeServer" in ep.file_path for ep in outcome.endpoints)


def test_scan_reports_files_in_collection_order(samples_dir):
    outcome = _scanner(samples_dir).scan()

    seen = []
    for ep in outcome.endpoints:
        name = ep.file_path.replace("\\", "/").rsplit("/", 1)[-1]
        if not seen or seen[-1] != name:
            seen.append(name)
    assert seen == [
        "routes",
        "OrderController.java",
        "UserController.java",
        "InventoryRoutes.scala",
        "ProductController.scala",
        "ReviewRoutes.scala",
    ]


def test_parallel_scan_matches_sequential(samples_dir):
    sequential = _scanner(samples_dir).scan()
    parallel = _scanner(samples_dir, parallel_workers=3).scan_parallel()

    assert parallel.endpoints == sequential.endpoints
    assert (parallel.files_total, parallel.files_scanned) == (7, 7)


def test_progress_callback_sees_every_file(samples_dir):
    calls = []
    _scanner(samples_dir).scan(progress_cb=lambda cur, tot, fp: calls.append((cur, tot)))

    assert calls == [(i, 7) for i in range(1, 8)]


def test_oversized_files_are_skipped(samples_dir):
    scanner = _scanner(samples_dir, max_file_size_mb=0)
    outcome = scanner.scan()

    assert outcome.files_total == 7
    assert outcome.files_scanned == 0
    assert outcome.endpoints == ()
    assert scanner.stats["files_skipped"] == 7


def test_missing_directory_is_reported(tmp_path):
    outcome = EndpointScanner(str(tmp_path / "missing"), ScannerConfig()).scan()

    assert outcome.files_total == 0
    assert outcome.endpoints == ()
    assert len(outcome.errors) == 1
    assert outcome.errors[0].startswith("Failed to scan directory:")


def test_empty_directory(tmp_path):
    (tmp_path / "README.md").write_text("nothing to see")
    outcome = EndpointScanner(str(tmp_path), ScannerConfig()).scan()

    assert (outcome.files_total, outcome.files_scanned, outcome.endpoints) == (0, 0, ())


def test_scan_with_coverage(samples_dir):
    outcome = _scanner(samples_dir, api_spec=True).scan_with_coverage()

    assert outcome.has_coverage
    assert [spec.source_path.rsplit("/", 1)[-1] for spec in outcome.specifications] == [
        "openapi.yaml",
        "swagger.json",
    ]
    assert outcome.coverage_counts() == {
        CoverageStatus.COVERED: 10,
        CoverageStatus.NOT_COVERED: 13,
        CoverageStatus.NO_SPEC_FOUND: 0,
    }

    covered = {
        (ep.method.value, ep.path): ep.coverage
        for ep in outcome.endpoints
        if ep.coverage.status == CoverageStatus.COVERED
    }
    assert covered[("POST", "/api/orders/search")].matched.operation_id == "searchOrders"
    assert covered[("POST", "/api/orders/search")].spec_file.endswith("swagger.json")
    assert covered[("GET", "/api/products/{id}")].matched.operation_id == "getProduct"
    assert covered[("DELETE", "/api/users/:id")].matched.summary == "Delete a user"
    assert ("GET", "/stock") not in covered


def test_scan_without_api_spec_has_no_coverage(samples_dir):
    outcome = _scanner(samples_dir).scan_with_coverage()

    assert not outcome.has_coverage
    assert outcome.specifications == ()


# =============================================================================
# SPEC DISCOVERY
# =============================================================================

def test_spec_finder_on_samples(samples_dir, caplog):
    finder = SpecFinder(str(samples_dir))

    with caplog.at_level(logging.WARNING, logger="endpoint_scanner"):
        specs = finder.find_specs()

    assert [spec.kind for spec in specs] == ["openapi", "swagger"]
    assert finder.stats == {"candidates": 4, "specs": 2, "warnings": 1}
    assert "api-broken.yaml" in caplog.text
    assert "not-a-spec.json" not in caplog.text


def test_spec_finder_survives_unrelated_undecodable_yaml(tmp_path, caplog):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "openapi.yaml").write_text("openapi: 3.0.0\ninfo: {title: x}\npaths:\n  /a:\n    get: {}\n")
    (tmp_path / "release.yaml").write_text("released: 2023-02-30\n")
    (docs / "changelog.yaml").write_text("date: 2023-02-30\n")

    finder = SpecFinder(str(tmp_path))
    with caplog.at_level(logging.WARNING, logger="endpoint_scanner"):
        specs = finder.find_specs()

    assert [s.source_path.rsplit("/", 1)[-1] for s in specs] == ["openapi.yaml"]
    # Only the file under docs/ looks like a spec, so only it is reported.
    assert finder.stats["warnings"] == 1
    assert "changelog.yaml" in caplog.text
    assert "release.yaml" not in caplog.text


def test_spec_finder_decodes_each_candidate_once(samples_dir, monkeypatch):
    calls = []
    original = main.load_document

    def counting(raw_text, format_hint):
        calls.append(format_hint)
        return original(raw_text, format_hint)

    monkeypatch.setattr(main, "load_document", counting)
    finder = SpecFinder(str(samples_dir))
    specs = finder.find_specs()

    assert len(specs) == 2
    assert len(calls) == finder.stats["candidates"] == 4


def test_spec_finder_ignores_tooling_files(tmp_path):
    spec = {"openapi": "3.0.0", "info": {}, "paths": {"/a": {"get": {}}}}
    (tmp_path / "package.json").write_text(json.dumps(spec))
    (tmp_path / "api.spec.json").write_text(json.dumps(spec))
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "openapi.json").write_text(json.dumps(spec))
    (tmp_path / "openapi.yml").write_text(json.dumps(spec))

    specs = SpecFinder(str(tmp_path)).find_specs()

    assert [s.source_path.rsplit("/", 1)[-1] for s in specs] == ["openapi.yml"]


@pytest.mark.parametrize("path, expected", [
    ("/repo/docs/api.yaml", True),
    ("/repo/src/main/resources/openapi.json", True),
    ("/repo/Swagger.yml", True),
    ("C:\\repo\\api\\users.json", True),
    ("/repo/config/application.yaml", False),
    ("/repo/data/users.json", False),
])
def test_looks_like_spec_file(path, expected):
    assert looks_like_spec_file(path) is expected


# =============================================================================
# EXPORT
# =============================================================================

def _routes_outcome():
    endpoint = Endpoint(
        method=HttpMethod.GET,
        path="/assets/*file",
        file_path="conf/routes",
        line_number=9,
        method_name='controllers.Assets.versioned(path="/public", file: Asset)',
    )
    return ScanOutcome(files_total=1, files_scanned=1, endpoints=(endpoint,))


def test_csv_rows_without_coverage():
    rows = CsvExporter().rows(_routes_outcome())

    assert rows == [
        ["Method", "Path", "File Path", "Line Number", "Class Name", "Method Name"],
        ["GET", "/assets/*file", "conf/routes", "9", "",
         'controllers.Assets.versioned(path="/public", file: Asset)'],
    ]


def test_csv_export_quotes_only_when_needed(tmp_path):
    path = CsvExporter().export(_routes_outcome(), str(tmp_path / "nested" / "out.csv"))

    lines = (tmp_path / "nested" / "out.csv").read_text(encoding="utf-8").splitlines()
    assert path.endswith("out.csv")
    assert lines[0] == "Method,Path,File Path,Line Number,Class Name,Method Name"
    assert lines[1] == 'GET,/assets/*file,conf/routes,9,,"controllers.Assets.versioned(path=""/public"", file: Asset)"'


def test_csv_rows_with_coverage(samples_dir):
    outcome = _scanner(samples_dir, api_spec=True).scan_with_coverage()
    rows = CsvExporter(cwd=str(samples_dir)).rows(outcome)

    assert rows[0][-3:] == ["API Spec Coverage", "Spec File", "Matched Operation"]
    assert len(rows) == 24

    by_key = {(row[0], row[1]): row for row in rows[1:]}
    assert by_key[("GET", "/api/users")][-3:] == ["covered", "docs/openapi.yaml", "listUsers"]
    assert by_key[("DELETE", "/api/users/:id")][-1] == "Delete a user"
    assert by_key[("GET", "/stock")][-3:] == ["not-covered", "", ""]


def test_relative_spec_path():
    exporter = CsvExporter(cwd="/work")

    assert exporter.relative_spec_path("/work/docs/openapi.yaml") == "docs/openapi.yaml"
    assert exporter.relative_spec_path("/elsewhere/openapi.yaml") == "/elsewhere/openapi.yaml"


def test_project_name_and_output_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = str(tmp_path / "My Service_v2")

    assert CsvExporter.project_name(target) == "my-service-v2"

    path = CsvExporter.generate_output_path(target, now=datetime(2024, 1, 2, 3, 4, 5))
    assert path == str(tmp_path / "output" / "my-service-v2-endpoints-2024-01-02T03-04-05.csv")


def test_export_json(tmp_path):
    out = tmp_path / "scan.json"
    export_json(_routes_outcome(), "/repo", str(out))

    data = json.loads(out.read_text())
    assert data["target"] == "/repo"
    assert data["summary"]["endpoints"] == 1
    assert data["summary"]["by_method"] == {"GET": 1}
    assert data["summary"]["coverage"] is None
    assert data["endpoints"][0]["path"] == "/assets/*file"


# =============================================================================
# CLI
# =============================================================================

def _run_main(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["main.py", *argv])
    with pytest.raises(SystemExit) as exc:
        main.main()
    return exc.value.code


def test_main_scans_directory(monkeypatch, samples_dir):
    assert _run_main(monkeypatch, str(samples_dir), "--no-csv", "-q") == 0


def test_main_missing_directory(monkeypatch, tmp_path):
    assert _run_main(monkeypatch, str(tmp_path / "missing"), "--no-csv", "-q") == 1


def test_main_empty_directory_is_not_an_error(monkeypatch, tmp_path):
    assert _run_main(monkeypatch, str(tmp_path), "--no-csv", "-q") == 0


def test_main_writes_csv_and_json(monkeypatch, samples_dir, tmp_path):
    csv_path = tmp_path / "endpoints.csv"
    json_path = tmp_path / "endpoints.json"

    code = _run_main(
        monkeypatch, str(samples_dir), "-q", "--api-spec",
        "--csv-output", str(csv_path), "-o", str(json_path),
    )

    assert code == 0
    with open(csv_path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 24
    assert rows[0][-1] == "Matched Operation"

    data = json.loads(json_path.read_text())
    assert data["summary"]["coverage"]["covered"] == 10
    assert len(data["specifications"]) == 2


def test_main_requires_target(monkeypatch):
    assert _run_main(monkeypatch) == 2
