#!/usr/bin/env python3
"""
Endpoint Scanner v1.0
=====================
Pattern-based REST endpoint discovery for Java and Scala services, with
optional OpenAPI/Swagger documentation coverage analysis.

Features:
  - Spring (Java + Scala), Play Framework routes, Akka HTTP, http4s
  - OpenAPI 3.x / Swagger 2.0 discovery and coverage matching
  - Parallel file reading for large codebases
  - Console, CSV and JSON output
  - Remote Git repositories (shallow clone)

Usage: python main.py [OPTIONS] <path>
"""

import sys
import os
import re
import csv
import json
import argparse
import tempfile
import shutil
import logging
import fnmatch
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Set, Tuple, Optional, Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import Lock

# =============================================================================
# VERSION
# =============================================================================
__version__ = "1.0.0"

# =============================================================================
# DEPENDENCY CHECK
# =============================================================================
REQUIRED = {
    "rich": "rich>=13.7.0",
    "git": "gitpython>=3.1.40",
    "dotenv": "python-dotenv>=1.0.0",
    "yaml": "pyyaml>=6.0",
}

def check_deps():
    missing = []
    for mod, pkg in REQUIRED.items():
        try:
            __import__(mod)
        except ImportError:
            missing.append(pkg)
    if missing:
        print(f"\nMissing: pip install {' '.join(missing)}\n")
        sys.exit(1)

check_deps()

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.prompt import Prompt, Confirm
from rich import box
from dotenv import load_dotenv
import git
import yaml

from scanners import (
    EndpointDispatcher,
    EndpointWithCoverage,
    CoverageStatus,
    ScanOutcome,
    Specification,
)
from scanners.spec import build_specification, load_document

load_dotenv()
console = Console()

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================
def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Configure structured logging for the scanner."""
    logger = logging.getLogger("endpoint_scanner")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler with structured format
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)  # Only warnings and errors to console
    console_formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            datefmt='%Y-%m-%dT%H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    return logger

logger = setup_logging()

# =============================================================================
# CONFIGURATION - IGNORE PATTERNS
# =============================================================================
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Version control
    ".git", ".svn", ".hg",
    # Dependencies
    "node_modules",
    # Build output
    "target", "build", "out", "dist",
    # Tests
    "test", "tests",
    # Java / Scala tooling
    ".gradle", ".idea", ".settings", ".bsp", ".metals", ".bloop",
    # IDE/OS
    ".vscode", ".DS_Store",
}

SPEC_IGNORE_DIRS: Set[str] = {
    "node_modules", "target", "build", "dist", ".git", "coverage", "test", "tests",
}

SPEC_IGNORE_FILES = (
    "*.test.*", "*.spec.*", "package*.json", "tsconfig*.json", "jest*.json", "eslint*.json",
)

SPEC_EXTENSIONS = {".yaml", ".yml", ".json"}

# Path fragments that suggest a YAML/JSON file was meant to be an API spec.
SPEC_INDICATORS = (
    "swagger", "openapi", "api-spec", "api.", "spec.",
    "/docs/", "/api/", "/swagger/", "/openapi/",
    "management.", "actuator.",
)

# =============================================================================
# CONFIGURATION SYSTEM
# =============================================================================
def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class ScannerConfig:
    """
    Scanner configuration with sensible defaults.
    Can be loaded from environment variables, config file, or CLI args.
    """
    # Scanning options
    ignore_dirs: Set[str] = field(default_factory=set)
    max_file_size_mb: int = 10
    parallel_workers: int = 4

    # Coverage
    api_spec: bool = False

    # Output options
    csv_export: bool = True
    output_dir: str = "output"
    summary: bool = False
    quiet: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Apply default ignore dirs if not set."""
        if not self.ignore_dirs:
            self.ignore_dirs = DEFAULT_IGNORE_DIRS.copy()

    @classmethod
    def from_env(cls) -> "ScannerConfig":
        """Load configuration from environment variables."""
        return cls(
            max_file_size_mb=int(os.getenv("ENDPOINT_SCANNER_MAX_FILE_SIZE", 10)),
            parallel_workers=int(os.getenv("ENDPOINT_SCANNER_WORKERS", 4)),
            api_spec=_env_flag("ENDPOINT_SCANNER_API_SPEC", "false"),
            csv_export=_env_flag("ENDPOINT_SCANNER_CSV", "true"),
            output_dir=os.getenv("ENDPOINT_SCANNER_OUTPUT_DIR", "output"),
            log_level=os.getenv("ENDPOINT_SCANNER_LOG_LEVEL", "INFO"),
            log_file=os.getenv("ENDPOINT_SCANNER_LOG_FILE"),
        )

    @classmethod
    def from_file(cls, path: str) -> "ScannerConfig":
        """Load configuration from JSON or YAML file."""
        with open(path, 'r') as f:
            if path.endswith(('.yaml', '.yml')):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
        data = data or {}

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")

        # Convert ignore_dirs list to set if present
        if 'ignore_dirs' in data and isinstance(data['ignore_dirs'], list):
            data['ignore_dirs'] = set(data['ignore_dirs'])

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "parallel_workers": self.parallel_workers,
            "api_spec": self.api_spec,
            "csv_export": self.csv_export,
            "output_dir": self.output_dir,
            "summary": self.summary,
            "quiet": self.quiet,
            "log_level": self.log_level,
        }

# =============================================================================
# API SPEC DISCOVERY
# =============================================================================
def looks_like_spec_file(path: str) -> bool:
    """Heuristic: does this path look like it was meant to be an API spec?"""
    lowered = path.replace('\\', '/').lower()
    return any(indicator in lowered for indicator in SPEC_INDICATORS)


class SpecFinder:
    """
    Locate OpenAPI/Swagger documents below a directory.

    Every YAML/JSON file is a candidate; ``build_specification`` decides. Failures
    are only reported for files whose name suggests they were meant to be
    a specification.
    """

    def __init__(self, target_path: str):
        self.target = Path(target_path)
        self.stats = {"candidates": 0, "specs": 0, "warnings": 0}

    def _is_ignored_file(self, name: str) -> bool:
        return any(fnmatch.fnmatch(name, pattern) for pattern in SPEC_IGNORE_FILES)

    def collect_candidates(self) -> List[Path]:
        candidates = []
        for root, dirs, files in os.walk(self.target):
            dirs[:] = sorted(d for d in dirs if d not in SPEC_IGNORE_DIRS)
            for f in sorted(files):
                fp = Path(root) / f
                if fp.suffix.lower() in SPEC_EXTENSIONS and not self._is_ignored_file(f):
                    candidates.append(fp)
        return candidates

    def _warn(self, fp: Path, reason: str):
        self.stats["warnings"] += 1
        logger.warning(f"Could not parse potential spec file {fp}: {reason}")

    def load_spec(self, fp: Path) -> Optional[Specification]:
        format_hint = "json" if fp.suffix.lower() == ".json" else "yaml"
        try:
            content = fp.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            if looks_like_spec_file(str(fp)):
                self._warn(fp, str(e))
            return None

        document = load_document(content, format_hint)
        if document is None:
            if looks_like_spec_file(str(fp)):
                self._warn(fp, f"invalid {format_hint.upper()}")
            return None
        return build_specification(document, str(fp))

    def find_specs(self) -> List[Specification]:
        specs = []
        candidates = self.collect_candidates()
        self.stats["candidates"] = len(candidates)
        logger.info(f"Scanning {len(candidates)} YAML/JSON files for API specifications")

        for fp in candidates:
            spec = self.load_spec(fp)
            if spec:
                specs.append(spec)

        self.stats["specs"] = len(specs)
        return specs

# =============================================================================
# ENDPOINT SCANNER
# =============================================================================
class EndpointScanner:
    """
    Endpoint scanner orchestrator.
    Collects Java/Scala/routes files, reads them and hands the content to
    the extractor dispatcher.

    Features:
    - Sequential or parallel file reading
    - Error isolation per file
    - Progress reporting
    - Optional API spec coverage
    """

    def __init__(self, target_path: str, config: Optional[ScannerConfig] = None,
                 dispatcher: Optional[EndpointDispatcher] = None):
        self.target = Path(target_path)
        self.config = config or ScannerConfig.from_env()
        self.dispatcher = dispatcher or EndpointDispatcher()
        self.stats = {"files_skipped": 0, "files_errored": 0}
        self._lock = Lock()
        self._ignore_dirs = self.config.ignore_dirs or DEFAULT_IGNORE_DIRS

    def should_ignore(self, path: Path) -> bool:
        """Check if path should be ignored."""
        relative = path.relative_to(self.target) if path.is_relative_to(self.target) else path
        for part in relative.parts:
            if part in self._ignore_dirs:
                return True
        return False

    def _collect_files(self) -> List[Path]:
        """Collect all scannable files."""
        if not self.target.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.target}")

        all_files = []
        for root, dirs, files in os.walk(self.target):
            # Modify dirs in-place to skip ignored directories
            dirs[:] = sorted(d for d in dirs if d not in self._ignore_dirs)

            for f in sorted(files):
                fp = Path(root) / f
                if self.should_ignore(fp):
                    self.stats["files_skipped"] += 1
                    continue

                if self.dispatcher.is_supported(str(fp)):
                    all_files.append(fp)

        return all_files

    def _read_file(self, fp: Path) -> Tuple[Optional[str], Optional[str]]:
        """Read one file; returns ``(content, error)``, both None when skipped."""
        try:
            file_size_mb = fp.stat().st_size / (1024 * 1024)
            if file_size_mb > self.config.max_file_size_mb:
                logger.warning(f"Skipping large file {fp}: {file_size_mb:.1f}MB > {self.config.max_file_size_mb}MB")
                with self._lock:
                    self.stats["files_skipped"] += 1
                return None, None

            with open(fp, 'r', encoding='utf-8', errors='ignore') as f:
                return f.read(), None

        except OSError as e:
            logger.debug(f"File read error {fp}: {e}")
            with self._lock:
                self.stats["files_errored"] += 1
            return None, f"Failed to process {fp}: {e}"

    def _run(self, files: List[Path], contents: List[Tuple[Optional[str], Optional[str]]]) -> ScanOutcome:
        read_errors = []
        pairs = []
        for fp, (content, error) in zip(files, contents):
            if error:
                read_errors.append(error)
            elif content is not None:
                pairs.append((str(fp), content))

        outcome = self.dispatcher.scan(pairs, files_total=len(files))
        return replace(outcome, errors=tuple(read_errors) + outcome.errors)

    def _collect_or_fail(self) -> Tuple[List[Path], Optional[ScanOutcome]]:
        try:
            return self._collect_files(), None
        except OSError as e:
            logger.error(f"Failed to scan directory {self.target}: {e}")
            return [], ScanOutcome(files_total=0, files_scanned=0,
                                   errors=(f"Failed to scan directory: {e}",))

    def scan(self, progress_cb: Optional[Callable[[int, int, Path], None]] = None) -> ScanOutcome:
        """
        Scan the target directory sequentially.
        Use scan_parallel() for large codebases.
        """
        all_files, failed = self._collect_or_fail()
        if failed:
            return failed

        contents = []
        for i, fp in enumerate(all_files):
            if progress_cb:
                progress_cb(i + 1, len(all_files), fp)
            contents.append(self._read_file(fp))

        return self._run(all_files, contents)

    def scan_parallel(self, progress_cb: Optional[Callable[[int, int, Path], None]] = None) -> ScanOutcome:
        """
        Parallel file reading for large codebases.
        Extraction still runs in collection order, so endpoints stay grouped per file.
        """
        all_files, failed = self._collect_or_fail()
        if failed:
            return failed

        contents: List[Tuple[Optional[str], Optional[str]]] = [(None, None)] * len(all_files)
        completed = 0

        logger.info(f"Starting parallel scan with {self.config.parallel_workers} workers")

        with ThreadPoolExecutor(max_workers=self.config.parallel_workers) as executor:
            future_to_index = {
                executor.submit(self._read_file, fp): i
                for i, fp in enumerate(all_files)
            }

            for future in as_completed(future_to_index):
                i = future_to_index[future]
                completed += 1

                if progress_cb:
                    progress_cb(completed, len(all_files), all_files[i])

                contents[i] = future.result()

        outcome = self._run(all_files, contents)
        logger.info(f"Parallel scan complete: {len(outcome.endpoints)} endpoints from {outcome.files_scanned} files")
        return outcome

    def find_specs(self) -> List[Specification]:
        return SpecFinder(str(self.target)).find_specs()

    def scan_with_coverage(self, parallel: bool = False,
                           progress_cb: Optional[Callable[[int, int, Path], None]] = None) -> ScanOutcome:
        outcome = self.scan_parallel(progress_cb) if parallel else self.scan(progress_cb)
        if not self.config.api_spec:
            return outcome
        return outcome.with_coverage(self.find_specs())

# =============================================================================
# OUTPUT FORMATTERS
# =============================================================================
METHOD_COLORS = {
    "GET": "green",
    "POST": "blue",
    "PUT": "yellow",
    "PATCH": "magenta",
    "DELETE": "red",
}

COVERAGE_COLORS = {
    CoverageStatus.COVERED: "green",
    CoverageStatus.NOT_COVERED: "red",
    CoverageStatus.NO_SPEC_FOUND: "dim",
}

def fmt_method(method: str) -> str:
    color = METHOD_COLORS.get(method, "green")
    return f"[bold {color}]{method}[/bold {color}]"

def fmt_coverage(status: str) -> str:
    color = COVERAGE_COLORS.get(status, "white")
    return f"[{color}]{status}[/{color}]"

def short_path(full_path: str) -> str:
    parts = full_path.replace('\\', '/').split('/')
    return f".../{'/'.join(parts[-3:])}" if len(parts) > 3 else full_path

def handler_label(ep) -> str:
    return ".".join(part for part in (ep.class_name, ep.method_name) if part)

def make_results_panel(outcome: ScanOutcome) -> Panel:
    txt = f"""
[bold]Total files:[/bold] {outcome.files_total}
[bold]Scanned files:[/bold] {outcome.files_scanned}
[bold]Endpoints found:[/bold] {len(outcome.endpoints)}"""
    if outcome.errors:
        txt += f"\n[bold red]Errors:[/bold red] {len(outcome.errors)}"
    return Panel(txt, title=" Endpoint Scan Results", border_style="blue")

def make_table(outcome: ScanOutcome) -> Table:
    with_coverage = outcome.has_coverage
    t = Table(title=" Discovered Endpoints", box=box.ROUNDED, header_style="bold magenta")
    t.add_column("File", style="bold white", max_width=40)
    t.add_column("Method", width=8)
    t.add_column("Path", max_width=50)
    t.add_column("Line", style="dim", width=6)
    t.add_column("Handler", style="dim", max_width=40)
    if with_coverage:
        t.add_column("Coverage", width=14)

    current_file = None
    for ep in outcome.endpoints:
        if current_file is not None and ep.file_path != current_file:
            t.add_section()
        file_cell = short_path(ep.file_path) if ep.file_path != current_file else ""
        current_file = ep.file_path

        row = [file_cell, fmt_method(ep.method.value), ep.path, str(ep.line_number), handler_label(ep)]
        if with_coverage:
            status = ep.coverage.status if isinstance(ep, EndpointWithCoverage) else ""
            row.append(fmt_coverage(status))
        t.add_row(*row)

    return t

def make_method_summary(outcome: ScanOutcome) -> Table:
    counts = outcome.method_counts()
    t = Table(title=" Summary by HTTP Method", box=box.SIMPLE, header_style="bold blue")
    t.add_column("Method", width=8)
    t.add_column("Count", justify="right")
    for method in METHOD_COLORS:
        if counts.get(method):
            t.add_row(fmt_method(method), str(counts[method]))
    return t

def make_coverage_summary(outcome: ScanOutcome) -> Panel:
    counts = outcome.coverage_counts()
    txt = "[bold cyan]Coverage:[/bold cyan]\n" + "\n".join(
        f"   {fmt_coverage(status)}: {count}" for status, count in counts.items()
    )

    txt += "\n\n[bold cyan]API Specifications:[/bold cyan]\n"
    if outcome.specifications:
        txt += "\n".join(
            f"   {short_path(spec.source_path)} ({spec.kind} {spec.version}, {len(spec.endpoints)} endpoints)"
            for spec in outcome.specifications
        )
    else:
        txt += "   [yellow]No OpenAPI/Swagger specifications found[/yellow]"

    return Panel(txt, title=" API Spec Coverage", border_style="cyan")

def print_errors(errors) -> None:
    console.print("\n[bold red] Errors:[/bold red]")
    for error in errors:
        console.print(f"   [red]- {error}[/red]")

# =============================================================================
# CSV / JSON EXPORT
# =============================================================================
class CsvExporter:
    """Write scan results as CSV, with coverage columns when available."""

    HEADERS = ["Method", "Path", "File Path", "Line Number", "Class Name", "Method Name"]
    COVERAGE_HEADERS = ["API Spec Coverage", "Spec File", "Matched Operation"]

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd or os.getcwd()

    def relative_spec_path(self, spec_path: str) -> str:
        prefix = self.cwd.rstrip(os.sep) + os.sep
        return spec_path[len(prefix):] if spec_path.startswith(prefix) else spec_path

    def _base_row(self, ep) -> List[str]:
        return [
            ep.method.value,
            ep.path,
            ep.file_path,
            str(ep.line_number),
            ep.class_name or "",
            ep.method_name or "",
        ]

    def _coverage_cells(self, ep: EndpointWithCoverage) -> List[str]:
        coverage = ep.coverage
        matched = coverage.matched
        return [
            coverage.status,
            self.relative_spec_path(coverage.spec_file) if coverage.spec_file else "",
            (matched.operation_id or matched.summary or "") if matched else "",
        ]

    def rows(self, outcome: ScanOutcome) -> List[List[str]]:
        with_coverage = outcome.has_coverage
        rows = [self.HEADERS + self.COVERAGE_HEADERS if with_coverage else list(self.HEADERS)]
        for ep in outcome.endpoints:
            row = self._base_row(ep)
            if with_coverage and isinstance(ep, EndpointWithCoverage):
                row.extend(self._coverage_cells(ep))
            rows.append(row)
        return rows

    def export(self, outcome: ScanOutcome, output_path: str) -> str:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
            writer.writerows(self.rows(outcome))
        return output_path

    @staticmethod
    def project_name(target: str) -> str:
        name = Path(target).resolve().name.lower()
        name = re.sub(r'[^a-z0-9-]', '-', name)
        name = re.sub(r'-+', '-', name).strip('-')
        return name or "project"

    @classmethod
    def generate_output_path(cls, target: str, output_dir: str = "output",
                             now: Optional[datetime] = None) -> str:
        timestamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
        filename = f"{cls.project_name(target)}-endpoints-{timestamp}.csv"
        return str(Path(os.getcwd()) / output_dir / filename)


def export_json(outcome: ScanOutcome, target: str, output_file: str) -> None:
    data = {
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "target": target,
        "summary": {
            "files_total": outcome.files_total,
            "files_scanned": outcome.files_scanned,
            "endpoints": len(outcome.endpoints),
            "by_method": outcome.method_counts(),
            "coverage": outcome.coverage_counts() if outcome.has_coverage else None,
        },
        "endpoints": [ep.to_dict() for ep in outcome.endpoints],
        "specifications": [spec.to_dict() for spec in outcome.specifications],
        "errors": list(outcome.errors),
    }
    with open(output_file, 'w') as f:
        json.dump(data, f, indent=2)

# =============================================================================
# INTERACTIVE MODE
# =============================================================================
OUTPUT_MODES = ("standard", "quiet", "minimal")

def prompt_options() -> Dict[str, Any]:
    """Ask for the scan options interactively."""
    console.print(Panel.fit("[bold cyan] Endpoint Scanner - Interactive Setup[/bold cyan]", border_style="cyan"))

    while True:
        directory = os.path.abspath(Prompt.ask("Enter the directory path to scan for endpoints", default="."))
        if os.path.isdir(directory):
            break
        console.print(f"[red]Directory does not exist: {directory}[/red]")

    api_spec = Confirm.ask(
        "Enable API specification analysis? (Finds OpenAPI/Swagger files and analyzes coverage)",
        default=True,
    )
    summary = Confirm.ask("Show summary by HTTP method?", default=True)
    output_mode = Prompt.ask("Choose output mode", choices=list(OUTPUT_MODES), default="standard")
    csv_export = Confirm.ask("Export results to CSV file?", default=True)

    return {
        "directory": directory,
        "api_spec": api_spec,
        "summary": summary,
        "output_mode": output_mode,
        "csv": csv_export,
    }

# =============================================================================
# GIT
# =============================================================================
def clone_repo(url: str) -> str:
    tmp = tempfile.mkdtemp(prefix="endpoint_scan_")
    console.print(f"[cyan]Cloning: {url}[/cyan]")
    git.Repo.clone_from(url, tmp, depth=1)
    console.print(f"[green] Cloned[/green]")
    return tmp

# =============================================================================
# MAIN CLI
# =============================================================================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"Endpoint Scanner v{__version__} - extract REST endpoints from Java/Scala applications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py ./service                      # Basic scan, CSV written to ./output
  python main.py ./service --api-spec           # With OpenAPI/Swagger coverage
  python main.py ./service -s --no-csv          # Method summary, no CSV
  python main.py ./service -o endpoints.json    # JSON export
  python main.py https://github.com/org/repo    # Scan a remote repository
  python main.py --interactive                  # Guided setup
        """
    )

    # Target
    parser.add_argument("target", nargs="?", help="Directory or Git URL to scan")

    # Output options
    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument("-s", "--summary", action="store_true",
                              help="Show summary by HTTP method")
    output_group.add_argument("-q", "--quiet", action="store_true",
                              help="Suppress detailed output")
    output_group.add_argument("--no-csv", action="store_true",
                              help="Skip CSV export (exports by default)")
    output_group.add_argument("--csv-output", metavar="FILE",
                              help="CSV output path (default: ./output/<project>-endpoints-<timestamp>.csv)")
    output_group.add_argument("-o", "--output", metavar="FILE",
                              help="Output JSON file")

    # Scan options
    scan_group = parser.add_argument_group("Scan Options")
    scan_group.add_argument("--api-spec", action="store_true",
                            help="Find OpenAPI/Swagger files and analyze endpoint coverage")
    scan_group.add_argument("--parallel", action="store_true",
                            help="Enable parallel file reading")
    scan_group.add_argument("--workers", type=int,
                            help="Number of parallel workers (default: 4)")
    scan_group.add_argument("--max-file-size", type=int,
                            help="Max file size in MB to scan (default: 10)")
    scan_group.add_argument("--config", metavar="FILE",
                            help="Configuration file (JSON/YAML)")
    scan_group.add_argument("-i", "--interactive", action="store_true",
                            help="Prompt for scan options")

    # General
    parser.add_argument("--log-level", help="Log level (default: INFO)")
    parser.add_argument("--log-file", metavar="FILE", help="Write JSON log lines to file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def build_config(args: argparse.Namespace) -> ScannerConfig:
    """Config file or environment first, CLI flags on top."""
    config = ScannerConfig.from_file(args.config) if args.config else ScannerConfig.from_env()

    if args.workers is not None:
        config.parallel_workers = args.workers
    if args.max_file_size is not None:
        config.max_file_size_mb = args.max_file_size
    if args.api_spec:
        config.api_spec = True
    if args.no_csv:
        config.csv_export = False
    if args.summary:
        config.summary = True
    if args.quiet:
        config.quiet = True
    if args.log_level:
        config.log_level = args.log_level
    if args.log_file:
        config.log_file = args.log_file

    return config


def print_results(outcome: ScanOutcome, config: ScannerConfig, show_errors: bool) -> None:
    if not config.quiet:
        console.print()
        console.print(make_results_panel(outcome))
        if outcome.endpoints:
            console.print(make_table(outcome))
        else:
            console.print("[yellow] No endpoints found[/yellow]")

    if config.summary:
        console.print(make_method_summary(outcome))

    if config.api_spec and not config.quiet:
        console.print(make_coverage_summary(outcome))

    if outcome.errors and show_errors:
        print_errors(outcome.errors)


def main():
    parser = build_parser()
    args = parser.parse_args()

    show_errors = None
    if args.interactive:
        answers = prompt_options()
        args.target = answers["directory"]
        args.api_spec = answers["api_spec"]
        args.summary = answers["summary"]
        args.no_csv = not answers["csv"]
        args.quiet = answers["output_mode"] in ("quiet", "minimal")
        show_errors = answers["output_mode"] != "quiet"
    elif not args.target:
        parser.error("the following arguments are required: target")

    config = build_config(args)
    setup_logging(config.log_level, config.log_file)
    if show_errors is None:
        show_errors = not config.quiet

    target = args.target
    tmp = None
    exit_code = 0

    try:
        # Clone if URL
        if target.startswith(("http://", "https://", "git@")):
            tmp = clone_repo(target)
            target = tmp
        elif not os.path.exists(target):
            console.print(f"[red]Error: Directory not found: {os.path.abspath(target)}[/red]")
            sys.exit(1)

        target = os.path.abspath(target)
        scanner = EndpointScanner(target, config)

        if not config.quiet:
            console.print(f"[bold cyan] Scanning directory:[/bold cyan] {target}")

        # Progress callback
        def progress_cb(cur, tot, fp):
            if not config.quiet:
                prog.update(task, completed=(cur / tot) * 100,
                            description=f"[cyan]{Path(fp).name[:25]}")

        with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
                      BarColumn(), TextColumn("{task.percentage:>3.0f}%"),
                      console=console, disable=config.quiet) as prog:
            task = prog.add_task("[cyan]Scanning", total=100)
            outcome = scanner.scan_with_coverage(parallel=args.parallel, progress_cb=progress_cb)

        print_results(outcome, config, show_errors)

        # CSV export
        if config.csv_export:
            csv_path = args.csv_output or CsvExporter.generate_output_path(args.target, config.output_dir)
            CsvExporter().export(outcome, csv_path)
            if not config.quiet:
                console.print(f"[green] CSV exported to: {csv_path}[/green]")

        # JSON export
        if args.output:
            export_json(outcome, args.target, args.output)
            if not config.quiet:
                console.print(f"[green] Saved: {args.output}[/green]")

        if not outcome.endpoints and not outcome.errors:
            message = "No Java or Scala files found in the specified directory" \
                if outcome.files_total == 0 else "No endpoints found in the scanned files"
            console.print(f"[yellow] {message}[/yellow]")
        elif outcome.errors and not outcome.endpoints:
            exit_code = 1

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        if args.verbose:
            console.print_exception()
        sys.exit(1)
    finally:
        if tmp and os.path.exists(tmp):
            shutil.rmtree(tmp, ignore_errors=True)

    sys.exit(exit_code)

if __name__ == "__main__":
    main()
