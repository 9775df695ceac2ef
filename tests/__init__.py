"""
Test Suite for the Java/Scala Endpoint Scanner
===============================================

Test Structure:
    - test_paths.py: path normalization and matching helpers
    - test_java_scanner.py / test_scala_scanner.py: framework extractors
    - test_spec.py: OpenAPI/Swagger parsing
    - test_coverage.py: coverage matching
    - test_dispatcher.py: extractor dispatch and scan aggregation
    - test_main.py: configuration, file collection, spec discovery, export, CLI
"""
