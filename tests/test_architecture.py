"""Architectural boundary tests using pytest-archon.

These tests verify that the codebase follows clean architecture principles:
- Domain layer has no dependencies on adapters or application
- Application services don't depend on adapters
- Only the web adapter consumes application services
- The collector entry point does not pull in the web adapter
"""

import pytest
from pytest_archon import archrule


def test_domain_has_no_outward_dependencies() -> None:
    """Domain should not import adapters or application services."""
    (
        archrule("domain independence", comment="Domain layer should be independent")
        .match("city_cycling.domain*")
        .should_not_import("city_cycling.adapters*")
        .should_not_import("city_cycling.application*")
        .may_import("city_cycling.domain*")
        .check("city_cycling")
    )


def test_domain_models_have_no_dependencies() -> None:
    """Domain models should only import other domain models."""
    (
        archrule("domain models", comment="Domain models should be independent")
        .match("city_cycling.domain.models*")
        .should_not_import("city_cycling.domain.ports*")
        .should_not_import("city_cycling.domain.contracts*")
        .may_import("city_cycling.domain.models*")
        .check("city_cycling")
    )


def test_application_services_dont_import_adapters() -> None:
    """Application services should not depend on adapters (infrastructure layer)."""
    (
        archrule(
            "application services", comment="Application services should not depend on adapters"
        )
        .match("city_cycling.application*")
        .should_not_import("city_cycling.adapters*")
        .may_import("city_cycling.domain*")
        .may_import("city_cycling.application*")
        .check("city_cycling")
    )


@pytest.mark.parametrize(
    "adapter",
    [
        "city_cycling.adapters.storage*",
        "city_cycling.adapters.tfl_api*",
        "city_cycling.adapters.config*",
        "city_cycling.adapters.web.cache*",
    ],
)
def test_only_web_adapter_imports_application(adapter: str) -> None:
    """Adapters other than the web adapter should not import application services."""
    (
        archrule(
            "adapters independence", comment="Only the web adapter consumes application services"
        )
        .match(adapter)
        .should_not_import("city_cycling.application*")
        .may_import("city_cycling.domain*")
        .may_import("city_cycling.adapters*")
        .check("city_cycling", only_direct_imports=True)
    )


def test_collector_doesnt_import_web_adapter() -> None:
    """Collector should not import the web adapter so it runs without a server stack."""
    (
        archrule("collector independence", comment="Collector should not depend on web adapters")
        .match("city_cycling.collector")
        .should_not_import("city_cycling.adapters.web*")
        .may_import("city_cycling.domain*")
        .may_import("city_cycling.application*")
        .may_import("city_cycling.adapters.storage*")
        .may_import("city_cycling.adapters.tfl_api*")
        .may_import("city_cycling.adapters.config*")
        .check("city_cycling", only_direct_imports=True)
    )


def test_feed_adapter_doesnt_import_config() -> None:
    """The feed client owns its defaults; configuration depends on it, not the reverse."""
    (
        archrule("feed independence", comment="Feed adapter should not depend on configuration")
        .match("city_cycling.adapters.tfl_api*")
        .should_not_import("city_cycling.adapters.config*")
        .may_import("city_cycling.domain*")
        .check("city_cycling", only_direct_imports=True)
    )
