"""Shared test fixtures for salesforce-metadata tests.

Builds a small described org (Account, Contact, Opportunity) from
describe-style payloads so tests run without a live Salesforce
connection.
"""

from typing import Any

import pytest

from salesforce_metadata.describe import parse_sobject_describe
from salesforce_metadata.models import Table
from salesforce_metadata.projector import DatabaseMetadata
from salesforce_metadata.schema_cache import SchemaCache

ACCOUNT_DESCRIBE: dict[str, Any] = {
    "name": "Account",
    "label": "Account",
    "queryable": True,
    "fields": [
        {"name": "Id", "type": "id", "length": 18, "nillable": False, "label": "Account ID"},
        {"name": "Name", "type": "string", "length": 255, "nillable": False, "label": "Name"},
        {
            "name": "AnnualRevenue",
            "type": "currency",
            "length": 0,
            "precision": 18,
            "nillable": True,
            "label": "Annual Revenue",
        },
        {
            "name": "ParentId",
            "type": "reference",
            "length": 18,
            "nillable": True,
            "label": "Parent Account ID",
            "referenceTo": ["Account"],
        },
    ],
}

CONTACT_DESCRIBE: dict[str, Any] = {
    "name": "Contact",
    "label": "Contact",
    "queryable": True,
    "fields": [
        {"name": "Id", "type": "id", "length": 18, "nillable": False, "label": "Contact ID"},
        {
            "name": "AccountId",
            "type": "reference",
            "length": 18,
            "nillable": True,
            "label": "Account ID",
            "referenceTo": ["Account"],
        },
        {"name": "Email", "type": "email", "length": 80, "nillable": True, "label": "Email"},
        {
            "name": "DoNotCall",
            "type": "boolean",
            "length": 0,
            "nillable": False,
            "label": "Do Not Call",
        },
    ],
}

OPPORTUNITY_DESCRIBE: dict[str, Any] = {
    "name": "Opportunity",
    "label": "Opportunity",
    "queryable": True,
    "fields": [
        {"name": "Id", "type": "id", "length": 18, "nillable": False, "label": "Opportunity ID"},
        {
            "name": "StageName",
            "type": "picklist",
            "length": 255,
            "nillable": False,
            "label": "Stage",
        },
        {
            "name": "Telemetry__c",
            "type": "unknown_future_type",
            "length": 0,
            "nillable": True,
            "label": "Telemetry",
        },
    ],
}

DESCRIBES = {
    "Account": ACCOUNT_DESCRIBE,
    "Contact": CONTACT_DESCRIBE,
    "Opportunity": OPPORTUNITY_DESCRIBE,
}

DESCRIBE_GLOBAL: dict[str, Any] = {
    "sobjects": [
        {"name": "Account", "label": "Account", "queryable": True},
        {"name": "Contact", "label": "Contact", "queryable": True},
        {"name": "AccountChangeEvent", "label": "Account Change Event", "queryable": False},
        {"name": "Opportunity", "label": "Opportunity", "queryable": True},
    ]
}


class CountingFetcher:
    """Table fetcher that counts calls and can fail on demand."""

    def __init__(self, tables: list[Table], failures: int = 0) -> None:
        self.tables = tables
        self.failures = failures
        self.calls = 0

    def __call__(self) -> list[Table]:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("Cannot connect to Salesforce")
        return self.tables


@pytest.fixture()
def tables() -> list[Table]:
    return [parse_sobject_describe(d) for d in DESCRIBES.values()]


@pytest.fixture()
def fetcher(tables: list[Table]) -> CountingFetcher:
    return CountingFetcher(tables)


@pytest.fixture()
def cache(fetcher: CountingFetcher) -> SchemaCache:
    return SchemaCache(fetcher)


@pytest.fixture()
def metadata(cache: SchemaCache) -> DatabaseMetadata:
    return DatabaseMetadata(cache)


@pytest.fixture(autouse=True)
def _reset_connection():
    """Drop any module-level connection left by a test."""
    from salesforce_metadata.tools import metadata as metadata_tools

    yield
    metadata_tools.disconnect()


@pytest.fixture()
def describe_global() -> dict[str, Any]:
    return DESCRIBE_GLOBAL


@pytest.fixture()
def describes() -> dict[str, dict[str, Any]]:
    return DESCRIBES
