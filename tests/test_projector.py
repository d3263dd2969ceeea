"""Tests for the relational metadata views."""

import threading

import pytest

from salesforce_metadata.models import Column, Table
from salesforce_metadata.projector import (
    COLUMN_NO_NULLS,
    COLUMN_NULLABLE,
    DEFAULT_CATALOG,
    DEFAULT_SCHEMA,
    UNSUPPORTED_VIEWS,
    DatabaseMetadata,
    SyntheticCounter,
    matches_pattern,
)
from salesforce_metadata.results import EMPTY_SHAPE
from salesforce_metadata.schema_cache import MetadataUnavailable, SchemaCache
from salesforce_metadata.type_catalog import SqlType


def _two_table_metadata() -> DatabaseMetadata:
    """Account(Id) and Contact(Id, AccountId -> Account.Id)."""
    account = Table(
        name="Account",
        comment="Account",
        columns=(Column("Id", "id", "Account", length=18, nillable=False),),
    )
    contact = Table(
        name="Contact",
        comment="Contact",
        columns=(
            Column("Id", "id", "Contact", length=18, nillable=False),
            Column(
                "AccountId",
                "reference",
                "Contact",
                length=18,
                nillable=True,
                referenced_table="Account",
                referenced_column="Id",
            ),
        ),
    )
    return DatabaseMetadata(SchemaCache(lambda: [account, contact]))


class TestPatternMatching:
    """Only "match all" and "exact name" are distinguished."""

    @pytest.mark.parametrize("pattern", [None, "%", " % ", "%\t"])
    def test_match_all(self, pattern: str | None) -> None:
        assert matches_pattern(pattern, "Account")

    @pytest.mark.parametrize("pattern", ["Account", "account", "ACCOUNT"])
    def test_case_insensitive_exact(self, pattern: str) -> None:
        assert matches_pattern(pattern, "Account")

    @pytest.mark.parametrize("pattern", ["Acc", "Acc%", "%ount", "Account_", "", "_ccount"])
    def test_no_wildcards(self, pattern: str) -> None:
        assert not matches_pattern(pattern, "Account")


class TestCatalogsAndSchemas:
    """Fixed single-row views."""

    def test_catalogs(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_catalogs()
        assert result.rows == [{"TABLE_CAT": DEFAULT_CATALOG}]
        assert result.shape.names == ["TABLE_CAT"]

    def test_schemas(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_schemas()
        assert result.rows == [
            {"TABLE_SCHEM": DEFAULT_SCHEMA, "TABLE_CATALOG": DEFAULT_CATALOG, "IS_DEFAULT": True}
        ]

    def test_schemas_ignore_filters(self, metadata: DatabaseMetadata) -> None:
        assert metadata.list_schemas("x", "y").rows == metadata.list_schemas().rows

    def test_table_types(self, metadata: DatabaseMetadata) -> None:
        assert metadata.list_table_types().rows == [{"TABLE_TYPE": "TABLE"}]

    def test_fixed_views_do_not_fetch(self, metadata: DatabaseMetadata, fetcher) -> None:
        metadata.list_catalogs()
        metadata.list_schemas()
        metadata.list_table_types()
        metadata.list_type_info()
        assert fetcher.calls == 0


class TestListTables:
    """Test list_tables() rows and filtering."""

    def test_all_tables(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_tables(None)
        assert result.column("TABLE_NAME") == ["Account", "Contact", "Opportunity"]

    def test_null_and_percent_equivalent(self, metadata: DatabaseMetadata) -> None:
        assert metadata.list_tables(None).rows == metadata.list_tables("%").rows

    @pytest.mark.parametrize("pattern", ["Account", "account", "ACCOUNT"])
    def test_exact_match_any_case(self, metadata: DatabaseMetadata, pattern: str) -> None:
        result = metadata.list_tables(pattern)
        assert result.column("TABLE_NAME") == ["Account"]

    def test_prefix_does_not_match(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_tables("Acc")
        assert result.rows == []
        assert result.shape == EMPTY_SHAPE

    def test_row_layout(self, metadata: DatabaseMetadata) -> None:
        row = metadata.list_tables("Contact").rows[0]
        assert list(row) == [
            "TABLE_CAT",
            "TABLE_SCHEM",
            "TABLE_NAME",
            "TABLE_TYPE",
            "REMARKS",
            "TYPE_CAT",
            "TYPE_SCHEM",
            "TYPE_NAME",
            "SELF_REFERENCING_COL_NAME",
            "REF_GENERATION",
        ]
        assert row["TABLE_CAT"] == DEFAULT_CATALOG
        assert row["TABLE_SCHEM"] == DEFAULT_SCHEMA
        assert row["TABLE_TYPE"] == "TABLE"
        assert row["REMARKS"] == "Contact"
        assert all(row[k] is None for k in list(row)[5:])

    def test_shape_from_first_row(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_tables()
        assert result.shape.names == list(result.rows[0])
        kinds = {c.name: c.kind for c in result.shape.columns}
        assert kinds["TABLE_NAME"] == "string"
        assert kinds["TYPE_CAT"] == "null"

    def test_fetch_failure_propagates(self, metadata: DatabaseMetadata, fetcher) -> None:
        fetcher.failures = 1
        with pytest.raises(MetadataUnavailable):
            metadata.list_tables()
        # Cache recovered; the next call succeeds
        assert len(metadata.list_tables()) == 3


class TestListColumns:
    """Test list_columns() ordinals, types and nullability."""

    def test_ordinals_span_tables(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_columns(None, None)
        ordinals = result.column("ORDINAL_POSITION")
        assert ordinals == list(range(1, len(result) + 1))
        assert len(set(result.column("TABLE_NAME"))) == 3

    def test_ordinals_with_column_filter(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_columns("%", "Id")
        assert result.column("TABLE_NAME") == ["Account", "Contact", "Opportunity"]
        assert result.column("ORDINAL_POSITION") == [1, 2, 3]

    def test_table_filter(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_columns("contact", None)
        assert result.column("COLUMN_NAME") == ["Id", "AccountId", "Email", "DoNotCall"]
        assert result.column("ORDINAL_POSITION") == [1, 2, 3, 4]

    def test_column_filter_case_insensitive(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_columns("Contact", "accountid")
        assert result.column("COLUMN_NAME") == ["AccountId"]

    def test_type_resolution(self, metadata: DatabaseMetadata) -> None:
        rows = {r["COLUMN_NAME"]: r for r in metadata.list_columns("Account", None)}
        assert rows["Id"]["DATA_TYPE"] == SqlType.VARCHAR
        assert rows["Id"]["TYPE_NAME"] == "id"
        assert rows["AnnualRevenue"]["DATA_TYPE"] == SqlType.DOUBLE
        assert rows["AnnualRevenue"]["NUM_PREC_RADIX"] == 10
        assert rows["Name"]["COLUMN_SIZE"] == 255

    def test_data_type_is_plain_int(self, metadata: DatabaseMetadata) -> None:
        row = metadata.list_columns("Account", "Id").rows[0]
        assert type(row["DATA_TYPE"]) is int

    def test_unknown_type_is_other(self, metadata: DatabaseMetadata) -> None:
        row = metadata.list_columns("Opportunity", "Telemetry__c").rows[0]
        assert row["DATA_TYPE"] == SqlType.OTHER
        assert row["TYPE_NAME"] == "unknown_future_type"

    def test_nullability_two_states(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_columns()
        for row in result:
            assert row["NULLABLE"] in (COLUMN_NULLABLE, COLUMN_NO_NULLS)
            assert row["IS_NULLABLE"] in ("YES", "NO")
            assert (row["NULLABLE"] == COLUMN_NULLABLE) == (row["IS_NULLABLE"] == "YES")

    def test_nillable_flag_drives_nullable(self, metadata: DatabaseMetadata) -> None:
        rows = {r["COLUMN_NAME"]: r for r in metadata.list_columns("Contact", None)}
        assert rows["Id"]["NULLABLE"] == COLUMN_NO_NULLS
        assert rows["AccountId"]["NULLABLE"] == COLUMN_NULLABLE
        assert rows["DoNotCall"]["IS_NULLABLE"] == "NO"

    def test_no_match_gives_empty_shape(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_columns("Account", "Nope")
        assert result.rows == []
        assert result.shape == EMPTY_SHAPE
        assert len(result.shape) == 0


class TestSyntheticKeys:
    """Primary keys, imported keys and indexes fabricated from Id/reference fields."""

    def test_two_table_primary_keys(self) -> None:
        metadata = _two_table_metadata()
        result = metadata.list_primary_keys(None)
        assert result.column("TABLE_NAME") == ["Account", "Contact"]
        assert result.column("COLUMN_NAME") == ["Id", "Id"]
        assert result.column("KEY_SEQ") == [0, 0]

    def test_two_table_imported_keys(self) -> None:
        metadata = _two_table_metadata()
        result = metadata.list_imported_keys("Contact")
        assert len(result) == 1
        row = result.rows[0]
        assert row["FKTABLE_NAME"] == "Contact"
        assert row["FKCOLUMN_NAME"] == "AccountId"
        assert row["PKTABLE_NAME"] == "Account"
        assert row["PKCOLUMN_NAME"] == "Id"

    def test_imported_keys_for_table_without_references(self) -> None:
        metadata = _two_table_metadata()
        result = metadata.list_imported_keys("Account")
        assert result.rows == []
        assert result.shape == EMPTY_SHAPE

    def test_imported_key_names_share_counter_value(self, metadata: DatabaseMetadata) -> None:
        for row in metadata.list_imported_keys():
            seq = row["KEY_SEQ"]
            assert row["FK_NAME"] == f"FakeFK{seq}"
            assert row["PK_NAME"] == f"FakePK{seq}"

    def test_imported_key_counter_increments_per_row(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_imported_keys()
        # Account.ParentId and Contact.AccountId
        assert result.column("KEY_SEQ") == [0, 1]
        assert result.column("FKTABLE_NAME") == ["Account", "Contact"]

    def test_referenced_table_uses_canonical_case(self) -> None:
        account = Table("Account", columns=(Column("Id", "id", "Account", nillable=False),))
        contact = Table(
            "Contact",
            columns=(
                Column("AccountId", "reference", "Contact", referenced_table="ACCOUNT",
                       referenced_column="Id"),
            ),
        )
        metadata = DatabaseMetadata(SchemaCache(lambda: [account, contact]))
        assert metadata.list_imported_keys("Contact").rows[0]["PKTABLE_NAME"] == "Account"

    def test_referenced_table_not_described(self) -> None:
        contact = Table(
            "Contact",
            columns=(
                Column("OwnerId", "reference", "Contact", referenced_table="User",
                       referenced_column="Id"),
            ),
        )
        metadata = DatabaseMetadata(SchemaCache(lambda: [contact]))
        assert metadata.list_imported_keys().rows[0]["PKTABLE_NAME"] == "User"

    def test_imported_keys_across_many_tables(self) -> None:
        tables = [
            Table(
                f"Obj{i}__c",
                columns=(
                    Column("Id", "id", f"Obj{i}__c", nillable=False),
                    Column(
                        "Parent__c",
                        "reference",
                        f"Obj{i}__c",
                        referenced_table=f"OBJ{(i + 1) % 200}__C",
                        referenced_column="Id",
                    ),
                ),
            )
            for i in range(200)
        ]
        metadata = DatabaseMetadata(SchemaCache(lambda: tables))
        result = metadata.list_imported_keys()
        assert len(result) == 200
        assert result.rows[0]["PKTABLE_NAME"] == "Obj1__c"
        assert result.rows[-1]["PKTABLE_NAME"] == "Obj0__c"

    def test_half_reference_is_ignored(self) -> None:
        contact = Table(
            "Contact",
            columns=(Column("OwnerId", "reference", "Contact", referenced_table="User"),),
        )
        metadata = DatabaseMetadata(SchemaCache(lambda: [contact]))
        assert metadata.list_imported_keys().rows == []

    def test_primary_key_matches_id_case_insensitively(self) -> None:
        table = Table("Custom__c", columns=(Column("ID", "id", "Custom__c", nillable=False),))
        metadata = DatabaseMetadata(SchemaCache(lambda: [table]))
        assert metadata.list_primary_keys().column("COLUMN_NAME") == ["ID"]

    def test_index_info(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_index_info("Account")
        assert len(result) == 1
        row = result.rows[0]
        assert row["NON_UNIQUE"] is True
        assert row["TYPE"] == 3
        assert row["COLUMN_NAME"] == "Id"
        assert row["ASC_OR_DESC"] == "A"
        assert row["CARDINALITY"] == 1
        assert row["PAGES"] == 1
        assert row["INDEX_NAME"] == "FakeIndex0"
        assert row["ORDINAL_POSITION"] == 1

    def test_synthetic_names_unique_across_views(self, metadata: DatabaseMetadata) -> None:
        names: list[str] = []
        for _ in range(3):
            names += metadata.list_primary_keys().column("PK_NAME")
            for row in metadata.list_imported_keys():
                names += [row["FK_NAME"], row["PK_NAME"]]
            names += metadata.list_index_info().column("INDEX_NAME")
        # 3 rounds of 3 PKs, 2 FKs (two names each) and 3 indexes
        assert len(names) == 3 * (3 + 4 + 3)
        assert len(set(names)) == len(names)

    def test_counter_injected(self, cache: SchemaCache) -> None:
        counter = SyntheticCounter(start=100)
        metadata = DatabaseMetadata(cache, counter=counter)
        assert metadata.list_primary_keys("Account").rows[0]["PK_NAME"] == "FakePK100"
        assert counter.value == 101


class TestSyntheticCounter:
    """The counter never repeats a value, even across threads."""

    def test_sequence(self) -> None:
        counter = SyntheticCounter()
        assert [counter.next() for _ in range(4)] == [0, 1, 2, 3]

    def test_concurrent_next_is_unique(self) -> None:
        counter = SyntheticCounter()
        seen: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            values = [counter.next() for _ in range(500)]
            with lock:
                seen.extend(values)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 4000
        assert sorted(seen) == list(range(4000))


class TestTypeInfo:
    """Test list_type_info()."""

    def test_one_row_per_catalog_entry(self, metadata: DatabaseMetadata) -> None:
        result = metadata.list_type_info()
        assert len(result) == 28
        assert result.rows[0]["TYPE_NAME"] == "id"

    def test_fixed_flags(self, metadata: DatabaseMetadata) -> None:
        for row in metadata.list_type_info():
            assert row["NULLABLE"] == 1
            assert row["CASE_SENSITIVE"] is False
            assert row["SEARCHABLE"] == 3
            assert row["TYPE_SUB"] == 1

    def test_type_sub_is_last_column(self, metadata: DatabaseMetadata) -> None:
        names = metadata.list_type_info().shape.names
        assert names[-2:] == ["NUM_PREC_RADIX", "TYPE_SUB"]

    def test_decimal_row(self, metadata: DatabaseMetadata) -> None:
        row = next(r for r in metadata.list_type_info() if r["TYPE_NAME"] == "decimal")
        assert row["DATA_TYPE"] == SqlType.DECIMAL
        assert row["PRECISION"] == 17
        assert row["MINIMUM_SCALE"] == -324
        assert row["MAXIMUM_SCALE"] == 306
        assert row["NUM_PREC_RADIX"] == 10


class TestUnsupportedViews:
    """Views with no Salesforce counterpart return empty results, never errors."""

    @pytest.mark.parametrize("view", UNSUPPORTED_VIEWS)
    def test_empty_for_any_arguments(self, metadata: DatabaseMetadata, view: str) -> None:
        method = getattr(metadata, view)
        for args in [(), (None,), (None, None, None), ("x", "%", "Account", [1, 2])]:
            result = method(*args)
            assert result.rows == []
            assert result.shape == EMPTY_SHAPE

    def test_do_not_fetch(self, metadata: DatabaseMetadata, fetcher) -> None:
        metadata.list_procedures(None, None, None)
        metadata.list_cross_reference(None, None, "Account", None, None, "Contact")
        assert fetcher.calls == 0


class TestCapabilities:
    """Capability answers are reachable through DatabaseMetadata."""

    def test_supports(self, metadata: DatabaseMetadata) -> None:
        assert metadata.supports("supports_mixed_case_identifiers")
        assert not metadata.supports("supports_transactions")

    def test_capability(self, metadata: DatabaseMetadata) -> None:
        assert metadata.capability("database_product_name") == "Salesforce"
        assert metadata.capability("max_column_name_length") == 0
