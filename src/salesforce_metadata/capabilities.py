"""Static capability answers for relational capability negotiation.

Generic SQL tools ask dozens of yes/no questions (supports outer joins?
supports transactions? max column name length?). Salesforce answers
almost all of them with "no"/0/"", so they live in one table instead of
one method each.

Keys are snake_case versions of the usual DatabaseMetaData accessor
names (supportsOuterJoins -> supports_outer_joins).
"""

from typing import Any

DATABASE_PRODUCT_NAME = "Salesforce"
DATABASE_MAJOR_VERSION = 52
DATABASE_MINOR_VERSION = 0
DRIVER_NAME = "Salesforce metadata driver"
DRIVER_MAJOR_VERSION = 1
DRIVER_MINOR_VERSION = 4
JDBC_MAJOR_VERSION = 4
JDBC_MINOR_VERSION = 0

_UNSUPPORTED_FEATURES = (
    "all_procedures_are_callable",
    "all_tables_are_selectable",
    "is_read_only",
    "nulls_are_sorted_high",
    "nulls_are_sorted_low",
    "nulls_are_sorted_at_start",
    "nulls_are_sorted_at_end",
    "uses_local_files",
    "uses_local_file_per_table",
    "stores_upper_case_identifiers",
    "stores_lower_case_identifiers",
    "supports_mixed_case_quoted_identifiers",
    "stores_upper_case_quoted_identifiers",
    "stores_lower_case_quoted_identifiers",
    "stores_mixed_case_quoted_identifiers",
    "supports_alter_table_with_add_column",
    "supports_alter_table_with_drop_column",
    "supports_column_aliasing",
    "null_plus_non_null_is_null",
    "supports_convert",
    "supports_table_correlation_names",
    "supports_different_table_correlation_names",
    "supports_expressions_in_order_by",
    "supports_order_by_unrelated",
    "supports_group_by",
    "supports_group_by_unrelated",
    "supports_group_by_beyond_select",
    "supports_like_escape_clause",
    "supports_multiple_result_sets",
    "supports_multiple_transactions",
    "supports_non_nullable_columns",
    "supports_minimum_sql_grammar",
    "supports_core_sql_grammar",
    "supports_extended_sql_grammar",
    "supports_ansi92_entry_level_sql",
    "supports_ansi92_intermediate_sql",
    "supports_ansi92_full_sql",
    "supports_integrity_enhancement_facility",
    "supports_outer_joins",
    "supports_full_outer_joins",
    "supports_limited_outer_joins",
    "is_catalog_at_start",
    "supports_schemas_in_data_manipulation",
    "supports_schemas_in_procedure_calls",
    "supports_schemas_in_table_definitions",
    "supports_schemas_in_index_definitions",
    "supports_schemas_in_privilege_definitions",
    "supports_catalogs_in_data_manipulation",
    "supports_catalogs_in_procedure_calls",
    "supports_catalogs_in_table_definitions",
    "supports_catalogs_in_index_definitions",
    "supports_catalogs_in_privilege_definitions",
    "supports_positioned_delete",
    "supports_positioned_update",
    "supports_select_for_update",
    "supports_stored_procedures",
    "supports_subqueries_in_comparisons",
    "supports_subqueries_in_exists",
    "supports_subqueries_in_ins",
    "supports_subqueries_in_quantifieds",
    "supports_correlated_subqueries",
    "supports_union",
    "supports_union_all",
    "supports_open_cursors_across_commit",
    "supports_open_cursors_across_rollback",
    "supports_open_statements_across_commit",
    "supports_open_statements_across_rollback",
    "does_max_row_size_include_blobs",
    "supports_transactions",
    "supports_transaction_isolation_level",
    "supports_data_definition_and_data_manipulation_transactions",
    "supports_data_manipulation_transactions_only",
    "data_definition_causes_transaction_commit",
    "data_definition_ignored_in_transactions",
    "supports_result_set_type",
    "supports_result_set_concurrency",
    "own_updates_are_visible",
    "own_deletes_are_visible",
    "own_inserts_are_visible",
    "others_updates_are_visible",
    "others_deletes_are_visible",
    "others_inserts_are_visible",
    "updates_are_detected",
    "deletes_are_detected",
    "inserts_are_detected",
    "supports_batch_updates",
    "supports_savepoints",
    "supports_named_parameters",
    "supports_multiple_open_results",
    "supports_get_generated_keys",
    "supports_result_set_holdability",
    "locators_update_copy",
    "supports_statement_pooling",
    "supports_stored_functions_using_call_syntax",
    "auto_commit_failure_closes_all_result_sets",
    "generated_key_always_returned",
)

_ZERO_LIMITS = (
    "max_binary_literal_length",
    "max_char_literal_length",
    "max_column_name_length",
    "max_columns_in_group_by",
    "max_columns_in_index",
    "max_columns_in_order_by",
    "max_columns_in_select",
    "max_columns_in_table",
    "max_connections",
    "max_cursor_name_length",
    "max_index_length",
    "max_schema_name_length",
    "max_procedure_name_length",
    "max_catalog_name_length",
    "max_row_size",
    "max_statement_length",
    "max_statements",
    "max_table_name_length",
    "max_tables_in_select",
    "max_user_name_length",
    "default_transaction_isolation",
    "result_set_holdability",
    "sql_state_type",
)

_EMPTY_STRINGS = (
    "identifier_quote_string",
    "sql_keywords",
    "numeric_functions",
    "string_functions",
    "system_functions",
    "time_date_functions",
    "search_string_escape",
    "extra_name_characters",
    "procedure_term",
    "user_name",
)

CAPABILITIES: dict[str, Any] = {
    **dict.fromkeys(_UNSUPPORTED_FEATURES, False),
    **dict.fromkeys(_ZERO_LIMITS, 0),
    **dict.fromkeys(_EMPTY_STRINGS, ""),
    # Mixed-case unquoted identifiers are compared case-insensitively
    # and stored as written.
    "supports_mixed_case_identifiers": True,
    "stores_mixed_case_identifiers": True,
    "schema_term": "Salesforce",
    "catalog_term": "database",
    "catalog_separator": ".",
    "database_product_name": DATABASE_PRODUCT_NAME,
    "database_product_version": str(DATABASE_MAJOR_VERSION),
    "database_major_version": DATABASE_MAJOR_VERSION,
    "database_minor_version": DATABASE_MINOR_VERSION,
    "driver_name": DRIVER_NAME,
    "driver_version": f"{DRIVER_MAJOR_VERSION}.{DRIVER_MINOR_VERSION}.1",
    "driver_major_version": DRIVER_MAJOR_VERSION,
    "driver_minor_version": DRIVER_MINOR_VERSION,
    "jdbc_major_version": JDBC_MAJOR_VERSION,
    "jdbc_minor_version": JDBC_MINOR_VERSION,
}


def capability(name: str) -> Any:
    """Return the fixed answer for one capability.

    Raises:
        KeyError: If *name* is not a known capability.
    """
    if name not in CAPABILITIES:
        raise KeyError(f"Unknown capability '{name}'")
    return CAPABILITIES[name]


def supports(name: str) -> bool:
    """True only for capabilities whose answer is literally True.

    Unknown names answer False, like an unsupported feature.
    """
    return CAPABILITIES.get(name) is True
