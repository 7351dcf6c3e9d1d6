"""Tests for table compilation."""

from collections.abc import Callable

import pytest

from dbenum.core.compiler import Compiler, TableCompiler, compile_tables
from dbenum.core.environment import ExternalType, InternalType, TypeEnvironment
from dbenum.core.exceptions import (
    CyclicDependencyError,
    DuplicateKeyError,
    DuplicateMemberError,
    EmptyIdentifierError,
    MappingConfigurationError,
    SchemaMismatchError,
    UnresolvedForeignKeyError,
)
from dbenum.core.models import RowData, StorageType, TableData, TableMapping

TableFactory = Callable[..., TableMapping]


@pytest.fixture
def currency(table_factory: TableFactory) -> TableMapping:
    """Currency table with a Country column."""
    return table_factory(
        "Currency",
        [
            {"Id": 1, "Code": "CAD", "Country": "Canada"},
            {"Id": 2, "Code": "USD", "Country": "USA"},
        ],
        columns=["Country"],
    )


@pytest.fixture
def order(table_factory: TableFactory) -> TableMapping:
    """Order table with a foreign key to Currency, null in one row."""
    return table_factory(
        "Order",
        [
            {"Id": 10, "Name": "Retail", "CurrencyId": 1},
            {"Id": 11, "Name": "Wholesale", "CurrencyId": 2},
            {"Id": 12, "Name": "Internal", "CurrencyId": None},
        ],
        label="Name",
        columns=[{"column": "CurrencyId", "function": "Currency", "returns": "Currency"}],
        types={"CurrencyId": "int"},
    )


class TestMembers:
    """Test cases for member generation."""

    def test_one_member_per_row(self, currency: TableMapping):
        """Test that each row becomes a member with its key literal."""
        env = compile_tables([currency])
        internal = env.lookup("Currency")
        assert isinstance(internal, InternalType)
        assert [(m.name, m.literal) for m in internal.members.values()] == [
            ("CAD", "1"),
            ("USD", "2"),
        ]
        assert internal.primary_key_type == "int"

    def test_labels_are_normalized(self, table_factory: TableFactory):
        """Test that labels become identifiers."""
        mapping = table_factory(
            "Terms",
            [{"Id": 1, "Code": "net 30"}, {"Id": 2, "Code": "2% 10"}],
        )
        env = compile_tables([mapping])
        assert list(env.lookup("Terms").members) == ["Net30", "TwoPercent10"]

    def test_string_keys_are_quoted(self, table_factory: TableFactory):
        """Test member literals for a string key."""
        mapping = table_factory(
            "Region",
            [{"Code": "NA", "Name": "North America"}],
            key="Code",
            label="Name",
            types={"Code": "string"},
        )
        env = compile_tables([mapping])
        member = env.lookup("Region").members["NorthAmerica"]
        assert member.literal == '"NA"'

    def test_duplicate_label_raises(self, table_factory: TableFactory):
        """Test that labels normalizing to the same name are rejected."""
        mapping = table_factory(
            "Currency",
            [
                {"Id": 1, "Code": "CAD", "Country": "Canada"},
                {"Id": 2, "Code": "CAD ", "Country": "Canada"},
            ],
            columns=["Country"],
        )
        compiler = Compiler([mapping])
        with pytest.raises(DuplicateMemberError) as exc_info:
            compiler.compile_all()
        assert exc_info.value.member == "CAD"
        function = compiler.environment.functions()[0]
        assert function.cases == {}

    def test_duplicate_key_raises(self, table_factory: TableFactory):
        """Test that two rows sharing a primary key are rejected."""
        currency = table_factory(
            "Currency",
            [
                {"Id": 1, "Code": "CAD", "Country": "Canada"},
                {"Id": 1, "Code": "USD", "Country": "USA"},
            ],
            columns=["Country"],
        )
        order = table_factory(
            "Order",
            [{"Id": 10, "Name": "Retail", "CurrencyId": 1}],
            label="Name",
            columns=[{"column": "CurrencyId", "function": "Currency", "returns": "Currency"}],
            types={"CurrencyId": "int"},
        )
        with pytest.raises(DuplicateKeyError) as exc_info:
            compile_tables([order, currency])
        assert exc_info.value.type_name == "Currency"
        assert exc_info.value.value == 1
        assert exc_info.value.member == "CAD"
        assert "Duplicate primary key 1 in Currency" in str(exc_info.value)

    def test_two_null_keys_raise(self, table_factory: TableFactory):
        """Test that a second row with a null key is rejected."""
        mapping = table_factory(
            "Currency",
            [{"Id": None, "Code": "CAD"}, {"Id": None, "Code": "USD"}],
        )
        with pytest.raises(DuplicateKeyError):
            compile_tables([mapping])

    def test_empty_label_raises(self, table_factory: TableFactory):
        """Test that a label without identifier characters is rejected."""
        mapping = table_factory("Currency", [{"Id": 1, "Code": "..."}])
        with pytest.raises(EmptyIdentifierError):
            compile_tables([mapping])

    def test_null_label_raises(self, table_factory: TableFactory):
        """Test that a null label is rejected."""
        mapping = table_factory("Currency", [{"Id": 1, "Code": None}])
        with pytest.raises(EmptyIdentifierError):
            compile_tables([mapping])


class TestCases:
    """Test cases for accessor cases."""

    def test_literal_cases(self, currency: TableMapping):
        """Test cases for a column without an explicit return type."""
        env = compile_tables([currency])
        country = env.lookup("Currency").functions[0]
        assert country.name == "Country"
        assert country.return_type == ExternalType("string")
        assert country.cases == {"CAD": '"Canada"', "USD": '"USA"'}

    def test_foreign_key_cases(self, currency: TableMapping, order: TableMapping):
        """Test that foreign keys become member references."""
        env = compile_tables([currency, order])
        function = env.lookup("Order").functions[0]
        assert function.return_type is env.lookup("Currency")
        assert function.cases["Retail"] == "Currency.CAD"
        assert function.cases["Wholesale"] == "Currency.USD"

    def test_null_foreign_key_has_no_case(self, currency: TableMapping, order: TableMapping):
        """Test that a null foreign key is skipped rather than failing."""
        env = compile_tables([currency, order])
        function = env.lookup("Order").functions[0]
        assert "Internal" not in function.cases
        assert function.missing_members == ["Internal"]

    def test_null_value_kind_has_no_case(self, table_factory: TableFactory):
        """Test that a null in a value-kind column is skipped."""
        mapping = table_factory(
            "Currency",
            [{"Id": 1, "Code": "CAD", "Digits": None}, {"Id": 2, "Code": "USD", "Digits": 2}],
            columns=["Digits"],
            types={"Digits": "int"},
        )
        env = compile_tables([mapping])
        assert env.lookup("Currency").functions[0].cases == {"USD": "2"}

    def test_null_reference_kind_is_default(self, table_factory: TableFactory):
        """Test that a null in a reference-kind column renders as default."""
        mapping = table_factory(
            "Currency",
            [{"Id": 1, "Code": "CAD", "Country": None}],
            columns=["Country"],
        )
        env = compile_tables([mapping])
        assert env.lookup("Currency").functions[0].cases == {"CAD": "default(string)"}

    def test_nullable_return_type_keeps_null(self, table_factory: TableFactory):
        """Test that an explicit nullable return type records a default case."""
        mapping = table_factory(
            "Currency",
            [{"Id": 1, "Code": "CAD", "Digits": None}],
            columns=[{"column": "Digits", "returns": "int?"}],
            types={"Digits": "int"},
        )
        env = compile_tables([mapping])
        assert env.lookup("Currency").functions[0].cases == {"CAD": "default(int?)"}

    def test_column_nullability_is_recorded(self):
        """Test that accessors record whether their column admits nulls."""
        mapping = TableMapping.model_validate(
            {"table": "Currency", "key": "Id", "label": "Code", "columns": ["Country", "Rate"]}
        ).with_data(
            TableData(
                table="Currency",
                columns={
                    "Id": StorageType("int", nullable=False),
                    "Code": StorageType("string", nullable=False),
                    "Country": StorageType("string", nullable=True),
                    "Rate": StorageType("decimal", nullable=False),
                },
                rows=(
                    RowData(primary_key=1, label="CAD", values={"Country": None, "Rate": 1}),
                ),
            )
        )
        env = compile_tables([mapping])
        country, rate = env.lookup("Currency").functions
        assert country.nullable is True
        assert country.cases == {"CAD": "default(string)"}
        assert rate.nullable is False

    def test_expression_template(self, table_factory: TableFactory):
        """Test that the template wraps each literal."""
        mapping = table_factory(
            "Currency",
            [{"Id": 1, "Code": "CAD", "Rate": "1.35"}],
            columns=[
                {
                    "column": "Rate",
                    "function": "ExchangeRate",
                    "expression": "new Rate(%Rate%)",
                    "returns": "Rate",
                }
            ],
        )
        env = compile_tables([mapping])
        function = env.lookup("Currency").functions[0]
        assert function.name == "ExchangeRate"
        assert function.return_type == ExternalType("Rate")
        assert function.cases == {"CAD": 'new Rate("1.35")'}

    def test_expression_template_on_foreign_key(self, currency, table_factory):
        """Test that the template also wraps member references."""
        mapping = table_factory(
            "Order",
            [{"Id": 10, "Name": "Retail", "CurrencyId": 1}],
            label="Name",
            columns=[
                {
                    "column": "CurrencyId",
                    "expression": "Wrap(%CurrencyId%)",
                    "returns": "Currency",
                }
            ],
            types={"CurrencyId": "int"},
        )
        env = compile_tables([currency, mapping])
        assert env.lookup("Order").functions[0].cases == {"Retail": "Wrap(Currency.CAD)"}

    def test_namespaced_foreign_key(self, table_factory: TableFactory):
        """Test that references across namespaces are fully qualified."""
        currency = table_factory(
            "Currency", [{"Id": 1, "Code": "CAD"}], type_name="Acme.Finance.Currency"
        )
        region = table_factory(
            "Region",
            [{"Id": 1, "Code": "NA", "CurrencyId": 1}],
            type_name="Acme.Sales.Region",
            columns=[{"column": "CurrencyId", "returns": "Acme.Finance.Currency"}],
            types={"CurrencyId": "int"},
        )
        env = compile_tables([currency, region])
        function = env.lookup("Acme.Sales.Region").functions[0]
        assert function.cases == {"NA": "Acme.Finance.Currency.CAD"}

    def test_orphan_foreign_key_raises(self, currency: TableMapping, table_factory):
        """Test that a key missing from the target table is fatal."""
        mapping = table_factory(
            "Order",
            [{"Id": 10, "Name": "Retail", "CurrencyId": 99}],
            label="Name",
            columns=[{"column": "CurrencyId", "returns": "Currency"}],
            types={"CurrencyId": "int"},
        )
        with pytest.raises(UnresolvedForeignKeyError) as exc_info:
            compile_tables([currency, mapping])
        assert exc_info.value.value == 99
        assert exc_info.value.type_name == "Currency"

    def test_unknown_column_raises(self, currency: TableMapping):
        """Test that a column without a storage type is a schema mismatch."""
        env = TypeEnvironment()
        mapping = currency.model_copy(update={"primary_key": "Missing"})
        with pytest.raises(SchemaMismatchError):
            TableCompiler(mapping, env).declare()


class TestPrimaryKeyCoercion:
    """Test cases for accessors on the primary key column."""

    def test_integral_key_is_coercion(self, table_factory: TableFactory):
        """Test that the key column itself is a plain cast with no cases."""
        mapping = table_factory("Currency", [{"Id": 1, "Code": "CAD"}], columns=["Id"])
        env = compile_tables([mapping])
        function = env.lookup("Currency").functions[0]
        assert function.is_pk_coercion
        assert function.cases == {}
        assert function.missing_members == []

    def test_key_with_expression_is_not_coercion(self, table_factory: TableFactory):
        """Test that a template on the key column produces cases."""
        mapping = table_factory(
            "Currency",
            [{"Id": 1, "Code": "CAD"}],
            columns=[{"column": "Id", "function": "Number", "expression": "%Id% * 100"}],
        )
        env = compile_tables([mapping])
        function = env.lookup("Currency").functions[0]
        assert not function.is_pk_coercion
        assert function.cases == {"CAD": "1 * 100"}

    def test_string_key_is_not_coercion(self, table_factory: TableFactory):
        """Test that non-integral keys produce cases."""
        mapping = table_factory(
            "Region",
            [{"Code": "NA", "Name": "North America"}],
            key="Code",
            label="Name",
            columns=["Code"],
            types={"Code": "string"},
        )
        env = compile_tables([mapping])
        function = env.lookup("Region").functions[0]
        assert not function.is_pk_coercion
        assert function.cases == {"NorthAmerica": '"NA"'}


class TestDriver:
    """Test cases for compilation order and dependency handling."""

    def test_forward_reference_compiles_target_first(self, currency, order):
        """Test that a table referencing a later table still resolves."""
        env = compile_tables([order, currency])
        assert env.lookup("Order").functions[0].cases["Retail"] == "Currency.CAD"
        assert [t.name for t in env.internal_types()] == ["Order", "Currency"]

    def test_each_table_compiled_once(self, currency, order, table_factory):
        """Test that a table referenced twice is compiled once."""
        region = table_factory(
            "Region",
            [{"Id": 1, "Code": "NA", "CurrencyId": 1}],
            columns=[{"column": "CurrencyId", "returns": "Currency"}],
            types={"CurrencyId": "int"},
        )
        compiler = Compiler([order, region, currency])
        env = compiler.compile_all()
        assert compiler.completed == {"Order", "Region", "Currency"}
        assert len(env.lookup("Currency").members) == 2

    def test_mutual_reference_raises(self, table_factory: TableFactory):
        """Test that two tables referencing each other are rejected."""
        a = table_factory(
            "A",
            [{"Id": 1, "Code": "X", "BId": 1}],
            columns=[{"column": "BId", "returns": "B"}],
            types={"BId": "int"},
        )
        b = table_factory(
            "B",
            [{"Id": 1, "Code": "Y", "AId": 1}],
            columns=[{"column": "AId", "returns": "A"}],
            types={"AId": "int"},
        )
        with pytest.raises(CyclicDependencyError) as exc_info:
            compile_tables([a, b])
        assert exc_info.value.path == ["A", "B", "A"]
        assert "A -> B -> A" in str(exc_info.value)

    def test_self_reference_raises(self, table_factory: TableFactory):
        """Test that a table referencing its own type is rejected."""
        mapping = table_factory(
            "Category",
            [{"Id": 1, "Code": "Root", "ParentId": 1}],
            columns=[{"column": "ParentId", "function": "Parent", "returns": "Category"}],
            types={"ParentId": "int"},
        )
        with pytest.raises(CyclicDependencyError) as exc_info:
            compile_tables([mapping])
        assert exc_info.value.path == ["Category", "Category"]

    def test_duplicate_type_names_raise(self, table_factory: TableFactory):
        """Test that two tables cannot declare the same type."""
        a = table_factory("A", [], type_name="Shared")
        b = table_factory("B", [], type_name="Shared")
        with pytest.raises(MappingConfigurationError):
            Compiler([a, b])

    def test_table_without_data_raises(self):
        """Test that compiling an unloaded table is a configuration error."""
        mapping = TableMapping.model_validate({"table": "Currency", "key": "Id", "label": "Code"})
        with pytest.raises(MappingConfigurationError):
            compile_tables([mapping])

    def test_empty_table(self, table_factory: TableFactory):
        """Test that a table without rows produces an empty type."""
        env = compile_tables([table_factory("Currency", [], columns=["Country"])])
        internal = env.lookup("Currency")
        assert internal.members == {}
        assert internal.functions[0].cases == {}
