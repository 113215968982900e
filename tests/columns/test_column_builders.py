import pytest

from relq import columns as c
from relq.columns import DEFAULT, ensure_config, sql
from relq.errors import InvalidArgumentError


def test_decorators_chain_and_mutate_config():
    builder = c.varchar(255).not_null().unique().comment("login name")
    config = builder.config
    assert config.full_sql_type == "VARCHAR(255)"
    assert config.nullable is False
    assert config.unique is True
    assert config.comment == "login name"


def test_primary_key_implies_not_null_and_rejects_nullable():
    builder = c.uuid().primary_key().default(DEFAULT.gen_random_uuid())
    assert builder.config.nullable is False
    assert builder.config.default.sql == "gen_random_uuid()"
    with pytest.raises(InvalidArgumentError):
        builder.nullable()


def test_numeric_precision_and_scale():
    assert c.numeric(precision=10, scale=2).config.sql_type == "NUMERIC(10, 2)"
    with pytest.raises(InvalidArgumentError):
        c.decimal(scale=2)
    with pytest.raises(InvalidArgumentError):
        c.numeric(precision=4).scale(5)


def test_temporal_types():
    assert c.timestamptz(precision=3).config.sql_type == "TIMESTAMPTZ(3)"
    assert c.time(with_timezone=True).config.sql_type == "TIMETZ"
    assert c.interval(fields="day to second").config.sql_type == "INTERVAL DAY TO SECOND"
    with pytest.raises(InvalidArgumentError):
        c.text().with_timezone()
    with pytest.raises(InvalidArgumentError):
        c.timestamp(precision=7)


def test_array_dimensions():
    assert c.text().array().config.full_sql_type == "TEXT[]"
    assert c.integer().array(2).config.full_sql_type == "INTEGER[][]"
    with pytest.raises(InvalidArgumentError):
        c.integer().array(0)


def test_vector_and_spatial_types():
    assert c.vector(1536).config.sql_type == "VECTOR(1536)"
    with pytest.raises(InvalidArgumentError):
        c.vector(0)
    assert c.geometry("point", 4326).config.sql_type == "GEOMETRY(Point, 4326)"
    assert c.geography("multipolygon").config.sql_type == "GEOGRAPHY(MultiPolygon, 4326)"
    assert c.geography().config.sql_type == "GEOGRAPHY"
    with pytest.raises(InvalidArgumentError):
        c.geometry(srid=4326)


def test_autoincrement_requires_integer():
    assert c.integer().autoincrement().config.autoincrement is True
    with pytest.raises(InvalidArgumentError):
        c.text().autoincrement()


def test_identity_options_and_conflicts():
    builder = c.bigint().generated_always_as_identity(start=100, increment=5)
    identity = builder.config.identity
    assert identity.always is True
    assert identity.sequence_options() == ["START WITH 100", "INCREMENT BY 5"]
    with pytest.raises(InvalidArgumentError):
        builder.default(1)
    with pytest.raises(InvalidArgumentError):
        c.serial().generated_by_default_as_identity()
    with pytest.raises(InvalidArgumentError):
        c.integer().generated_always_as_identity(bogus=1)


def test_references_normalizes_actions():
    ref = c.integer().references("users", on_delete="set_null", on_update="cascade").config.references
    assert ref.table == "users"
    assert ref.column == "id"
    assert ref.on_delete == "SET NULL"
    assert ref.on_update == "CASCADE"
    with pytest.raises(InvalidArgumentError):
        c.integer().references("users", on_delete="explode")


def test_checks_accept_values_and_expressions():
    builder = c.text().check("status_check", ["active", "disabled"]).check_not("no_root", ["root"])
    first, second = builder.config.checks
    assert first.values == ("active", "disabled") and not first.negate
    assert second.negate is True
    expr_check = c.integer().check("positive", sql("value > 0")).config.checks[0]
    assert expr_check.expression == "value > 0"
    with pytest.raises(InvalidArgumentError):
        c.text().check("empty", [])


def test_generated_column_rejects_default():
    builder = c.text().generated_always_as("lower(email)")
    assert builder.config.generated.expression == "lower(email)"
    assert builder.config.generated.stored is True
    with pytest.raises(InvalidArgumentError):
        builder.default("x")


def test_sql_expression_simplicity():
    assert sql("now()").is_simple
    assert sql("'{}'::jsonb").is_simple
    assert not sql("a + b").is_simple
    assert DEFAULT.nextval("it's_seq").sql == "nextval('it''s_seq')"


def test_custom_type_and_copy():
    builder = c.custom_type("mood", enum_values=["happy", "sad"])
    assert builder.config.sql_type == "mood"
    assert builder.config.enum_values == ("happy", "sad")
    clone = builder.copy().not_null()
    assert builder.config.nullable is True
    assert clone.config.nullable is False
    assert ensure_config(builder) is builder.config
    with pytest.raises(InvalidArgumentError):
        ensure_config("text")
