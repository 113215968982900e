from relq import columns as c
from relq.columns import DEFAULT, ensure_config
from relq.dialects import MariaDBDialect, MySQLDialect
from relq.dialects.mysql import MYSQL_TABLE_SUFFIX


def render(dialect, builder):
    return dialect.render_column_definition(ensure_config(builder))


def test_mysql_dialect_quotes_identifiers():
    dialect = MySQLDialect()
    assert dialect.quote_identifier("user`name") == "`user``name`"
    assert dialect.format_table("analytics.events") == "`analytics`.`events`"


def test_mysql_limit_clause():
    dialect = MySQLDialect()
    assert dialect.limit_clause(10, None) == "LIMIT 10"
    assert dialect.limit_clause(None, 5) == "LIMIT 18446744073709551615 OFFSET 5"
    assert dialect.limit_clause(10, 5) == "LIMIT 10 OFFSET 5"


def test_mysql_placeholder():
    dialect = MySQLDialect()
    assert dialect.parameter_placeholder() == "?"
    assert dialect.param_style == "qmark"


def test_mysql_type_rendering():
    dialect = MySQLDialect()
    assert dialect.render_type(ensure_config(c.boolean())) == "TINYINT(1)"
    assert dialect.render_type(ensure_config(c.varchar())) == "VARCHAR(255)"
    assert dialect.render_type(ensure_config(c.timestamptz(precision=3))) == "TIMESTAMP(3)"
    assert dialect.render_type(ensure_config(c.timestamp())) == "DATETIME"
    assert dialect.render_type(ensure_config(c.uuid())) == "CHAR(36)"
    assert dialect.render_type(ensure_config(c.text().array())) == "JSON"
    assert dialect.render_type(ensure_config(c.custom_type("mood", enum_values=["sad", "ok"]))) == "ENUM('sad', 'ok')"


def test_mysql_column_definitions():
    dialect = MySQLDialect()
    assert render(dialect, c.serial("id").primary_key()) == "`id` INT NOT NULL AUTO_INCREMENT PRIMARY KEY"
    assert render(dialect, c.uuid("token").default(DEFAULT.gen_random_uuid())) == "`token` CHAR(36) DEFAULT (UUID())"
    assert render(dialect, c.timestamptz("created").default(DEFAULT.now())) == (
        "`created` TIMESTAMP DEFAULT CURRENT_TIMESTAMP"
    )
    assert render(dialect, c.integer("author_id").references("authors")) == "`author_id` INT"
    assert render(dialect, c.text("bio").comment("it's")) == "`bio` TEXT COMMENT 'it''s'"


def test_mysql_table_suffix():
    dialect = MySQLDialect()
    assert dialect.table_suffix({}) == MYSQL_TABLE_SUFFIX
    assert dialect.table_suffix({"comment": "users"}) == f"{MYSQL_TABLE_SUFFIX} COMMENT='users'"


def test_mariadb_differences():
    dialect = MariaDBDialect()
    assert render(dialect, c.uuid("token").default(DEFAULT.gen_random_uuid())) == "`token` CHAR(36) DEFAULT UUID()"
    assert dialect.capabilities.supports_index_if_not_exists is True
    assert MySQLDialect().capabilities.supports_index_if_not_exists is False


def test_mysql_type_mapping():
    dialect = MySQLDialect()
    assert dialect.map_type_to_friendly("tinyint(1)") == "boolean"
    assert dialect.map_type_to_friendly("int8") == "bigint"
    assert dialect.map_type_to_internal("uuid") == "char(36)"
    assert dialect.get_python_type("tinyint(1)") == "bool"
    assert dialect.get_python_type("datetime") == "datetime.datetime"
