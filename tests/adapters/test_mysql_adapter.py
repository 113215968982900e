import logging

from relq import columns as c
from relq.adapters import MariaDBAdapter, MySQLAdapter, get_adapter
from relq.schema import define_table, index


class VersionDriver:
    def __init__(self, version):
        self.version = version
        self.queries = []
        self.closed = False

    def connect(self, config):
        self.config = config

    def close(self):
        self.closed = True

    def fetch_all(self, sql, params=None):
        self.queries.append(sql)
        return [{"version": self.version}]


def test_mysql_identity():
    adapter = get_adapter("mysql")
    assert isinstance(adapter, MySQLAdapter)
    assert (adapter.family, adapter.default_port, adapter.default_user) == ("mysql", 3306, "root")
    assert adapter.quote_identifier("order") == "`order`"
    assert adapter.param_placeholder(5) == "?"
    assert MariaDBAdapter().display_name == "MariaDB"


def test_mysql_type_probes():
    adapter = MySQLAdapter()
    assert adapter.is_type_supported("TEXT[]") is False
    assert adapter.is_type_supported("varchar(255)") is True


def test_mysql_migration_table_ddl():
    ddl = MySQLAdapter().get_migration_table_ddl("_relq_migrations")
    assert ddl.startswith("CREATE TABLE IF NOT EXISTS `_relq_migrations` (")
    assert "id INT AUTO_INCREMENT PRIMARY KEY" in ddl
    assert ddl.endswith("ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci;")


def test_mysql_drop_ignores_cascade(caplog):
    with caplog.at_level(logging.DEBUG, logger="relq.schema"):
        sql = MySQLAdapter().generate_drop_table("users", cascade=True)
    assert sql == "DROP TABLE IF EXISTS `users`;"
    assert "CASCADE ignored" in caplog.text


def test_mysql_create_index_statements():
    posts = define_table(
        "posts",
        {"id": c.serial().primary_key(), "title": c.varchar(200).not_null()},
        indexes=[index("title")],
    )
    adapter = MySQLAdapter()
    assert adapter.generate_create_index(posts) == ["CREATE INDEX `idx_posts_title` ON `posts` (`title`);"]
    assert "ENGINE=InnoDB" in adapter.generate_create_table(posts)


def test_mysql_version_query():
    driver = VersionDriver("8.0.36")
    adapter = MySQLAdapter(driver_factory=lambda dialect: driver)
    assert adapter.get_database_version("mysql://root@localhost/shop") == "8.0.36"
    assert driver.queries == ["SELECT VERSION() AS version"]
    assert driver.closed is True
