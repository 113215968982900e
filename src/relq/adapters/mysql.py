"""
MySQL and MariaDB adapters.
"""

from __future__ import annotations

from .base import DialectAdapter


class MySQLAdapter(DialectAdapter):
    dialect = "mysql"

    def get_migration_table_ddl(self, table_name: str) -> str:
        name = self.quote_identifier(table_name)
        return (
            f"CREATE TABLE IF NOT EXISTS {name} (\n"
            "    id INT AUTO_INCREMENT PRIMARY KEY,\n"
            "    name VARCHAR(255) NOT NULL,\n"
            "    filename VARCHAR(255) NOT NULL,\n"
            "    hash VARCHAR(255) NOT NULL,\n"
            "    batch INT NOT NULL,\n"
            "    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,\n"
            "    execution_time_ms INT,\n"
            "    metadata JSON\n"
            ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci;"
        )

    def version_query(self) -> str:
        return "SELECT VERSION() AS version"


class MariaDBAdapter(MySQLAdapter):
    dialect = "mariadb"
