import pytest

from relq.compat import DIALECT_INFO, VALIDATORS, detect_dialect_from_connection_string, normalize_validator_name


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://app@localhost:5432/app", "postgres"),
        ("postgresql://u:p@free-tier.gcp-us-central1.cockroachlabs.cloud:26257/defaultdb", "cockroachdb"),
        ("postgres://root@localhost:26257/cockroachdb_test", "cockroachdb"),
        ("postgres://u@db.us-west-2.aws.thenile.dev/app", "nile"),
        ("postgres://admin@abc123.dsql.us-east-1.on.aws:5432/postgres", "dsql"),
        ("postgres://admin@localhost/aurora-dsql-test", "dsql"),
        ("mysql://root@localhost:3306/shop", "mysql"),
        ("mysql://u:p@aws.connect.psdb.cloud/shop", "planetscale"),
        ("mariadb://root@localhost/shop", "mariadb"),
        ("libsql://my-db-acme.turso.io", "turso"),
        ("https://my-db-acme.turso.io", "turso"),
        ("sqlite:///var/data/app.db", "sqlite"),
        ("./data/app.sqlite3", "sqlite"),
        ("redis://localhost:6379/0", None),
    ],
)
def test_detect_dialect_from_connection_string(url, expected):
    assert detect_dialect_from_connection_string(url) == expected


def test_every_validator_has_dialect_info():
    assert set(DIALECT_INFO) == set(VALIDATORS)
    assert DIALECT_INFO["turso"]["family"] == "sqlite"
    assert DIALECT_INFO["planetscale"]["family"] == "mysql"


def test_validator_name_aliases():
    assert normalize_validator_name(" PostgreSQL ") == "postgres"
    assert normalize_validator_name("crdb") == "cockroachdb"
    assert normalize_validator_name("vitess") == "planetscale"
    assert normalize_validator_name("aurora-dsql") == "dsql"
