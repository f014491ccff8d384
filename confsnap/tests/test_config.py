from types import SimpleNamespace

import pytest

from confsnap.config import Config


def _write(tmp_path, text: str):
    path = tmp_path / "confsnap.toml"
    path.write_text(text)
    return path


def test_defaults() -> None:
    config = Config()
    assert config.storage.backend == "local"
    assert config.storage.path == "./config/cloudfront-backups"
    assert config.retention.max_age_days == 30.0
    assert config.retention.history_cap == 50
    assert config.summary.profile == "cloudfront"
    assert config.validate() == ["Target id is required. Set CLOUDFRONT_DISTRIBUTION_ID or [target] id"]


def test_load_from_file(tmp_path) -> None:
    path = _write(tmp_path, """
[target]
id = "E2IBMHQ3GCW6ZK"

[storage]
backend = "s3"
bucket = "site-backups"
prefix = "cf/"

[retention]
max_age_days = 7
history_cap = 10

[summary]
profile = "scalars"
""")

    config = Config.load(str(path), environ={})

    assert config.target.id == "E2IBMHQ3GCW6ZK"
    assert config.storage.backend == "s3"
    assert config.storage.bucket == "site-backups"
    assert config.storage.prefix == "cf/"
    assert config.retention.max_age_days == 7.0
    assert config.retention.history_cap == 10
    assert config.summary.profile == "scalars"
    assert config.validate() == []
    assert f"Config: {path}" in config.summary_text()


def test_explicit_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        Config.load(str(tmp_path / "missing.toml"), environ={})


def test_environment_overrides_file(tmp_path) -> None:
    path = _write(tmp_path, '[target]\nid = "EFROMFILE"\n')

    config = Config.load(str(path), environ={
        "CLOUDFRONT_DISTRIBUTION_ID": "EFROMENV",
        "CONFSNAP_S3_BUCKET": "env-bucket",
        "AWS_REGION": "eu-west-2",
    })

    assert config.target.id == "EFROMENV"
    assert config.storage.backend == "s3"
    assert config.storage.bucket == "env-bucket"
    assert config.storage.region == "eu-west-2"


def test_args_override_environment(tmp_path) -> None:
    path = _write(tmp_path, "")
    config = Config.load(str(path), environ={"CLOUDFRONT_DISTRIBUTION_ID": "EFROMENV"})

    config.override_from_args(SimpleNamespace(
        target="EFROMARGS", backup_dir=str(tmp_path), profile=None, verbose=True, quiet=False,
    ))

    assert config.target.id == "EFROMARGS"
    assert config.storage.path == str(tmp_path)
    assert config.summary.profile == "cloudfront"
    assert config.output.verbose


def test_validate_reports_every_problem() -> None:
    config = Config()
    config.target.id = "E1"
    config.storage.backend = "s3"
    config.summary.profile = "unknown"
    config.retention.history_cap = 0

    errors = config.validate()

    assert "S3 storage requires a bucket" in errors
    assert "Unknown summary profile: unknown" in errors
    assert "Retention history_cap must be at least 1" in errors
    assert len(errors) == 3
