"""CLI tests for run, ledger, config and doctor commands."""

import json

import pytest
from click.testing import CliRunner

import mintfeed.processor
from mintfeed.cli import cli
from mintfeed.cli._helpers import _normalize_item_id_or_url
from mintfeed.config import get_config_path, get_ledger_path, load_config
from mintfeed.errors import AlreadyProcessed, ConfigError, SourceFetchError
from mintfeed.ledger import DeduplicationStore
from mintfeed.models import DedupRecord, MintResult, NormalizedContent, SourceItem
from mintfeed.processor import RunOutcome


class FakePipeline:
    def __init__(self, error=None):
        self.error = error
        self.item_ids = []

    async def run(self, item_id=None):
        self.item_ids.append(item_id)
        if self.error:
            raise self.error
        item = SourceItem(id="1900000000000000001", text="Chart")
        return RunOutcome(
            item=item,
            content=NormalizedContent(text="Clean chart", source_item_id=item.id, root_item_id=item.id),
            result=MintResult(transaction_id="0xtx", artifact_address="0xcoin"),
            name="tokenmetrics#000001",
            symbol="TM000001",
            link="https://x.com/tokenmetricsinc/status/1900000000000000001",
            dedup_recorded=True,
        )


@pytest.fixture
def fake_pipeline(monkeypatch):
    built = {}

    def install(pipeline):
        def build(config, source):
            built["source"] = source
            return pipeline

        monkeypatch.setattr(mintfeed.processor, "build_pipeline", build)
        return built

    return install


def test_normalize_item_id_or_url():
    assert _normalize_item_id_or_url("https://x.com/tokenmetricsinc/status/123?s=20") == "123"
    assert _normalize_item_id_or_url("https://youtube.com/shorts/abcdefghijk") == "abcdefghijk"
    assert _normalize_item_id_or_url("https://www.youtube.com/watch?v=abcdefghijk&t=3") == "abcdefghijk"
    assert _normalize_item_id_or_url(" 456 ") == "456"


def test_run_success_exits_zero(fake_pipeline):
    pipeline = FakePipeline()
    built = fake_pipeline(pipeline)

    result = CliRunner().invoke(cli, ["run", "https://x.com/tokenmetricsinc/status/1900000000000000001"])

    assert result.exit_code == 0, result.output
    assert "0xtx" in result.output
    assert pipeline.item_ids == ["1900000000000000001"]
    assert built["source"] == "twitter"


def test_run_latest_mode_passes_no_id(fake_pipeline):
    pipeline = FakePipeline()
    built = fake_pipeline(pipeline)

    result = CliRunner().invoke(cli, ["run", "--source", "youtube"])

    assert result.exit_code == 0, result.output
    assert pipeline.item_ids == [None]
    assert built["source"] == "youtube"


@pytest.mark.parametrize(
    "error",
    [AlreadyProcessed("1900000000000000001"), SourceFetchError("bird failed"), ConfigError("YOUTUBE_API_KEY not set")],
)
def test_run_failures_exit_one(fake_pipeline, error):
    fake_pipeline(FakePipeline(error=error))

    result = CliRunner().invoke(cli, ["run"])

    assert result.exit_code == 1
    assert str(error) in result.output


def test_run_without_credentials_exits_one():
    result = CliRunner().invoke(cli, ["run"])

    assert result.exit_code == 1
    assert "not set" in result.output


def test_ledger_check_exit_codes():
    runner = CliRunner()
    assert runner.invoke(cli, ["ledger", "check", "123"]).exit_code == 1

    DeduplicationStore(get_ledger_path("twitter"), capacity=10).record(DedupRecord(source_item_id="123"))

    assert runner.invoke(cli, ["ledger", "check", "https://x.com/a/status/123"]).exit_code == 0
    assert runner.invoke(cli, ["ledger", "check", "123", "--source", "youtube"]).exit_code == 1


def test_ledger_show_lists_newest_first():
    store = DeduplicationStore(get_ledger_path("twitter"), capacity=10)
    store.record(DedupRecord(source_item_id="alpha"))
    store.record(DedupRecord(source_item_id="bravo"))

    result = CliRunner().invoke(cli, ["ledger", "show"])

    assert result.exit_code == 0, result.output
    assert result.output.index("bravo") < result.output.index("alpha")


def test_ledger_show_corrupt_file_fails():
    path = get_ledger_path("twitter")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("not json")

    result = CliRunner().invoke(cli, ["ledger", "show"])

    assert result.exit_code == 1


def test_config_set_persists_typed_value():
    result = CliRunner().invoke(cli, ["config", "set", "ledger.video_capacity", "50"])

    assert result.exit_code == 0, result.output
    assert load_config()["ledger"]["video_capacity"] == 50
    assert json.loads(get_config_path().read_text())["ledger"]["video_capacity"] == 50


def test_config_set_rejects_invalid_value():
    result = CliRunner().invoke(cli, ["config", "set", "twitter.image_mode", "bogus"])

    assert result.exit_code == 1
    assert not get_config_path().exists()


def test_config_defaults_not_mutated_by_set():
    CliRunner().invoke(cli, ["config", "set", "llm.model", "gpt-4.1-mini"])
    get_config_path().unlink()

    assert load_config()["llm"]["model"] == "gpt-4.1"


def test_ledger_paths_follow_data_dir(tmp_path):
    assert get_ledger_path("twitter") == tmp_path / "data" / "posted-tweets.json"
    assert get_ledger_path("youtube") == tmp_path / "data" / "posted-videos.json"


def test_doctor_reports_missing_credentials():
    result = CliRunner().invoke(cli, ["doctor"])

    assert result.exit_code == 1
    assert "ZORA_SMART_WALLET_ADDRESS not set" in result.output


def test_config_show_single_key():
    result = CliRunner().invoke(cli, ["config", "show", "ledger.image_capacity"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "1000"


def test_config_show_unknown_key_fails():
    assert CliRunner().invoke(cli, ["config", "show", "ledger.nope"]).exit_code == 1


def test_config_set_writes_only_overrides_and_unset_restores_default():
    runner = CliRunner()
    runner.invoke(cli, ["config", "set", "twitter.image_mode", "download"])

    assert json.loads(get_config_path().read_text()) == {"twitter": {"image_mode": "download"}}

    result = runner.invoke(cli, ["config", "unset", "twitter.image_mode"])

    assert result.exit_code == 0, result.output
    assert load_config()["twitter"]["image_mode"] == "reference"


def test_invalid_config_json_reported_by_run():
    path = get_config_path()
    path.parent.mkdir(parents=True)
    path.write_text("{broken")

    result = CliRunner().invoke(cli, ["run"])

    assert result.exit_code == 1
    assert "not valid JSON" in " ".join(result.output.split())


def test_doctor_survives_invalid_config():
    path = get_config_path()
    path.parent.mkdir(parents=True)
    path.write_text("[]")

    result = CliRunner().invoke(cli, ["doctor"])

    assert result.exit_code == 1
    assert "Config file invalid" in result.output
