import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bots.ionograms import daily_report
from services.notify.webhooks import WebhookError
from services.settings import Settings


def _settings(**kw):
    base = dict(
        DAILY=True,
        DISCORD=True,
        SLACK=True,
        DAILY_DISCORDURL="https://discord.test/hook",
        DAILY_SLACKURL="https://slack.test/hook",
        POST_PAUSE_SECONDS=5.0,
    )
    base.update(kw)
    return Settings(_env_file=None, **base)


def _record_posts(monkeypatch, fail_slack=False):
    posts = []

    def fake_discord(url, content):
        posts.append(("discord", url, content))

    def fake_slack(url, header, markdown):
        if fail_slack:
            raise WebhookError("non-ok response: 'invalid_payload'")
        posts.append(("slack", url, markdown))

    monkeypatch.setattr(daily_report, "send_discord", fake_discord)
    monkeypatch.setattr(daily_report, "send_slack", fake_slack)
    return posts


def test_push_reports_posts_each_report_to_each_target(monkeypatch):
    posts = _record_posts(monkeypatch)
    sleeps = []
    failed = daily_report.push_reports(["A", "B", "C"], _settings(), sleep=sleeps.append)

    assert failed == 0
    assert [p[0] for p in posts] == ["discord", "slack"] * 3
    assert posts[0] == ("discord", "https://discord.test/hook", "```\nA\n```\n")
    # pause between reports, none after the last
    assert sleeps == [5.0, 5.0]


def test_push_reports_counts_failures_and_keeps_going(monkeypatch):
    posts = _record_posts(monkeypatch, fail_slack=True)
    failed = daily_report.push_reports(["A", "B"], _settings(), sleep=lambda s: None)
    assert failed == 2
    assert [p[0] for p in posts] == ["discord", "discord"]


def test_push_reports_only_enabled_targets(monkeypatch):
    posts = _record_posts(monkeypatch)
    daily_report.push_reports(["A"], _settings(SLACK=False), sleep=lambda s: None)
    assert [p[0] for p in posts] == ["discord"]


def test_main_does_nothing_when_daily_disabled(monkeypatch):
    monkeypatch.setattr(daily_report, "get_settings", lambda: _settings(DAILY=False))

    def boom(*_a, **_k):
        raise AssertionError("reports must not be built")

    monkeypatch.setattr(daily_report, "build_daily_reports", boom)
    assert daily_report.main([]) == 0


def test_main_refuses_missing_webhook(monkeypatch, caplog):
    monkeypatch.setattr(daily_report, "get_settings", lambda: _settings(DAILY_SLACKURL=None))
    assert daily_report.main([]) == 2
    assert "DAILY_SLACKURL" in caplog.text


def test_main_print_mode_writes_reports(monkeypatch, capsys):
    monkeypatch.setattr(daily_report, "get_settings", lambda: _settings(DAILY=False))
    monkeypatch.setattr(daily_report, "build_daily_reports", lambda store: ["24H JR055 report\n"])
    _record_posts(monkeypatch)
    assert daily_report.main(["--print"]) == 0
    assert "24H JR055 report" in capsys.readouterr().out


def test_main_pushes_reports(monkeypatch):
    monkeypatch.setattr(daily_report, "get_settings", lambda: _settings(POST_PAUSE_SECONDS=0.0))
    monkeypatch.setattr(daily_report, "build_daily_reports", lambda store: ["r1"])
    posts = _record_posts(monkeypatch)
    assert daily_report.main([]) == 0
    assert len(posts) == 2


def test_main_build_failure_exit_code(monkeypatch):
    monkeypatch.setattr(daily_report, "get_settings", lambda: _settings())

    def broken(store):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(daily_report, "build_daily_reports", broken)
    assert daily_report.main([]) == 1
