from __future__ import annotations

import json
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 10

SLACK_OK = "ok"
DISCORD_OK = '{"id":'


class WebhookError(RuntimeError):
    pass


def post_json(url: str, payload: dict, ok_prefix: Optional[str] = None) -> None:
    """
    POST ``payload`` and validate the reply. When the service answers with a
    body and ``ok_prefix`` is given the body must start with it, otherwise
    the status code must be 2xx.
    """
    if not url:
        raise WebhookError("webhook URL empty")
    try:
        r = requests.post(
            url,
            data=json.dumps(payload),
            headers={"Content-Type": "application/json"},
            timeout=WEBHOOK_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise WebhookError(f"webhook post failed: {exc}") from exc

    body = r.text or ""
    if body and ok_prefix:
        if not body.startswith(ok_prefix):
            raise WebhookError(f"non-ok response: {body[:200]!r}")
    elif not 200 <= r.status_code <= 299:
        raise WebhookError(f"got return code {r.status_code}")


def send_slack(url: str, header: str, markdown: str) -> None:
    payload = {
        "text": header,
        "blocks": [{"type": "section", "text": {"type": "mrkdwn", "text": markdown}}],
    }
    post_json(url, payload, SLACK_OK)


def send_discord(url: str, content: str) -> None:
    post_json(url, {"content": content}, DISCORD_OK)


def code_block(text: str) -> str:
    return "```\n" + text + "\n```\n"
