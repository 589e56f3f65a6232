"""
email_relay.py — Resend-backed EmailProvider
==============================================
send(message) → {success, id, dryRun, error?}

  • comma-separated to/cc/bcc are split into lists
  • no RESEND_API_KEY + dryRun not False → pretend success, id="dry_run"
  • only the "Resend" provider is supported
  • never raises; failures come back as success=False
"""

import logging
import os

import aiohttp
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger("email_relay")

RESEND_API_URL = "https://api.resend.com/emails"
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", "")

SUPPORTED_PROVIDERS = ("Resend",)


def split_recipients(value) -> list[str]:
    return [part.strip() for part in str(value or "").split(",") if part.strip()]


class ResendEmailRelay:
    def __init__(self, api_key: str = RESEND_API_KEY, default_from: str = RESEND_FROM_EMAIL,
                 api_url: str = RESEND_API_URL, timeout: float = 10):
        self.api_key = api_key
        self.default_from = default_from
        self.api_url = api_url
        self.timeout = timeout

    def build_payload(self, message: dict) -> dict:
        payload = {
            "from": message.get("from") or self.default_from,
            "to": split_recipients(message.get("to")),
            "subject": message.get("subject", ""),
        }
        if message.get("useHtml"):
            payload["html"] = message.get("body", "")
        else:
            payload["text"] = message.get("body", "")
        cc, bcc = split_recipients(message.get("cc")), split_recipients(message.get("bcc"))
        if cc:
            payload["cc"] = cc
        if bcc:
            payload["bcc"] = bcc
        return payload

    async def send(self, message: dict) -> dict:
        if not message.get("to") or not message.get("subject") or not message.get("body"):
            return {"success": False, "error": "Missing required fields: to, subject, body"}

        provider = message.get("provider") or "Resend"
        if provider not in SUPPORTED_PROVIDERS:
            return {"success": False, "error": f"Unsupported provider: {provider}"}

        if not self.api_key:
            if message.get("dryRun") is not False:
                logger.info("📧 Dry run — would send %r to %s", message.get("subject"), message.get("to"))
                return {"success": True, "id": "dry_run", "dryRun": True}
            return {"success": False, "error": "Email provider not configured (RESEND_API_KEY missing)"}

        payload = self.build_payload(message)
        if not payload["from"]:
            return {"success": False, "error": 'Sender email not set. Provide "from" or RESEND_FROM_EMAIL'}

        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.api_url, json=payload, headers=headers,
                                        timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                    data = await resp.json(content_type=None)
                    if resp.status >= 400:
                        error = (data or {}).get("message") if isinstance(data, dict) else None
                        logger.error("Resend API %d: %s", resp.status, error)
                        return {"success": False, "error": error or "Failed to send email"}
        except Exception as e:
            logger.error("Resend request failed: %s", e)
            return {"success": False, "error": str(e)}

        message_id = data.get("id") if isinstance(data, dict) else None
        logger.info("📧 Email sent via Resend — id=%s to=%s", message_id, payload["to"])
        return {"success": True, "id": message_id, "dryRun": False}
