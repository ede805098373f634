import httpx
from pydantic import BaseModel

from billiards.config import config
from billiards.utils.types import dict_without_none


class OutgoingEmail(BaseModel):
    sender: str
    to: list[str]
    subject: str
    html: str
    reply_to: str | None = None


class ResendClient:
    """Thin async wrapper around the Resend `POST /emails` endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = config.email_api_url,
        timeout_seconds: float = config.email_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    async def __aenter__(self) -> "ResendClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self._client.aclose()

    async def send(self, email: OutgoingEmail) -> str:
        response = await self._client.post(
            self.api_url,
            json=dict_without_none(
                {
                    "from": email.sender,
                    "to": email.to,
                    "subject": email.subject,
                    "html": email.html,
                    "reply_to": email.reply_to,
                }
            ),
        )
        response.raise_for_status()
        try:
            return str(response.json().get("id", ""))
        except ValueError:
            # Accepted, but the provider did not return a message id.
            return ""


def get_email_client() -> ResendClient | None:
    if not config.resend_api_key:
        return None
    return ResendClient(config.resend_api_key)
