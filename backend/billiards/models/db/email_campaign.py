from enum import auto

from heliclockter import datetime_utc

from billiards.models.db.shared import BaseModelORM
from billiards.utils.id_types import EmailCampaignId, TournamentId
from billiards.utils.types import EnumAutoStr


class EmailCampaignStatus(EnumAutoStr):
    SENDING = auto()
    COMPLETED = auto()


class EmailTemplateKey(EnumAutoStr):
    TOURNAMENT_RESULTS = auto()
    FINALE_CONVOCATION = auto()
    FINALE_RELANCE = auto()


class EmailCampaign(BaseModelORM):
    id: EmailCampaignId
    subject: str
    body: str
    template_key: str
    recipients_count: int
    sent_count: int
    failed_count: int
    status: EmailCampaignStatus
    tournament_id: TournamentId | None = None
    created: datetime_utc
    sent_at: datetime_utc | None = None
