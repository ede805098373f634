from billiards.database import database
from billiards.models.db.email_campaign import EmailCampaign, EmailTemplateKey
from billiards.utils.id_types import CategoryId, EmailCampaignId, TournamentId


async def sql_create_email_campaign(
    subject: str,
    body: str,
    template_key: EmailTemplateKey,
    recipients_count: int,
    tournament_id: TournamentId | None = None,
) -> EmailCampaignId:
    query = """
        INSERT INTO email_campaigns (subject, body, template_key, recipients_count, status, tournament_id)
        VALUES (:subject, :body, :template_key, :recipients_count, 'SENDING', :tournament_id)
        RETURNING id
        """
    new_id = await database.fetch_val(
        query=query,
        values={
            "subject": subject,
            "body": body,
            "template_key": template_key.value,
            "recipients_count": recipients_count,
            "tournament_id": tournament_id,
        },
    )
    return EmailCampaignId(new_id)


async def sql_complete_email_campaign(
    campaign_id: EmailCampaignId, sent_count: int, failed_count: int
) -> None:
    query = """
        UPDATE email_campaigns
        SET
            sent_count = :sent_count,
            failed_count = :failed_count,
            status = 'COMPLETED',
            sent_at = NOW()
        WHERE id = :campaign_id
        """
    await database.execute(
        query=query,
        values={"campaign_id": campaign_id, "sent_count": sent_count, "failed_count": failed_count},
    )


async def sql_get_email_campaigns(limit: int = 50) -> list[EmailCampaign]:
    query = """
        SELECT *
        FROM email_campaigns
        ORDER BY created DESC
        LIMIT :limit
        """
    result = await database.fetch_all(query=query, values={"limit": limit})
    return [EmailCampaign.model_validate(dict(x._mapping)) for x in result]


async def sql_finale_relance_sent(category_id: CategoryId, season: str) -> bool:
    query = """
        SELECT 1
        FROM finale_relances
        WHERE category_id = :category_id
          AND season = :season
        """
    result = await database.fetch_one(
        query=query, values={"category_id": category_id, "season": season}
    )
    return result is not None


async def sql_mark_finale_relance_sent(
    category_id: CategoryId, season: str, recipients_count: int
) -> None:
    query = """
        INSERT INTO finale_relances (category_id, season, recipients_count, sent_at)
        VALUES (:category_id, :season, :recipients_count, NOW())
        ON CONFLICT (category_id, season) DO UPDATE
        SET recipients_count = EXCLUDED.recipients_count, sent_at = EXCLUDED.sent_at
        """
    await database.execute(
        query=query,
        values={"category_id": category_id, "season": season, "recipients_count": recipients_count},
    )
