"""
Campaign service - storing and loading campaign configurations
"""
from typing import Optional, Dict, Any
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ohmage.database.queries import execute_with_retry
from ohmage.domain.campaign.campaign import Campaign, parse_privacy_state, parse_running_state
from ohmage.domain.campaign.xml_parser import parse_campaign
from ohmage.domain.exceptions import DomainError


class CampaignService:
    """Service for campaign-related operations"""

    @staticmethod
    async def get_campaign_row(session: AsyncSession, urn: str) -> Optional[Dict[str, Any]]:
        """
        Get the stored campaign row by URN

        Returns:
            Dict with id, urn, xml, description, running_state, privacy_state,
            created_by and created_at, or None if not found
        """
        result = await execute_with_retry(
            session,
            text("""
                SELECT id, urn, xml, description, running_state, privacy_state, created_by, created_at
                FROM campaigns
                WHERE urn = :urn
            """).bindparams(urn=urn)
        )
        row = result.first()
        if not row:
            return None
        return {
            "id": str(row[0]),
            "urn": row[1],
            "xml": row[2],
            "description": row[3],
            "running_state": row[4],
            "privacy_state": row[5],
            "created_by": str(row[6]) if row[6] else None,
            "created_at": row[7],
        }

    @staticmethod
    def campaign_from_row(row: Dict[str, Any]) -> Campaign:
        """Re-parse a stored configuration with its stored states"""
        return parse_campaign(
            row["xml"],
            running_state=row["running_state"],
            privacy_state=row["privacy_state"],
            description=row["description"],
        )

    @staticmethod
    async def insert_campaign(session: AsyncSession, campaign: Campaign, user_id: str) -> Optional[str]:
        """
        Store a new campaign

        Returns:
            Campaign ID, or None if a campaign with the same URN exists
        """
        result = await execute_with_retry(
            session,
            text("""
                INSERT INTO campaigns (urn, name, description, xml, running_state, privacy_state, created_by)
                VALUES (:urn, :name, :description, :xml, :running_state, :privacy_state, CAST(:user_id AS UUID))
                ON CONFLICT (urn) DO NOTHING
                RETURNING id
            """).bindparams(
                urn=campaign.urn,
                name=campaign.name,
                description=campaign.description,
                xml=campaign.xml,
                running_state=str(campaign.running_state),
                privacy_state=str(campaign.privacy_state),
                user_id=user_id,
            )
        )
        row = result.first()
        return str(row[0]) if row else None

    @staticmethod
    async def has_responses(session: AsyncSession, campaign_id: str) -> bool:
        result = await execute_with_retry(
            session,
            text("""
                SELECT EXISTS (
                    SELECT 1 FROM survey_responses WHERE campaign_id = CAST(:campaign_id AS UUID)
                )
            """).bindparams(campaign_id=campaign_id)
        )
        return bool(result.scalar())

    @staticmethod
    async def update_campaign(
        session: AsyncSession,
        row: Dict[str, Any],
        xml: Optional[str] = None,
        running_state: Optional[str] = None,
        privacy_state: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Campaign:
        """
        Update a stored campaign

        The XML may only be replaced while the campaign has no responses, and
        the new XML must keep the campaign's URN.

        Args:
            row: The stored row from get_campaign_row

        Returns:
            The updated campaign

        Raises:
            DomainError: If the update is not allowed or the new configuration
                is invalid
        """
        new_running = parse_running_state(running_state or row["running_state"])
        new_privacy = parse_privacy_state(privacy_state or row["privacy_state"])
        new_description = description if description is not None else row["description"]

        if xml is not None:
            if await CampaignService.has_responses(session, row["id"]):
                raise DomainError("The campaign XML cannot be changed after responses were uploaded.")
            campaign = parse_campaign(xml, new_running, new_privacy, new_description)
            if campaign.urn != row["urn"]:
                raise DomainError(
                    f"The URN in the new XML ({campaign.urn}) does not match the campaign ({row['urn']})."
                )
        else:
            campaign = parse_campaign(row["xml"], new_running, new_privacy, new_description)

        await execute_with_retry(
            session,
            text("""
                UPDATE campaigns
                SET name = :name,
                    description = :description,
                    xml = :xml,
                    running_state = :running_state,
                    privacy_state = :privacy_state,
                    updated_at = NOW()
                WHERE id = CAST(:campaign_id AS UUID)
            """).bindparams(
                name=campaign.name,
                description=campaign.description,
                xml=campaign.xml,
                running_state=str(campaign.running_state),
                privacy_state=str(campaign.privacy_state),
                campaign_id=row["id"],
            )
        )
        return campaign

    @staticmethod
    async def delete_campaign(session: AsyncSession, campaign_id: str) -> None:
        """Delete a campaign together with its responses"""
        await execute_with_retry(
            session,
            text("""
                DELETE FROM prompt_responses
                WHERE survey_response_id IN (
                    SELECT id FROM survey_responses WHERE campaign_id = CAST(:campaign_id AS UUID)
                )
            """).bindparams(campaign_id=campaign_id)
        )
        await execute_with_retry(
            session,
            text("DELETE FROM survey_responses WHERE campaign_id = CAST(:campaign_id AS UUID)")
            .bindparams(campaign_id=campaign_id)
        )
        await execute_with_retry(
            session,
            text("DELETE FROM campaigns WHERE id = CAST(:campaign_id AS UUID)").bindparams(campaign_id=campaign_id)
        )
