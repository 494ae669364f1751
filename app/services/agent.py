"""
Voice agent platform (ElevenLabs) integration.

Covers provisioning and configuring the conversational agent bound to an
organization, and verification of the signed webhooks the platform posts
after each call.
"""

import json
from typing import Any, Dict, Optional

from elevenlabs import AsyncElevenLabs, ElevenLabs
from elevenlabs.core.api_error import ApiError
import httpx
import structlog

from app.config import settings
from app.exceptions import ExternalServiceError, WebhookVerificationError
from app.models.organization import Organization
from app.schemas.organization import AgentSettingsResponse, AgentSettingsUpdate

logger = structlog.get_logger()

SIGNATURE_HEADER = "ElevenLabs-Signature"

AGENT_PROMPT = """You are the phone ordering assistant for {{restaurant_name}}.

Greet the caller, help them choose from the menu and take their order.
- Always call getMenu before recommending or confirming items. Only offer items it returns.
- Use getKnowledge for questions about the restaurant (opening hours, allergens, location, policies).
- Ask whether the order is dine-in or takeaway, and ask for a table number for dine-in.
- Ask for the customer's name.
- Before ending the call, read the full order back with quantities and ask for confirmation.
Keep answers short and friendly. Never invent prices or items."""

FIRST_MESSAGE = "Hi, thanks for calling {{restaurant_name}}! What can I get for you today?"

ITEMS_FORMAT = '[{"id": "<menu item id>", "name": "<item name>", "quantity": <number>, "notes": "<optional>"}]'


def tool_url(organization_id, tool: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/api/{organization_id}/{tool}"


def build_tools(organization: Organization) -> list:
    """Webhook tools the agent calls during a conversation"""
    return [
        {
            "type": "webhook",
            "name": "getMenu",
            "description": "Get the available menu items with id, name, description, price and category.",
            "api_schema": {
                "url": tool_url(organization.id, "menu"),
                "method": "GET",
            },
        },
        {
            "type": "webhook",
            "name": "getKnowledge",
            "description": "Search the restaurant knowledge base for information not on the menu.",
            "api_schema": {
                "url": tool_url(organization.id, "knowledge"),
                "method": "GET",
                "query_params_schema": {
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "The customer's question in a few words",
                        },
                    },
                    "required": ["query"],
                },
            },
        },
    ]


def build_data_collection() -> Dict[str, Any]:
    """Structured fields the platform extracts from each finished call"""
    return {
        "name": {
            "type": "string",
            "description": "The customer's name. Empty if not given.",
        },
        "orderType": {
            "type": "string",
            "description": "Either 'dine-in' or 'takeaway'.",
        },
        "tableNumber": {
            "type": "string",
            "description": "Table number for dine-in orders. Empty otherwise.",
        },
        "items": {
            "type": "string",
            "description": f"The confirmed order as a JSON array: {ITEMS_FORMAT}. Use ids returned by getMenu.",
        },
    }


def build_conversation_config(organization: Organization) -> Dict[str, Any]:
    return {
        "agent": {
            "first_message": FIRST_MESSAGE,
            "language": settings.elevenlabs_default_language,
            "dynamic_variables": {
                "dynamic_variable_placeholders": {
                    "restaurant_name": organization.name,
                    "restaurant_id": str(organization.id),
                },
            },
            "prompt": {
                "prompt": AGENT_PROMPT,
                "llm": settings.elevenlabs_default_llm,
                "temperature": 0.3,
                "tools": build_tools(organization),
            },
        },
        "tts": {
            "voice_id": settings.elevenlabs_default_voice_id,
        },
    }


class VoiceAgentClient:
    """Thin wrapper over the platform's agent management API"""

    def __init__(self, api_key: str = None):
        self.client = AsyncElevenLabs(api_key=api_key or settings.elevenlabs_api_key)

    async def create_agent(self, organization: Organization) -> str:
        try:
            response = await self.client.conversational_ai.agents.create(
                name=f"{organization.name} ordering agent",
                conversation_config=build_conversation_config(organization),
                platform_settings={"data_collection": build_data_collection()},
            )
        except (ApiError, httpx.HTTPError) as e:
            logger.error("Agent provisioning failed", organization_id=str(organization.id), error=str(e))
            raise ExternalServiceError("voice platform", "agent provisioning failed") from e

        logger.info("Agent provisioned", organization_id=str(organization.id), agent_id=response.agent_id)
        return response.agent_id

    async def get_settings(self, agent_id: str) -> AgentSettingsResponse:
        try:
            agent = await self.client.conversational_ai.agents.get(agent_id)
        except (ApiError, httpx.HTTPError) as e:
            logger.error("Agent lookup failed", agent_id=agent_id, error=str(e))
            raise ExternalServiceError("voice platform", "agent lookup failed") from e

        config = agent.conversation_config
        agent_config = config.agent if config else None
        prompt = agent_config.prompt if agent_config else None

        return AgentSettingsResponse(
            agent_id=agent_id,
            voice=config.tts.voice_id if config and config.tts else None,
            language=agent_config.language if agent_config else None,
            llm_model=str(prompt.llm) if prompt and prompt.llm else None,
            system_prompt=prompt.prompt if prompt else None,
            first_message=agent_config.first_message if agent_config else None,
        )

    async def update_settings(self, agent_id: str, updates: AgentSettingsUpdate) -> AgentSettingsResponse:
        """Apply only the fields that were provided"""
        agent_config: Dict[str, Any] = {}
        if updates.language is not None:
            agent_config["language"] = updates.language
        if updates.first_message is not None:
            agent_config["first_message"] = updates.first_message
        if updates.llm_model is not None:
            agent_config["prompt"] = {"llm": updates.llm_model}

        conversation_config: Dict[str, Any] = {}
        if agent_config:
            conversation_config["agent"] = agent_config
        if updates.voice is not None:
            conversation_config["tts"] = {"voice_id": updates.voice}

        if conversation_config:
            try:
                await self.client.conversational_ai.agents.update(
                    agent_id,
                    conversation_config=conversation_config,
                )
            except (ApiError, httpx.HTTPError) as e:
                logger.error("Agent update failed", agent_id=agent_id, error=str(e))
                raise ExternalServiceError("voice platform", "agent update failed") from e

            logger.info("Agent settings updated", agent_id=agent_id, fields=sorted(updates.model_dump(exclude_none=True)))

        return await self.get_settings(agent_id)


def get_agent_client() -> VoiceAgentClient:
    """FastAPI dependency returning the voice platform client"""
    return VoiceAgentClient()


# =============================================================================
# Webhook verification
# =============================================================================

class WebhookVerifier:
    """Verifies signed webhook payloads with the platform SDK"""

    def __init__(self, secret: str, api_key: str = None):
        self.secret = secret
        self.client = ElevenLabs(api_key=api_key or settings.elevenlabs_api_key)

    def verify(self, raw_body: bytes, signature_header: Optional[str]) -> Dict[str, Any]:
        """Return the decoded event or raise WebhookVerificationError"""
        if not signature_header:
            raise WebhookVerificationError("Missing signature header")
        if not self.secret:
            raise WebhookVerificationError("Webhook secret is not configured")

        try:
            event = self.client.webhooks.construct_event(
                raw_body.decode("utf-8"),
                signature_header,
                self.secret,
            )
            if isinstance(event, (str, bytes)):
                event = json.loads(event)
        except (ApiError, ValueError) as e:
            raise WebhookVerificationError(str(e)) from e

        return event


def get_webhook_verifier() -> WebhookVerifier:
    """FastAPI dependency returning the webhook verifier"""
    return WebhookVerifier(settings.elevenlabs_webhook_secret)
