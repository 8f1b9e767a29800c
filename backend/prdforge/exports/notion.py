"""Notion export: pure block builders plus an explicitly constructed API client.

Block builders turn a payload into Notion block dicts with the same section
layout as the Markdown export. NotionClient is built with injected
credentials and an optional async refresher; nothing is cached at module
level.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import httpx
import structlog

from prdforge.core.config import Settings
from prdforge.core.exceptions import ExportError, ExportUnavailableError
from prdforge.schemas.payloads import ArtifactKind

logger = structlog.get_logger(__name__)

RICH_TEXT_CHUNK = 2000
MAX_BLOCKS = 100

PAGE_ICONS: dict[ArtifactKind, str] = {
    ArtifactKind.PRD: "📋",
    ArtifactKind.USER_STORIES: "📖",
    ArtifactKind.PROBLEM_REFINER: "🎯",
    ArtifactKind.FEATURE_PRIORITIZER: "📊",
    ArtifactKind.SPRINT_PLANNER: "📅",
    ArtifactKind.INTERVIEW_PREP: "🎓",
}


# ==================== BLOCK BUILDERS ====================


def rich_text(content: str) -> list[dict]:
    """Split text into rich_text items of at most 2000 characters."""
    return [
        {"type": "text", "text": {"content": content[i : i + RICH_TEXT_CHUNK]}}
        for i in range(0, len(content), RICH_TEXT_CHUNK)
    ]


def _block(block_type: str, text: str) -> dict:
    return {"object": "block", "type": block_type, block_type: {"rich_text": rich_text(text)}}


def heading_2(text: str) -> dict:
    return _block("heading_2", text)


def heading_3(text: str) -> dict:
    return _block("heading_3", text)


def paragraph(text: str) -> dict:
    return _block("paragraph", text)


def bulleted_list_item(text: str) -> dict:
    return _block("bulleted_list_item", text)


def divider() -> dict:
    return {"object": "block", "type": "divider", "divider": {}}


def _section(blocks: list[dict], heading: str, text: str | None) -> None:
    if text:
        blocks.append(heading_2(heading))
        blocks.append(paragraph(str(text)))


def _bullets(blocks: list[dict], heading: str, items: list | None) -> None:
    if items:
        blocks.append(heading_2(heading))
        blocks.extend(bulleted_list_item(str(item)) for item in items)


def _story_blocks(blocks: list[dict], index: int, story: dict) -> None:
    blocks.append(heading_3(f"US-{index:03d}: {story.get('title', '')}"))
    blocks.append(paragraph(f"Priority: {story.get('priority', 'medium')}\n\n{story.get('description', '')}"))
    blocks.extend(bulleted_list_item(criterion) for criterion in story.get("acceptanceCriteria") or [])
    if story.get("edgeCases"):
        blocks.append(paragraph("Edge Cases:"))
        blocks.extend(bulleted_list_item(case) for case in story["edgeCases"])


def _prd_blocks(payload: dict) -> list[dict]:
    blocks: list[dict] = []
    _section(blocks, "Problem Statement", payload.get("problemStatement"))
    _section(blocks, "Target Audience", payload.get("targetAudience"))
    _bullets(blocks, "Goals & Objectives", payload.get("goals"))
    _bullets(blocks, "Key Features", payload.get("features"))
    _bullets(blocks, "Success Metrics", payload.get("successMetrics"))
    _bullets(blocks, "Out of Scope", payload.get("outOfScope"))
    _bullets(blocks, "Assumptions", payload.get("assumptions"))
    stories = payload.get("userStories") or []
    if stories:
        blocks.append(heading_2("User Stories"))
        for index, story in enumerate(stories, start=1):
            _story_blocks(blocks, index, story)
    return blocks


def _user_stories_blocks(payload: dict) -> list[dict]:
    blocks: list[dict] = []
    for index, story in enumerate(payload.get("userStories") or [], start=1):
        _story_blocks(blocks, index, story)
    return blocks


def _problem_refiner_blocks(payload: dict) -> list[dict]:
    blocks: list[dict] = []
    _section(blocks, "Original Problem", payload.get("originalProblem"))
    _section(blocks, "Refined Statement", payload.get("refinedStatement"))
    _section(blocks, "Context", payload.get("context"))
    _section(blocks, "Impact", payload.get("impact"))
    _section(blocks, "Affected Users", payload.get("affectedUsers"))
    _section(blocks, "Current Solutions", payload.get("currentSolutions"))
    _section(blocks, "Proposed Approach", payload.get("proposedApproach"))
    _bullets(blocks, "Success Criteria", payload.get("successCriteria"))
    return blocks


def _feature_prioritizer_blocks(payload: dict) -> list[dict]:
    blocks: list[dict] = []
    for feature in payload.get("features") or []:
        blocks.append(heading_3(feature.get("name", "")))
        blocks.append(
            paragraph(
                f"RICE Score: {feature.get('riceScore')} | Recommendation: {feature.get('recommendation')}\n"
                f"Reach: {feature.get('reach')} | Impact: {feature.get('impact')} | "
                f"Confidence: {feature.get('confidence')} | Effort: {feature.get('effort')}"
            )
        )
        if feature.get("reasoning"):
            blocks.append(paragraph(f"Reasoning: {feature['reasoning']}"))
        if feature.get("tradeoffs"):
            blocks.append(paragraph(f"Tradeoffs: {feature['tradeoffs']}"))
    _section(blocks, "Summary", payload.get("summary"))
    return blocks


def _sprint_planner_blocks(payload: dict) -> list[dict]:
    blocks: list[dict] = []
    _section(blocks, "Sprint Goal", payload.get("sprintGoal"))
    if payload.get("duration") or payload.get("capacity") or payload.get("totalPoints"):
        blocks.append(
            paragraph(
                f"Duration: {payload.get('duration') or 'N/A'} | "
                f"Capacity: {payload.get('capacity') or 'N/A'} | "
                f"Total Points: {payload.get('totalPoints') or 'N/A'}"
            )
        )
    stories = payload.get("stories") or []
    if stories:
        blocks.append(heading_2("Stories"))
        blocks.extend(
            bulleted_list_item(f"{s.get('title')} ({s.get('storyPoints')} pts, {s.get('priority')})") for s in stories
        )
    risks = payload.get("risks") or []
    if risks:
        blocks.append(heading_2("Risks"))
        blocks.extend(
            bulleted_list_item(f"{r.get('risk')} ({r.get('severity')}): {r.get('mitigation')}") for r in risks
        )
    _bullets(blocks, "Recommendations", payload.get("recommendations"))
    return blocks


def _interview_prep_blocks(payload: dict) -> list[dict]:
    blocks: list[dict] = []
    _section(blocks, "Question", payload.get("question"))
    if payload.get("framework"):
        blocks.append(paragraph(f"Framework: {payload['framework']}"))
    _section(blocks, "Structured Answer", payload.get("structuredAnswer"))
    _bullets(blocks, "Key Points", payload.get("keyPoints"))
    _section(blocks, "Example Scenario", payload.get("exampleScenario"))
    _bullets(blocks, "Follow-up Questions", payload.get("followUpQuestions"))
    _bullets(blocks, "Tips", payload.get("tips"))
    _section(blocks, "Feedback", payload.get("feedback"))
    return blocks


BLOCK_BUILDERS: dict[ArtifactKind, Callable[[dict], list[dict]]] = {
    ArtifactKind.PRD: _prd_blocks,
    ArtifactKind.USER_STORIES: _user_stories_blocks,
    ArtifactKind.PROBLEM_REFINER: _problem_refiner_blocks,
    ArtifactKind.FEATURE_PRIORITIZER: _feature_prioritizer_blocks,
    ArtifactKind.SPRINT_PLANNER: _sprint_planner_blocks,
    ArtifactKind.INTERVIEW_PREP: _interview_prep_blocks,
}


def build_blocks(kind: ArtifactKind, raw_input: str, payload: dict) -> list[dict]:
    """Build page children for an artifact, capped at MAX_BLOCKS."""
    blocks: list[dict] = []
    if kind is not ArtifactKind.PRD:
        blocks.append(paragraph(f"Tool: {kind.value}\nInput: {raw_input}"))
        blocks.append(divider())
    blocks.extend(BLOCK_BUILDERS[kind](payload))
    return blocks[:MAX_BLOCKS]


# ==================== CLIENT ====================


@dataclass
class NotionCredentials:
    access_token: str
    expires_at: datetime | None = None  # None means the token does not expire

    def is_valid(self, now: datetime | None = None) -> bool:
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return (now or datetime.now(UTC)) < self.expires_at


CredentialsRefresher = Callable[[], Awaitable[NotionCredentials]]


class NotionClient:
    """Client for the Notion pages API."""

    # Refresh slightly before the reported expiry
    EXPIRY_SKEW = timedelta(seconds=30)

    def __init__(
        self,
        credentials: NotionCredentials | None,
        api_url: str = "https://api.notion.com/v1",
        notion_version: str = "2022-06-28",
        refresher: CredentialsRefresher | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.credentials = credentials
        self.api_url = api_url.rstrip("/")
        self.notion_version = notion_version
        self.refresher = refresher
        self._transport = transport
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotionClient":
        """Build a client from a static integration token.

        Raises:
            ExportUnavailableError: no Notion token is configured
        """
        if not settings.notion_api_key:
            raise ExportUnavailableError("Notion export is not configured")
        return cls(
            credentials=NotionCredentials(access_token=settings.notion_api_key),
            api_url=settings.notion_api_url,
            notion_version=settings.notion_version,
        )

    async def _get_access_token(self) -> str:
        """Return a valid access token, refreshing it when expired."""
        now = datetime.now(UTC) + self.EXPIRY_SKEW
        if self.credentials is not None and self.credentials.is_valid(now):
            return self.credentials.access_token

        if self.refresher is None:
            raise ExportUnavailableError("Notion is not connected")

        self.credentials = await self.refresher()
        if not self.credentials.access_token:
            raise ExportUnavailableError("Notion is not connected")
        logger.info("notion_token_refreshed")
        return self.credentials.access_token

    async def _request(self, method: str, endpoint: str, data: dict | None = None) -> dict:
        token = await self._get_access_token()
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                response = await client.request(
                    method,
                    f"{self.api_url}{endpoint}",
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Notion-Version": self.notion_version,
                        "Content-Type": "application/json",
                    },
                    json=data,
                )
            except httpx.HTTPError as exc:
                logger.warning("notion_request_failed", endpoint=endpoint, error=str(exc))
                raise ExportError("Failed to reach Notion") from exc

        if response.status_code >= 400:
            logger.warning("notion_api_error", endpoint=endpoint, status_code=response.status_code)
            raise ExportError(f"Notion API error ({response.status_code})")
        return response.json()

    async def create_page(self, parent_page_id: str, title: str, children: list[dict], icon: str | None = None) -> str:
        """Create a child page and return its URL."""
        body: dict = {
            "parent": {"page_id": parent_page_id},
            "properties": {"title": {"title": [{"type": "text", "text": {"content": title}}]}},
            "children": children[:MAX_BLOCKS],
        }
        if icon:
            body["icon"] = {"type": "emoji", "emoji": icon}
        page = await self._request("POST", "/pages", body)
        return page.get("url", "")

    async def search_pages(self, query: str = "") -> list[dict]:
        """Search pages the integration can access, for picking an export parent."""
        data = await self._request(
            "POST",
            "/search",
            {"query": query, "filter": {"property": "object", "value": "page"}, "page_size": 20},
        )
        pages = []
        for page in data.get("results", []):
            properties = page.get("properties") or {}
            title_prop = (properties.get("title") or properties.get("Name") or {}).get("title") or []
            pages.append(
                {
                    "id": page.get("id"),
                    "title": title_prop[0].get("plain_text", "Untitled") if title_prop else "Untitled",
                    "icon": (page.get("icon") or {}).get("emoji"),
                    "url": page.get("url"),
                }
            )
        return pages


async def export_artifact(client: NotionClient, artifact, parent_page_id: str) -> str:
    """Export an artifact as a Notion page under ``parent_page_id``.

    Returns:
        URL of the created page
    """
    kind = ArtifactKind(artifact.kind)
    blocks = build_blocks(kind, artifact.raw_input, artifact.payload or {})
    url = await client.create_page(parent_page_id, artifact.title, blocks, icon=PAGE_ICONS[kind])
    logger.info("notion_export_completed", artifact_id=str(artifact.id), blocks=len(blocks))
    return url
