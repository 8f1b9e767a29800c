"""TemplateService: saved product ideas users can start a PRD from."""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prdforge.core.exceptions import NotFoundError
from prdforge.db.models.template import Template

logger = structlog.get_logger(__name__)


class TemplateService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_templates(self) -> list[Template]:
        async with self.session_factory() as session:
            result = await session.execute(select(Template).order_by(Template.created_at.desc(), Template.id.desc()))
            return list(result.scalars().all())

    async def get_template(self, template_id: int) -> Template:
        async with self.session_factory() as session:
            template = await session.get(Template, template_id)
            if template is None:
                raise NotFoundError("Template", template_id)
            return template

    async def create_template(
        self,
        name: str,
        idea: str,
        description: str | None = None,
        category: str = "custom",
    ) -> Template:
        async with self.session_factory() as session:
            template = Template(name=name, idea=idea, description=description, category=category)
            session.add(template)
            await session.commit()
            await session.refresh(template)

        logger.info("template_created", template_id=template.id, category=category)
        return template

    async def delete_template(self, template_id: int) -> None:
        """Delete a template. Missing ids are a no-op."""
        async with self.session_factory() as session:
            await session.execute(delete(Template).where(Template.id == template_id))
            await session.commit()
