"""Markdown export for artifacts.

One Jinja2 template per artifact kind under ``templates/``. The section
layout mirrors the Notion export so both sinks carry the same content.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from prdforge.schemas.payloads import ArtifactKind

MARKDOWN_TEMPLATE_DIR = Path(__file__).parent / "templates"


def template_name(kind: ArtifactKind) -> str:
    return f"{kind.value}.md.j2"


class MarkdownExporter:
    """Render an artifact as a Markdown document."""

    def __init__(self):
        self.env = Environment(
            loader=FileSystemLoader(str(MARKDOWN_TEMPLATE_DIR)),
            autoescape=False,  # Markdown should NOT be escaped
            keep_trailing_newline=True,
        )

    def export(self, artifact) -> str:
        """Export a single artifact as a Markdown string.

        Args:
            artifact: Artifact row (kind, title, raw_input, payload)

        Returns:
            Markdown string
        """
        kind = ArtifactKind(artifact.kind)
        template = self.env.get_template(template_name(kind))
        return template.render(
            kind=kind.value,
            title=artifact.title,
            raw_input=artifact.raw_input,
            payload=artifact.payload or {},
        )

    @staticmethod
    def filename(artifact) -> str:
        """Download filename derived from the artifact title."""
        safe = "".join(ch if ch.isalnum() or ch in "-_ " else "" for ch in artifact.title).strip()
        return f"{'-'.join(safe.lower().split()) or 'artifact'}.md"
