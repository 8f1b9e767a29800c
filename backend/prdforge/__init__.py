"""PRD Forge: AI-generated product-management artifacts with version history."""
