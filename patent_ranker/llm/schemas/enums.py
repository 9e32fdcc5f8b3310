"""Enums for the six patent evaluation categories.

Member order is the fixed iteration order used everywhere categories are
enumerated: prompt examples, mock score variation, table columns.
"""

from enum import Enum


class Category(str, Enum):
    """Evaluation category. Values are the camelCase keys used on the wire."""

    STRATEGIC_RELEVANCE = "strategicRelevance"
    TECHNICAL_STRENGTH = "technicalStrength"
    LEGAL_DURABILITY = "legalDurability"
    MARKET_LEVERAGE = "marketLeverage"
    FREEDOM_TO_OPERATE = "freedomToOperate"
    LICENSING_FEASIBILITY = "licensingFeasibility"

    @property
    def display_name(self) -> str:
        """Display name (e.g. 'Freedom to Operate')."""
        return _DISPLAY_NAMES[self]

    @property
    def question(self) -> str:
        """Evidence question the category's input field answers."""
        return _QUESTIONS[self]

    @property
    def field_name(self) -> str:
        """snake_case attribute name on the pydantic models."""
        return self.name.lower()


_DISPLAY_NAMES = {
    Category.STRATEGIC_RELEVANCE: "Strategic Relevance",
    Category.TECHNICAL_STRENGTH: "Technical Strength",
    Category.LEGAL_DURABILITY: "Legal Durability",
    Category.MARKET_LEVERAGE: "Market Leverage",
    Category.FREEDOM_TO_OPERATE: "Freedom to Operate",
    Category.LICENSING_FEASIBILITY: "Licensing Feasibility",
}

_QUESTIONS = {
    Category.STRATEGIC_RELEVANCE: "What is the patent about and which applications could it impact?",
    Category.TECHNICAL_STRENGTH: "How strong are the technical claims and methods?",
    Category.LEGAL_DURABILITY: "What does family breadth imply for long term protection?",
    Category.MARKET_LEVERAGE: "Which commercial advantages and industries could benefit?",
    Category.FREEDOM_TO_OPERATE: "Are there carve outs or design arounds and how central is the approach?",
    Category.LICENSING_FEASIBILITY: "Who owns it and how easy is licensing?",
}

CATEGORY_KEYS: tuple[str, ...] = tuple(c.value for c in Category)
