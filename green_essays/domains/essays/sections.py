from dataclasses import dataclass, replace
from typing import Dict
from urllib.parse import urlencode

BASE_PATH = "/green-transition"
EDIT_QUERY_FLAG = "edit"

WHERE_WE_ARE_NOW = "where-we-are-now"
CHALLENGES_AHEAD = "challenges-ahead"
PATHWAY_FORWARD = "pathway-forward"

SECTION_TITLES: Dict[str, str] = {
    WHERE_WE_ARE_NOW: "Where We Are Now",
    CHALLENGES_AHEAD: "Challenges Ahead",
    PATHWAY_FORWARD: "Pathways Forward",
}

SECTION_DESCRIPTIONS: Dict[str, str] = {
    WHERE_WE_ARE_NOW: "Summarize the current state: energy mix, emissions, active policies, and key barriers.",
    CHALLENGES_AHEAD: "Identify gaps in policy, funding, technology, infrastructure, and market readiness.",
    PATHWAY_FORWARD: "Roadmap for implementation: sector priorities, sequence of initiatives, funding, and metrics.",
}


def section_title(key: str) -> str:
    return SECTION_TITLES.get(key, key.replace("-", " ").title())


def section_description(key: str) -> str:
    return SECTION_DESCRIPTIONS.get(key, "")


def build_section_url(section: str) -> str:
    return f"{BASE_PATH}/{section}"


def build_essay_url(section: str, slug: str, edit: bool = False) -> str:
    base_url = f"{build_section_url(section)}/{slug}"
    return f"{base_url}?{urlencode({EDIT_QUERY_FLAG: 1})}" if edit else base_url


def is_edit_flag(value) -> bool:
    """Значение query-параметра edit, означающее режим редактирования"""
    if value is None:
        return False
    return str(value).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class EssayLocation:
    """Адрес страницы эссе: сегменты пути и флаг редактирования"""
    section: str
    slug: str
    edit: bool = False

    @property
    def url(self) -> str:
        return build_essay_url(self.section, self.slug, self.edit)

    def with_edit(self, edit: bool = True) -> "EssayLocation":
        return replace(self, edit=edit)
