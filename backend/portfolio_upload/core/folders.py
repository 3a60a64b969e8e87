"""
Destination folder resolution.

Each page type is a variant that either has no sections or carries its own
section enum. Only ``about`` currently has sections.
"""

from enum import Enum
from typing import Dict, Optional, Type

from portfolio_upload.core.errors import ConfigurationError


class PageType(str, Enum):
    ABOUT = "about"
    ACHIEVEMENTS = "achievements"
    PHOTOSHOOT = "photoshoot"
    ARTISTIC = "artistic"


class AboutSection(str, Enum):
    PROFILE = "profile"
    EDUCATION = "education"
    EXPERIENCE = "experience"


PAGE_SECTIONS: Dict[PageType, Optional[Type[Enum]]] = {
    PageType.ABOUT: AboutSection,
    PageType.ACHIEVEMENTS: None,
    PageType.PHOTOSHOOT: None,
    PageType.ARTISTIC: None,
}


def resolve_folder_path(page_type, sub_type: Optional[str] = None) -> str:
    """
    Resolve the storage folder for a page type and optional section.

    Args:
        page_type: PageType or its string value
        sub_type: Section name, required when the page type has sections

    Returns:
        Folder path such as ``artistic`` or ``about/profile``

    Raises:
        ConfigurationError: Unknown page type, or missing/unknown section
    """
    try:
        page = PageType(page_type)
    except ValueError:
        valid = ", ".join(p.value for p in PageType)
        raise ConfigurationError(f'Invalid page type "{page_type}". Page must be one of: {valid}')

    sections = PAGE_SECTIONS[page]
    if sections is None:
        return page.value

    try:
        section = sections(sub_type)
    except ValueError:
        valid = ", ".join(s.value for s in sections)
        raise ConfigurationError(
            f'Invalid subType "{sub_type}" for pageType "{page.value}". '
            f"Section must be one of: {valid}"
        )

    return f"{page.value}/{section.value}"
