from .jd import KeywordProfile
from .resume import Contact, Education, Experience, Project, Resume, SkillSet

__all__ = [
    "Contact",
    "Education",
    "Experience",
    "KeywordProfile",
    "Project",
    "Resume",
    "SkillSet",
]
