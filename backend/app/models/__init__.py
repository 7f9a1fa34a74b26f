"""Database models for the job board"""
from .user import User
from .job import Job, Skill, Tag, job_skills, job_tags
from .application import Application, application_skills

__all__ = [
    "User",
    "Job",
    "Skill",
    "Tag",
    "job_skills",
    "job_tags",
    "Application",
    "application_skills",
]
