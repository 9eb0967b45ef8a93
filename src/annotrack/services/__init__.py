"""Application services: decode scheduling and durable settings."""

from annotrack.services.loader import DecodeScheduler, ImmediateLoader, ThreadPoolLoader
from annotrack.services.recent_projects import RecentProjects

__all__ = ["DecodeScheduler", "ImmediateLoader", "ThreadPoolLoader", "RecentProjects"]
